"""SQLAlchemy 엔진과 세션 팩토리, 요청 단위 DB 세션 의존성을 제공합니다."""

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from daycare.config import settings


def _engine_kwargs(url: str) -> dict:
    if url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    return {"pool_pre_ping": True, "pool_recycle": 1800}


engine = create_engine(settings.DATABASE_URL, **_engine_kwargs(settings.DATABASE_URL))
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
