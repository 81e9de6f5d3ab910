"""FastAPI 애플리케이션 진입점. 로깅, 미들웨어, API 라우터를 등록합니다."""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from daycare.config import settings
from daycare.database import Base, engine
import daycare.models  # noqa: F401 - 모델 import로 metadata 등록
from daycare.routers import auth, users, sections, schedules, attendance, notifications

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Daycare 출석 관리 시스템",
    description="반별 입실/퇴실 시간대 기반 출석 판정과 키오스크 체크인 API",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register all routers
app.include_router(auth.router)
app.include_router(users.router)
app.include_router(sections.router)
app.include_router(schedules.router)
app.include_router(attendance.router)
app.include_router(notifications.router)


# 구버전 SQLite DB에 없는 컬럼: (테이블, 컬럼, DDL 타입, 기존 행 기본값 SQL)
_SQLITE_COLUMN_PATCHES = (
    ("class_schedule", "grace_period_minutes", "INTEGER", "15"),
    ("attendance_record", "source", "VARCHAR(20)", "'manual'"),
    ("notification", "attendance_id", "INTEGER", None),
)


def _sync_sqlite_columns():
    with engine.begin() as conn:
        for table, column, ddl_type, backfill in _SQLITE_COLUMN_PATCHES:
            rows = conn.execute(text(f"PRAGMA table_info({table})")).fetchall()
            if column in {str(row[1]) for row in rows}:
                continue
            logger.info("[schema] adding column %s.%s", table, column)
            conn.execute(text(f"ALTER TABLE {table} ADD COLUMN {column} {ddl_type}"))
            if backfill is not None:
                conn.execute(text(f"UPDATE {table} SET {column} = {backfill} WHERE {column} IS NULL"))


@app.on_event("startup")
def ensure_schema():
    # 신규 기능 배포 시 누락된 테이블을 자동 생성합니다.
    Base.metadata.create_all(bind=engine)
    if "sqlite" in settings.DATABASE_URL:
        _sync_sqlite_columns()


@app.get("/api/health")
def health_check():
    return {"status": "ok", "service": "Daycare 출석 관리 시스템"}
