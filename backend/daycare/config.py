"""환경 변수 기반 애플리케이션 설정을 중앙에서 관리합니다."""

from pydantic_settings import BaseSettings
from typing import List
from pathlib import Path


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./daycare.db"
    SECRET_KEY: str = "change-me-to-a-random-secret-key"
    DEBUG: bool = True
    ALLOWED_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:5173"]
    LOG_LEVEL: str = "INFO"

    # JWT
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 480

    # Attendance
    # 스케줄 생성 시 유예 시간을 지정하지 않으면 이 값을 사용한다.
    ATTENDANCE_GRACE_PERIOD_MINUTES: int = 15
    ATTENDANCE_NOTIFY_ENABLED: bool = True

    class Config:
        # 실행 cwd와 무관하게 backend/.env를 로드한다.
        env_file = str(Path(__file__).resolve().parents[1] / ".env")


settings = Settings()
