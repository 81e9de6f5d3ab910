"""서비스 레이어 패키지 초기화 모듈입니다."""

from daycare.services import (
    auth_service,
    user_service,
    section_service,
    schedule_service,
    notification_service,
    attendance_service,
)
