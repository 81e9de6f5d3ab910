"""SQLAlchemy 모델 패키지 초기화 모듈입니다."""

from daycare.models.user import User
from daycare.models.section import Section, SectionMember
from daycare.models.schedule import ClassSchedule
from daycare.models.attendance import AttendanceRecord
from daycare.models.notification import Notification

__all__ = [
    "User",
    "Section", "SectionMember",
    "ClassSchedule",
    "AttendanceRecord",
    "Notification",
]
