"""User 도메인의 SQLAlchemy 모델 정의입니다."""

from sqlalchemy import Column, Integer, String, Boolean, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from daycare.database import Base


class User(Base):
    __tablename__ = "users"

    user_id = Column(Integer, primary_key=True, autoincrement=True)
    login_id = Column(String(50), unique=True, nullable=False)
    name = Column(String(100), nullable=False)
    role = Column(String(20), nullable=False)  # admin/teacher/parent
    email = Column(String(100))
    phone = Column(String(30))
    # 학부모 계정이 원아를 대표한다.
    child_name = Column(String(100))
    rfid_tag = Column(String(64), unique=True, nullable=True)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, server_default=func.now())

    section_memberships = relationship("SectionMember", back_populates="user", cascade="all, delete-orphan")
    attendance_records = relationship(
        "AttendanceRecord",
        foreign_keys="AttendanceRecord.student_id",
        back_populates="student",
    )
    notifications = relationship("Notification", back_populates="user")

    @property
    def display_name(self) -> str:
        return self.child_name or self.name

    @property
    def section_ids(self) -> list[int]:
        return [m.section_id for m in self.section_memberships]
