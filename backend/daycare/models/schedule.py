"""Schedule 도메인의 SQLAlchemy 모델 정의입니다."""

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Index
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from daycare.database import Base
from daycare.utils.attendance_time import DaySchedule


class ClassSchedule(Base):
    __tablename__ = "class_schedule"

    schedule_id = Column(Integer, primary_key=True, autoincrement=True)
    section_id = Column(Integer, ForeignKey("section.section_id"), nullable=False)
    day = Column(String(10), nullable=False)  # Sunday..Saturday
    # 시간 컬럼은 "h:mm AM" 형식으로 저장한다.
    time_in_start = Column(String(10), nullable=False)
    time_in_end = Column(String(10))
    time_out_start = Column(String(10))
    time_out_end = Column(String(10), nullable=False)
    grace_period_minutes = Column(Integer, nullable=False, default=15)
    created_by = Column(Integer, ForeignKey("users.user_id"), nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, onupdate=func.now())

    section = relationship("Section", back_populates="schedules")
    attendance_records = relationship("AttendanceRecord", back_populates="schedule", cascade="all, delete-orphan")

    __table_args__ = (
        Index("idx_schedule_section_day", "section_id", "day"),
    )

    def to_day_schedule(self) -> DaySchedule:
        return DaySchedule.from_strings(
            day=self.day,
            time_in_start=self.time_in_start,
            time_in_end=self.time_in_end,
            time_out_start=self.time_out_start,
            time_out_end=self.time_out_end,
            grace_period_minutes=self.grace_period_minutes if self.grace_period_minutes is not None else 15,
            schedule_id=self.schedule_id,
        )
