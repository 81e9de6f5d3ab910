"""일자 기반 출석 기록 모델 정의입니다."""

from sqlalchemy import Column, Integer, Date, DateTime, String, Text, ForeignKey, UniqueConstraint, Index
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from daycare.database import Base


class AttendanceRecord(Base):
    __tablename__ = "attendance_record"

    attendance_id = Column(Integer, primary_key=True, autoincrement=True)
    schedule_id = Column(Integer, ForeignKey("class_schedule.schedule_id"), nullable=False)
    student_id = Column(Integer, ForeignKey("users.user_id"), nullable=False)
    attendance_date = Column(Date, nullable=False)
    status = Column(String(20), nullable=False)  # present/late/absent
    time_in = Column(String(10))
    time_out = Column(String(10))
    minutes_late = Column(Integer, nullable=False, default=0)
    notes = Column(Text)
    source = Column(String(20), nullable=False, default="manual")  # manual/qr/rfid
    recorded_by = Column(Integer, ForeignKey("users.user_id"), nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    schedule = relationship("ClassSchedule", back_populates="attendance_records")
    student = relationship("User", foreign_keys=[student_id], back_populates="attendance_records")

    __table_args__ = (
        UniqueConstraint("schedule_id", "student_id", "attendance_date", name="uq_attendance_schedule_student_date"),
        Index("idx_attendance_student_date", "student_id", "attendance_date"),
    )
