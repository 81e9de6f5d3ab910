"""인앱 알림 모델 정의입니다. 등원/하원 기록에서 생성된 알림은 해당 출석 기록을 가리킵니다."""

from sqlalchemy import Column, Integer, String, Text, DateTime, Boolean, ForeignKey, Index
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from daycare.database import Base


class Notification(Base):
    __tablename__ = "notification"

    noti_id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.user_id"), nullable=False)
    noti_type = Column(String(30), nullable=False)  # attendance/announcement
    title = Column(String(200), nullable=False)
    message = Column(Text)
    link_url = Column(String(500))
    attendance_id = Column(
        Integer,
        ForeignKey("attendance_record.attendance_id", ondelete="SET NULL"),
        nullable=True,
    )
    is_read = Column(Boolean, default=False)
    created_at = Column(DateTime, server_default=func.now())

    user = relationship("User", back_populates="notifications")

    __table_args__ = (
        Index("idx_notification_user_unread", "user_id", "is_read"),
    )
