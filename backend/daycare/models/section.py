"""Section(반) 도메인의 SQLAlchemy 모델 정의입니다."""

from sqlalchemy import Column, Integer, String, Text, DateTime, Boolean, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from daycare.database import Base


class Section(Base):
    __tablename__ = "section"

    section_id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), unique=True, nullable=False)
    description = Column(Text)
    teacher_id = Column(Integer, ForeignKey("users.user_id"), nullable=True)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, server_default=func.now())

    teacher = relationship("User", foreign_keys=[teacher_id])
    members = relationship("SectionMember", back_populates="section", cascade="all, delete-orphan")
    schedules = relationship("ClassSchedule", back_populates="section", cascade="all, delete-orphan")

    @property
    def student_ids(self) -> list[int]:
        return [m.user_id for m in self.members]


class SectionMember(Base):
    __tablename__ = "section_member"

    member_id = Column(Integer, primary_key=True, autoincrement=True)
    section_id = Column(Integer, ForeignKey("section.section_id"), nullable=False)
    user_id = Column(Integer, ForeignKey("users.user_id"), nullable=False)
    created_at = Column(DateTime, server_default=func.now())

    section = relationship("Section", back_populates="members")
    user = relationship("User", back_populates="section_memberships")

    __table_args__ = (
        UniqueConstraint("section_id", "user_id", name="uq_section_member"),
    )
