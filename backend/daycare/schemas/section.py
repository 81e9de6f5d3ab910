"""Section 요청/응답 계약을 위한 Pydantic 스키마입니다."""

from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class SectionBase(BaseModel):
    name: str
    description: Optional[str] = None
    teacher_id: Optional[int] = None


class SectionCreate(SectionBase):
    student_ids: list[int] = []


class SectionUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    teacher_id: Optional[int] = None
    is_active: Optional[bool] = None


class SectionStudentsUpdate(BaseModel):
    student_ids: list[int]


class SectionOut(SectionBase):
    section_id: int
    is_active: bool
    student_ids: list[int] = []
    created_at: datetime

    model_config = {"from_attributes": True}
