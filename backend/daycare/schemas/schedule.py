"""Schedule 요청/응답 계약을 위한 Pydantic 스키마입니다."""

from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime


class ClassScheduleBase(BaseModel):
    day: str
    # "8:00 AM" 또는 "08:00" 형식 모두 허용하며 저장 시 12시간 형식으로 정규화한다.
    time_in_start: str
    time_in_end: Optional[str] = None
    time_out_start: Optional[str] = None
    time_out_end: str


class ClassScheduleCreate(ClassScheduleBase):
    section_id: int
    grace_period_minutes: Optional[int] = Field(default=None, ge=0)


class ClassScheduleUpdate(BaseModel):
    section_id: Optional[int] = None
    day: Optional[str] = None
    time_in_start: Optional[str] = None
    time_in_end: Optional[str] = None
    time_out_start: Optional[str] = None
    time_out_end: Optional[str] = None
    grace_period_minutes: Optional[int] = Field(default=None, ge=0)


class ClassScheduleOut(ClassScheduleBase):
    schedule_id: int
    section_id: int
    grace_period_minutes: int
    created_by: Optional[int] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
