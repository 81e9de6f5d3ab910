"""출석 판정/기록 요청·응답 스키마입니다."""

from datetime import date, datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field

from daycare.schemas.schedule import ClassScheduleOut


AttendanceTypeLiteral = Literal["timeIn", "timeOut"]
AttendanceStatusLiteral = Literal["present", "late", "absent"]


class AttendanceRecordOut(BaseModel):
    attendance_id: int
    schedule_id: int
    student_id: int
    attendance_date: date
    status: str
    time_in: Optional[str] = None
    time_out: Optional[str] = None
    minutes_late: int
    notes: Optional[str] = None
    source: str
    recorded_by: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class StatusResultOut(BaseModel):
    status: AttendanceStatusLiteral
    minutes_late: int
    is_on_time: bool
    error: Optional[str] = None


class ClassificationOut(BaseModel):
    type: Literal["timeIn", "timeOut", "outside"]
    message: str


class EvaluateRequest(BaseModel):
    scheduled_time: Optional[str] = None
    actual_time: Optional[str] = None
    grace_period_minutes: int = Field(default=15, ge=0)
    attendance_type: AttendanceTypeLiteral = "timeIn"


class EvaluateResponse(BaseModel):
    status_result: StatusResultOut
    status_message: str
    grace_period_end: Optional[str] = None


class PreviewRequest(BaseModel):
    schedule_id: int
    current_day: Optional[str] = None
    current_time: Optional[str] = None


class PreviewResponse(BaseModel):
    schedule_id: int
    current_day: str
    current_time: str
    classification: ClassificationOut
    status_result: Optional[StatusResultOut] = None
    status_message: Optional[str] = None


class AttendanceMarkRequest(BaseModel):
    schedule_id: int
    student_id: int
    attendance_date: Optional[date] = None
    status: Optional[AttendanceStatusLiteral] = None
    time_in: Optional[str] = None
    time_out: Optional[str] = None
    notes: Optional[str] = None


class ScanRequest(BaseModel):
    qr_data: Optional[str] = None
    rfid_tag: Optional[str] = None
    student_id: Optional[int] = None
    attendance_type: Optional[str] = None
    current_day: Optional[str] = None
    current_time: Optional[str] = None
    attendance_date: Optional[date] = None
    notes: Optional[str] = None


class ScanResponse(BaseModel):
    attendance: AttendanceRecordOut
    attendance_type: AttendanceTypeLiteral
    classification_message: Optional[str] = None
    status_result: Optional[StatusResultOut] = None
    status_message: str
    message: str


class TodayScheduleAttendanceOut(BaseModel):
    schedule: ClassScheduleOut
    record: Optional[AttendanceRecordOut] = None


class TodayAttendanceOut(BaseModel):
    attendance_date: date
    day: str
    items: list[TodayScheduleAttendanceOut]
