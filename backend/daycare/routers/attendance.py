"""출석 판정/기록 API 라우터입니다. 키오스크(QR/RFID) 스캔, 수동 기록, 실시간 판정 미리보기를 제공합니다."""

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from daycare.database import get_db
from daycare.middleware.auth_middleware import get_current_user, require_staff
from daycare.models.user import User
from daycare.schemas.attendance import (
    AttendanceMarkRequest,
    AttendanceRecordOut,
    EvaluateRequest,
    EvaluateResponse,
    PreviewRequest,
    PreviewResponse,
    ScanRequest,
    ScanResponse,
    TodayAttendanceOut,
)
from daycare.services import attendance_service

router = APIRouter(prefix="/api/attendance", tags=["attendance"])


@router.post("/evaluate", response_model=EvaluateResponse)
def evaluate(
    data: EvaluateRequest,
    _current_user: User = Depends(get_current_user),
):
    return attendance_service.evaluate(data)


@router.post("/preview", response_model=PreviewResponse)
def preview(
    data: PreviewRequest,
    db: Session = Depends(get_db),
    _current_user: User = Depends(get_current_user),
):
    return attendance_service.preview(db, data)


@router.post("/scan", response_model=ScanResponse)
def scan(
    data: ScanRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return attendance_service.scan(db, data, current_user)


@router.post("", response_model=AttendanceRecordOut)
def mark_attendance(
    data: AttendanceMarkRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_staff),
):
    return attendance_service.mark_attendance(db, data, current_user)


@router.get("", response_model=List[AttendanceRecordOut])
def list_attendance(
    schedule_id: Optional[int] = Query(None),
    attendance_date: Optional[date] = Query(None),
    db: Session = Depends(get_db),
    _current_user: User = Depends(require_staff),
):
    return attendance_service.list_attendance(db, schedule_id, attendance_date)


@router.get("/today", response_model=TodayAttendanceOut)
def today_status(
    student_id: Optional[int] = Query(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return attendance_service.today_status(db, current_user, student_id)


@router.get("/students/{student_id}", response_model=List[AttendanceRecordOut])
def student_history(
    student_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return attendance_service.student_history(db, student_id, current_user)
