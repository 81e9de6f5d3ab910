"""Attendance Service 도메인 서비스 레이어입니다. 스캔/수동 출석 흐름에서 시간대 판정 엔진을 호출하고 결과를 저장합니다."""

import json
import logging
from datetime import date, datetime
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from daycare.config import settings
from daycare.models.attendance import AttendanceRecord
from daycare.models.schedule import ClassSchedule
from daycare.models.user import User
from daycare.schemas.attendance import AttendanceMarkRequest, EvaluateRequest, PreviewRequest, ScanRequest
from daycare.services import notification_service, schedule_service
from daycare.utils.attendance_time import (
    AttendanceStatus,
    AttendanceType,
    DaySchedule,
    TimeOfDay,
    classify_window,
    evaluate_status,
    format_attendance_message,
    grace_period_end,
    normalize_weekday,
    parse_time,
    select_active_schedule,
    time_of,
    weekday_name,
)
from daycare.utils.permissions import can_scan_for, can_view_student, is_parent, is_section_member, is_staff

logger = logging.getLogger(__name__)

QR_TYPE_SCHEDULE = "schedule"
QR_TYPE_STUDENT = "student"
DIRECTIONS = (AttendanceType.TIME_IN.value, AttendanceType.TIME_OUT.value)


def _resolve_observation(
    current_day: Optional[str],
    current_time: Optional[str],
    now: Optional[datetime] = None,
) -> tuple[str, TimeOfDay]:
    # 클라이언트가 보낸 요일/시각은 변환 없이 그대로 사용한다.
    now = now or datetime.now()
    if current_day:
        day = normalize_weekday(current_day)
        if day is None:
            raise HTTPException(status_code=400, detail="요일은 Sunday~Saturday 중 하나여야 합니다.")
    else:
        day = weekday_name(now)

    if current_time:
        moment = parse_time(current_time)
        if moment is None:
            raise HTTPException(status_code=400, detail=f"유효하지 않은 시간 형식입니다: {current_time}")
    else:
        moment = time_of(now)
    return day, moment


def _to_day_schedule(schedule: ClassSchedule) -> DaySchedule:
    try:
        return schedule.to_day_schedule()
    except ValueError as exc:
        logger.warning("[attendance] schedule=%s has invalid stored times: %s", schedule.schedule_id, exc)
        raise HTTPException(status_code=409, detail="스케줄 시간 설정이 올바르지 않습니다. 관리자에게 문의하세요.")


def _scheduled_time_for(day_schedule: DaySchedule, attendance_type: str) -> TimeOfDay:
    if attendance_type == AttendanceType.TIME_OUT.value:
        return day_schedule.time_out_window.start
    return day_schedule.time_in_start


def _get_student(db: Session, student_id) -> User:
    try:
        student_id = int(student_id)
    except (TypeError, ValueError):
        raise HTTPException(status_code=400, detail="유효하지 않은 원아 ID입니다.")
    student = db.query(User).filter(User.user_id == student_id, User.is_active == True).first()  # noqa: E712
    if not student:
        raise HTTPException(status_code=404, detail="원아를 찾을 수 없습니다.")
    return student


def _ensure_assigned(db: Session, schedule: ClassSchedule, student: User):
    if not is_section_member(db, schedule.section_id, student.user_id):
        raise HTTPException(status_code=404, detail="해당 스케줄의 반에 배정된 원아가 아닙니다.")


def _normalize_optional_time(label: str, raw: Optional[str]) -> Optional[TimeOfDay]:
    if raw is None or not raw.strip():
        return None
    parsed = parse_time(raw)
    if parsed is None:
        raise HTTPException(status_code=400, detail=f"{label}: 유효하지 않은 시간 형식입니다.")
    return parsed


def _find_record(db: Session, schedule_id: int, student_id: int, attendance_date: date) -> Optional[AttendanceRecord]:
    return db.query(AttendanceRecord).filter(
        AttendanceRecord.schedule_id == schedule_id,
        AttendanceRecord.student_id == student_id,
        AttendanceRecord.attendance_date == attendance_date,
    ).first()


def _upsert_record(
    db: Session,
    *,
    schedule_id: int,
    student_id: int,
    attendance_date: date,
    values: dict,
    defaults: Optional[dict] = None,
) -> AttendanceRecord:
    record = _find_record(db, schedule_id, student_id, attendance_date)
    if record is not None:
        for k, v in values.items():
            setattr(record, k, v)
        db.commit()
        db.refresh(record)
        return record

    record = AttendanceRecord(
        schedule_id=schedule_id,
        student_id=student_id,
        attendance_date=attendance_date,
        **{**(defaults or {}), **values},
    )
    db.add(record)
    try:
        db.commit()
    except IntegrityError:
        # 동시 요청이 먼저 기록을 만든 경우 갱신으로 한 번만 재시도한다.
        db.rollback()
        logger.warning(
            "[attendance] concurrent insert schedule=%s student=%s date=%s, retrying as update",
            schedule_id,
            student_id,
            attendance_date,
        )
        record = _find_record(db, schedule_id, student_id, attendance_date)
        if record is None:
            raise
        for k, v in values.items():
            setattr(record, k, v)
        db.commit()
    db.refresh(record)
    return record


def _join_notes(existing: Optional[str], addition: Optional[str]) -> Optional[str]:
    if not existing:
        return addition
    if not addition or addition in existing:
        return existing
    return f"{existing}\n{addition}"


def _parse_qr_payload(qr_data: Optional[str]) -> Optional[dict]:
    if not qr_data:
        return None
    try:
        payload = json.loads(qr_data)
    except ValueError:
        raise HTTPException(status_code=400, detail="QR 코드 데이터 형식이 올바르지 않습니다.")
    if not isinstance(payload, dict):
        raise HTTPException(status_code=400, detail="QR 코드 데이터 형식이 올바르지 않습니다.")
    qr_type = payload.get("type")
    if qr_type == QR_TYPE_SCHEDULE and payload.get("id") is not None:
        return payload
    if qr_type == QR_TYPE_STUDENT and payload.get("studentId") is not None:
        return payload
    raise HTTPException(status_code=400, detail='QR 코드 유형은 "schedule" 또는 "student"여야 합니다.')


def _notify_attendance(db: Session, student: User, record: AttendanceRecord, attendance_type: str, message: str):
    if not settings.ATTENDANCE_NOTIFY_ENABLED:
        return
    title = "등원 알림" if attendance_type == AttendanceType.TIME_IN.value else "하원 알림"
    try:
        notification_service.create_notification(
            db,
            user_id=student.user_id,
            noti_type="attendance",
            title=title,
            message=f"{student.display_name}: {message}",
            link_url=f"/attendance?schedule_id={record.schedule_id}",
            attendance_id=record.attendance_id,
        )
    except Exception as exc:
        db.rollback()
        logger.warning("[attendance] notification skipped for student=%s: %s", student.user_id, exc)


def evaluate(data: EvaluateRequest) -> dict:
    result = evaluate_status(data.scheduled_time, data.actual_time, data.grace_period_minutes)
    end = grace_period_end(data.scheduled_time, data.grace_period_minutes)
    return {
        "status_result": result.to_dict(),
        "status_message": format_attendance_message(result, data.attendance_type),
        "grace_period_end": str(end) if end is not None else None,
    }


def preview(db: Session, data: PreviewRequest, now: Optional[datetime] = None) -> dict:
    schedule = schedule_service.get_schedule(db, data.schedule_id)
    day_schedule = _to_day_schedule(schedule)
    day, moment = _resolve_observation(data.current_day, data.current_time, now)

    classification = classify_window(day_schedule, day, moment)
    response = {
        "schedule_id": schedule.schedule_id,
        "current_day": day,
        "current_time": str(moment),
        "classification": classification.to_dict(),
        "status_result": None,
        "status_message": None,
    }
    if not classification.is_outside:
        direction = classification.kind.value
        result = evaluate_status(
            _scheduled_time_for(day_schedule, direction),
            moment,
            day_schedule.grace_period_minutes,
        )
        response["status_result"] = result.to_dict()
        response["status_message"] = format_attendance_message(result, direction)
    return response


def mark_attendance(db: Session, data: AttendanceMarkRequest, current_user: User) -> AttendanceRecord:
    schedule = schedule_service.get_schedule(db, data.schedule_id)
    student = _get_student(db, data.student_id)
    _ensure_assigned(db, schedule, student)

    time_in = _normalize_optional_time("time_in", data.time_in)
    time_out = _normalize_optional_time("time_out", data.time_out)
    if data.status is None and time_in is None:
        raise HTTPException(status_code=400, detail="출석 상태 또는 입실 시간이 필요합니다.")

    values = {"source": "manual", "recorded_by": current_user.user_id}
    note = data.notes
    if time_in is not None:
        day_schedule = _to_day_schedule(schedule)
        result = evaluate_status(day_schedule.time_in_start, time_in, day_schedule.grace_period_minutes)
        values["time_in"] = str(time_in)
        values["minutes_late"] = result.minutes_late
        values["status"] = result.status.value
        note = note or format_attendance_message(result, AttendanceType.TIME_IN)
    if data.status is not None:
        # 수동으로 지정한 상태가 계산된 상태보다 우선한다.
        values["status"] = data.status
        if data.status == AttendanceStatus.ABSENT.value:
            values["minutes_late"] = 0
    if time_out is not None:
        values["time_out"] = str(time_out)
    if note is not None:
        values["notes"] = note

    record = _upsert_record(
        db,
        schedule_id=schedule.schedule_id,
        student_id=student.user_id,
        attendance_date=data.attendance_date or date.today(),
        values=values,
        defaults={"minutes_late": 0},
    )
    logger.info(
        "[attendance] manual mark schedule=%s student=%s status=%s by=%s",
        schedule.schedule_id,
        student.user_id,
        record.status,
        current_user.user_id,
    )
    return record


def _resolve_scan_student(db: Session, data: ScanRequest, payload: Optional[dict], current_user: User) -> User:
    if data.rfid_tag:
        student = db.query(User).filter(
            User.rfid_tag == data.rfid_tag.strip(),
            User.is_active == True,  # noqa: E712
        ).first()
        if not student:
            raise HTTPException(status_code=404, detail="등록되지 않은 RFID 태그입니다.")
        return student
    if payload and payload.get("type") == QR_TYPE_STUDENT:
        return _get_student(db, payload.get("studentId"))
    if data.student_id is not None:
        return _get_student(db, data.student_id)
    if is_parent(current_user):
        return current_user
    raise HTTPException(status_code=400, detail="출석할 원아를 식별할 수 없습니다.")


def _resolve_scan_schedule(db: Session, payload: Optional[dict], student: User, day: str, moment: TimeOfDay) -> ClassSchedule:
    if payload and payload.get("type") == QR_TYPE_SCHEDULE:
        try:
            schedule_id = int(payload.get("id"))
        except (TypeError, ValueError):
            raise HTTPException(status_code=400, detail="QR 코드의 스케줄 ID가 올바르지 않습니다.")
        return schedule_service.get_schedule(db, schedule_id)

    candidates = schedule_service.schedules_for_student(db, student.user_id, day)
    by_id = {s.schedule_id: s for s in candidates}
    active = select_active_schedule([_to_day_schedule(s) for s in candidates], day, moment)
    if active is None:
        raise HTTPException(status_code=404, detail=f"{day}에 예정된 출석 스케줄이 없습니다.")
    return by_id[active.schedule_id]


def scan(db: Session, data: ScanRequest, current_user: User, now: Optional[datetime] = None) -> dict:
    """Kiosk/QR/RFID check-in: resolve student and schedule, pick the direction, record the tap."""
    payload = _parse_qr_payload(data.qr_data)
    student = _resolve_scan_student(db, data, payload, current_user)
    if not can_scan_for(current_user, student):
        raise HTTPException(status_code=403, detail="본인(원아)의 출석만 처리할 수 있습니다.")

    day, moment = _resolve_observation(data.current_day, data.current_time, now)
    attendance_date = data.attendance_date or (now or datetime.now()).date()
    if data.current_day and data.attendance_date is None and weekday_name(attendance_date) != day:
        # 단말기 요일과 서버 날짜가 어긋나면 다른 날짜로 기록될 수 있다.
        raise HTTPException(
            status_code=400,
            detail=f"요청 요일({day})이 기록 날짜({attendance_date}, {weekday_name(attendance_date)})와 다릅니다. attendance_date를 함께 보내주세요.",
        )
    schedule = _resolve_scan_schedule(db, payload, student, day, moment)
    _ensure_assigned(db, schedule, student)
    day_schedule = _to_day_schedule(schedule)

    explicit_type = None
    if payload and payload.get("type") == QR_TYPE_SCHEDULE:
        explicit_type = payload.get("attendanceType")
    explicit_type = explicit_type or data.attendance_type

    classification = classify_window(day_schedule, day, moment)
    if explicit_type:
        if explicit_type not in DIRECTIONS:
            raise HTTPException(status_code=400, detail="출석 유형은 timeIn 또는 timeOut이어야 합니다.")
        direction = explicit_type
    else:
        if classification.is_outside:
            raise HTTPException(status_code=400, detail=classification.message)
        direction = classification.kind.value

    source = "rfid" if data.rfid_tag else "qr" if data.qr_data else "manual"
    result = evaluate_status(
        _scheduled_time_for(day_schedule, direction),
        moment,
        day_schedule.grace_period_minutes,
    )
    status_message = format_attendance_message(result, direction)

    if direction == AttendanceType.TIME_IN.value:
        values = {
            "status": result.status.value,
            "time_in": str(moment),
            "minutes_late": result.minutes_late,
            "notes": data.notes or status_message,
            "source": source,
            "recorded_by": current_user.user_id,
        }
        defaults = {}
    else:
        # 퇴실은 출석 상태를 바꾸지 않고 시간과 메모만 남긴다.
        existing = _find_record(db, schedule.schedule_id, student.user_id, attendance_date)
        values = {
            "time_out": str(moment),
            "notes": _join_notes(existing.notes if existing else None, data.notes or status_message),
            "recorded_by": current_user.user_id,
        }
        defaults = {"status": AttendanceStatus.PRESENT.value, "minutes_late": 0, "source": source}

    record = _upsert_record(
        db,
        schedule_id=schedule.schedule_id,
        student_id=student.user_id,
        attendance_date=attendance_date,
        values=values,
        defaults=defaults,
    )
    logger.info(
        "[attendance] %s scan student=%s schedule=%s time=%s status=%s source=%s",
        direction,
        student.user_id,
        schedule.schedule_id,
        moment,
        record.status,
        source,
    )
    _notify_attendance(db, student, record, direction, status_message)

    if direction == AttendanceType.TIME_IN.value:
        message = f"{result.status.value.upper()}: {status_message} for {student.display_name}"
        status_result = result.to_dict()
    else:
        message = f"TIMED OUT: {student.display_name} has been timed out at {moment}"
        status_result = None

    return {
        "attendance": record,
        "attendance_type": direction,
        "classification_message": classification.message,
        "status_result": status_result,
        "status_message": status_message,
        "message": message,
    }


def list_attendance(
    db: Session,
    schedule_id: Optional[int] = None,
    attendance_date: Optional[date] = None,
) -> list[AttendanceRecord]:
    q = db.query(AttendanceRecord)
    if schedule_id:
        q = q.filter(AttendanceRecord.schedule_id == schedule_id)
    if attendance_date:
        q = q.filter(AttendanceRecord.attendance_date == attendance_date)
    return q.order_by(AttendanceRecord.attendance_date.desc(), AttendanceRecord.attendance_id).all()


def student_history(db: Session, student_id: int, current_user: User, limit: int = 100) -> list[AttendanceRecord]:
    if not can_view_student(current_user, student_id):
        raise HTTPException(status_code=403, detail="해당 원아의 출석 기록을 조회할 권한이 없습니다.")
    return (
        db.query(AttendanceRecord)
        .filter(AttendanceRecord.student_id == student_id)
        .order_by(AttendanceRecord.attendance_date.desc(), AttendanceRecord.attendance_id.desc())
        .limit(limit)
        .all()
    )


def today_status(
    db: Session,
    current_user: User,
    student_id: Optional[int] = None,
    today: Optional[date] = None,
) -> dict:
    today = today or date.today()
    if student_id is None:
        if is_staff(current_user):
            raise HTTPException(status_code=400, detail="student_id가 필요합니다.")
        student_id = current_user.user_id
    if not can_view_student(current_user, student_id):
        raise HTTPException(status_code=403, detail="해당 원아의 출석 기록을 조회할 권한이 없습니다.")

    day = weekday_name(today)
    items = []
    for schedule in schedule_service.schedules_for_student(db, student_id, day):
        items.append({
            "schedule": schedule,
            "record": _find_record(db, schedule.schedule_id, student_id, today),
        })
    return {"attendance_date": today, "day": day, "items": items}
