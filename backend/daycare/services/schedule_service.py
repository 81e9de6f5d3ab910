"""Schedule Service 도메인 서비스 레이어입니다. 입실/퇴실 시간대 검증과 저장을 담당합니다."""

import logging

from fastapi import HTTPException
from sqlalchemy.orm import Session

from daycare.config import settings
from daycare.models.schedule import ClassSchedule
from daycare.models.section import SectionMember
from daycare.models.user import User
from daycare.schemas.schedule import ClassScheduleCreate, ClassScheduleUpdate
from daycare.services import section_service
from daycare.utils.attendance_time import DaySchedule, InvalidScheduleError, normalize_weekday
from daycare.utils.permissions import is_staff

logger = logging.getLogger(__name__)

TIME_FIELDS = ("time_in_start", "time_in_end", "time_out_start", "time_out_end")


def _build_day_schedule(payload: dict) -> DaySchedule:
    day = normalize_weekday(payload.get("day"))
    if day is None:
        raise HTTPException(status_code=400, detail="요일은 Sunday~Saturday 중 하나여야 합니다.")
    try:
        return DaySchedule.from_strings(
            day=day,
            time_in_start=payload.get("time_in_start"),
            time_in_end=payload.get("time_in_end"),
            time_out_start=payload.get("time_out_start"),
            time_out_end=payload.get("time_out_end"),
            grace_period_minutes=payload.get("grace_period_minutes"),
        )
    except InvalidScheduleError as exc:
        raise HTTPException(status_code=400, detail=f"유효하지 않은 스케줄입니다: {exc}")


def validate_schedule_payload(payload: dict) -> dict:
    """Validate raw schedule fields and return them normalized to canonical 12-hour strings."""
    schedule = _build_day_schedule(payload)

    if schedule.time_in_start >= schedule.time_out_end:
        raise HTTPException(status_code=400, detail="퇴실 종료 시간은 입실 시작 시간보다 늦어야 합니다.")
    # 엔진은 겹치는 구간을 입실 우선으로 처리하지만, 등록 단계에서는 설정 오류로 본다.
    if schedule.has_overlapping_windows:
        raise HTTPException(status_code=400, detail="입실 시간대와 퇴실 시간대가 겹칩니다.")

    normalized = dict(payload)
    normalized["day"] = schedule.day
    for name in TIME_FIELDS:
        value = getattr(schedule, name)
        normalized[name] = str(value) if value is not None else None
    return normalized


def list_schedules(
    db: Session,
    current_user: User,
    day: str | None = None,
    section_id: int | None = None,
) -> list[ClassSchedule]:
    q = db.query(ClassSchedule)
    if day:
        normalized_day = normalize_weekday(day)
        if normalized_day is None:
            raise HTTPException(status_code=400, detail="요일은 Sunday~Saturday 중 하나여야 합니다.")
        q = q.filter(ClassSchedule.day == normalized_day)
    if section_id:
        q = q.filter(ClassSchedule.section_id == section_id)
    if not is_staff(current_user):
        q = q.join(SectionMember, SectionMember.section_id == ClassSchedule.section_id).filter(
            SectionMember.user_id == current_user.user_id
        )
    return q.order_by(ClassSchedule.section_id, ClassSchedule.schedule_id).all()


def get_schedule(db: Session, schedule_id: int) -> ClassSchedule:
    schedule = db.query(ClassSchedule).filter(ClassSchedule.schedule_id == schedule_id).first()
    if not schedule:
        raise HTTPException(status_code=404, detail="스케줄을 찾을 수 없습니다.")
    return schedule


def schedules_for_student(db: Session, student_id: int, day: str | None = None) -> list[ClassSchedule]:
    q = db.query(ClassSchedule).join(
        SectionMember, SectionMember.section_id == ClassSchedule.section_id
    ).filter(SectionMember.user_id == student_id)
    if day:
        q = q.filter(ClassSchedule.day == day)
    return q.order_by(ClassSchedule.schedule_id).all()


def create_schedule(db: Session, data: ClassScheduleCreate, current_user: User) -> ClassSchedule:
    section_service.get_section(db, data.section_id)
    payload = data.model_dump()
    if payload.get("grace_period_minutes") is None:
        payload["grace_period_minutes"] = settings.ATTENDANCE_GRACE_PERIOD_MINUTES
    payload = validate_schedule_payload(payload)

    schedule = ClassSchedule(**payload, created_by=current_user.user_id)
    db.add(schedule)
    db.commit()
    db.refresh(schedule)
    logger.info(
        "[schedule] created schedule=%s section=%s day=%s in=%s-%s out=%s-%s",
        schedule.schedule_id,
        schedule.section_id,
        schedule.day,
        schedule.time_in_start,
        schedule.time_in_end,
        schedule.time_out_start,
        schedule.time_out_end,
    )
    return schedule


def update_schedule(db: Session, schedule_id: int, data: ClassScheduleUpdate) -> ClassSchedule:
    schedule = get_schedule(db, schedule_id)
    changes = data.model_dump(exclude_unset=True)
    if changes.get("section_id") is not None:
        section_service.get_section(db, changes["section_id"])

    merged = {
        "section_id": schedule.section_id,
        "day": schedule.day,
        "time_in_start": schedule.time_in_start,
        "time_in_end": schedule.time_in_end,
        "time_out_start": schedule.time_out_start,
        "time_out_end": schedule.time_out_end,
        "grace_period_minutes": schedule.grace_period_minutes,
    }
    merged.update({k: v for k, v in changes.items() if v is not None or k in ("time_in_end", "time_out_start")})
    merged = validate_schedule_payload(merged)

    for k, v in merged.items():
        setattr(schedule, k, v)
    db.commit()
    db.refresh(schedule)
    return schedule


def delete_schedule(db: Session, schedule_id: int):
    schedule = get_schedule(db, schedule_id)
    db.delete(schedule)
    db.commit()
