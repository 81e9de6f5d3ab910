"""Schedules 기능 API 라우터입니다. 요청을 검증하고 서비스 레이어로 비즈니스 로직을 위임합니다."""

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session
from typing import List, Optional

from daycare.database import get_db
from daycare.middleware.auth_middleware import get_current_user, require_staff
from daycare.models.user import User
from daycare.schemas.schedule import ClassScheduleCreate, ClassScheduleOut, ClassScheduleUpdate
from daycare.services import schedule_service
from daycare.utils.permissions import is_section_member, is_staff

router = APIRouter(prefix="/api/schedules", tags=["schedules"])


@router.get("", response_model=List[ClassScheduleOut])
def list_schedules(
    day: Optional[str] = None,
    section_id: Optional[int] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return schedule_service.list_schedules(db, current_user, day=day, section_id=section_id)


@router.get("/{schedule_id}", response_model=ClassScheduleOut)
def get_schedule(
    schedule_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    schedule = schedule_service.get_schedule(db, schedule_id)
    if not is_staff(current_user) and not is_section_member(db, schedule.section_id, current_user.user_id):
        raise HTTPException(status_code=403, detail="배정된 반의 스케줄만 조회할 수 있습니다.")
    return schedule


@router.post("", response_model=ClassScheduleOut)
def create_schedule(
    data: ClassScheduleCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_staff),
):
    return schedule_service.create_schedule(db, data, current_user)


@router.put("/{schedule_id}", response_model=ClassScheduleOut)
def update_schedule(
    schedule_id: int,
    data: ClassScheduleUpdate,
    db: Session = Depends(get_db),
    _current_user: User = Depends(require_staff),
):
    return schedule_service.update_schedule(db, schedule_id, data)


@router.delete("/{schedule_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_schedule(
    schedule_id: int,
    db: Session = Depends(get_db),
    _current_user: User = Depends(require_staff),
):
    schedule_service.delete_schedule(db, schedule_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
