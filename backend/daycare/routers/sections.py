"""Sections 기능 API 라우터입니다. 요청을 검증하고 서비스 레이어로 비즈니스 로직을 위임합니다."""

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session
from typing import List

from daycare.database import get_db
from daycare.middleware.auth_middleware import get_current_user, require_admin
from daycare.models.user import User
from daycare.schemas.section import SectionCreate, SectionOut, SectionStudentsUpdate, SectionUpdate
from daycare.services import section_service
from daycare.utils.permissions import is_section_member, is_staff

router = APIRouter(prefix="/api/sections", tags=["sections"])


@router.get("", response_model=List[SectionOut])
def list_sections(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return section_service.list_sections(db, current_user)


@router.get("/{section_id}", response_model=SectionOut)
def get_section(
    section_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    section = section_service.get_section(db, section_id)
    if not is_staff(current_user) and not is_section_member(db, section_id, current_user.user_id):
        raise HTTPException(status_code=403, detail="배정된 반만 조회할 수 있습니다.")
    return section


@router.post("", response_model=SectionOut)
def create_section(
    data: SectionCreate,
    db: Session = Depends(get_db),
    _current_user: User = Depends(require_admin),
):
    return section_service.create_section(db, data)


@router.put("/{section_id}", response_model=SectionOut)
def update_section(
    section_id: int,
    data: SectionUpdate,
    db: Session = Depends(get_db),
    _current_user: User = Depends(require_admin),
):
    return section_service.update_section(db, section_id, data)


@router.put("/{section_id}/students", response_model=SectionOut)
def set_section_students(
    section_id: int,
    data: SectionStudentsUpdate,
    db: Session = Depends(get_db),
    _current_user: User = Depends(require_admin),
):
    section = section_service.get_section(db, section_id)
    return section_service.set_students(db, section, data.student_ids)


@router.delete("/{section_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_section(
    section_id: int,
    db: Session = Depends(get_db),
    _current_user: User = Depends(require_admin),
):
    section_service.delete_section(db, section_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
