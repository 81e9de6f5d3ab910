"""Permissions 관련 공용 유틸리티 헬퍼입니다."""

from sqlalchemy.orm import Session

from daycare.models.section import SectionMember
from daycare.models.user import User


ADMIN = "admin"
TEACHER = "teacher"
PARENT = "parent"

STAFF_ROLES = (ADMIN, TEACHER)
ALL_ROLES = (ADMIN, TEACHER, PARENT)


def is_staff(user: User) -> bool:
    return user.role in STAFF_ROLES


def is_parent(user: User) -> bool:
    return user.role == PARENT


def is_section_member(db: Session, section_id: int, user_id: int) -> bool:
    return db.query(SectionMember).filter(
        SectionMember.section_id == section_id,
        SectionMember.user_id == user_id,
    ).first() is not None


def can_view_student(user: User, student_id: int) -> bool:
    # 학부모는 본인(원아) 기록만 조회한다.
    if is_staff(user):
        return True
    return user.user_id == student_id


def can_scan_for(user: User, student: User) -> bool:
    if is_staff(user):
        return True
    return is_parent(user) and user.user_id == student.user_id
