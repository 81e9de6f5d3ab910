"""Section Service 도메인 서비스 레이어입니다. 반 정보와 원아 배정을 관리합니다."""

from fastapi import HTTPException
from sqlalchemy.orm import Session

from daycare.models.section import Section, SectionMember
from daycare.models.user import User
from daycare.schemas.section import SectionCreate, SectionUpdate
from daycare.utils.permissions import PARENT, STAFF_ROLES, is_staff


def list_sections(db: Session, current_user: User) -> list[Section]:
    q = db.query(Section).filter(Section.is_active == True)  # noqa: E712
    if not is_staff(current_user):
        q = q.join(SectionMember, SectionMember.section_id == Section.section_id).filter(
            SectionMember.user_id == current_user.user_id
        )
    return q.order_by(Section.name).all()


def get_section(db: Session, section_id: int) -> Section:
    section = db.query(Section).filter(Section.section_id == section_id).first()
    if not section:
        raise HTTPException(status_code=404, detail="반을 찾을 수 없습니다.")
    return section


def _validate_teacher(db: Session, teacher_id: int | None):
    if teacher_id is None:
        return
    teacher = db.query(User).filter(User.user_id == teacher_id, User.is_active == True).first()  # noqa: E712
    if not teacher or teacher.role not in STAFF_ROLES:
        raise HTTPException(status_code=400, detail="담임으로 지정할 수 없는 사용자입니다.")


def _ensure_unique_name(db: Session, name: str, exclude_section_id: int | None = None):
    q = db.query(Section).filter(Section.name == name)
    if exclude_section_id is not None:
        q = q.filter(Section.section_id != exclude_section_id)
    if q.first():
        raise HTTPException(status_code=409, detail="이미 존재하는 반 이름입니다.")


def set_students(db: Session, section: Section, student_ids: list[int]) -> Section:
    unique_ids = list(dict.fromkeys(student_ids))
    if unique_ids:
        found = db.query(User).filter(
            User.user_id.in_(unique_ids),
            User.role == PARENT,
            User.is_active == True,  # noqa: E712
        ).count()
        if found != len(unique_ids):
            raise HTTPException(status_code=400, detail="배정할 수 없는 원아가 포함되어 있습니다.")
    existing = {m.user_id: m for m in section.members}
    section.members = [existing.get(uid) or SectionMember(user_id=uid) for uid in unique_ids]
    db.commit()
    db.refresh(section)
    return section


def create_section(db: Session, data: SectionCreate) -> Section:
    name = data.name.strip()
    _ensure_unique_name(db, name)
    _validate_teacher(db, data.teacher_id)
    section = Section(name=name, description=data.description, teacher_id=data.teacher_id)
    db.add(section)
    db.flush()
    return set_students(db, section, data.student_ids)


def update_section(db: Session, section_id: int, data: SectionUpdate) -> Section:
    section = get_section(db, section_id)
    payload = data.model_dump(exclude_unset=True)
    if "name" in payload and payload["name"]:
        payload["name"] = payload["name"].strip()
        _ensure_unique_name(db, payload["name"], exclude_section_id=section_id)
    if "teacher_id" in payload:
        _validate_teacher(db, payload["teacher_id"])
    for k, v in payload.items():
        setattr(section, k, v)
    db.commit()
    db.refresh(section)
    return section


def delete_section(db: Session, section_id: int):
    section = get_section(db, section_id)
    db.delete(section)
    db.commit()
