"""User Service 도메인 서비스 레이어입니다. 비즈니스 규칙과 데이터 접근 흐름을 캡슐화합니다."""

from fastapi import HTTPException
from sqlalchemy.orm import Session

from daycare.models.user import User
from daycare.schemas.user import UserCreate, UserUpdate
from daycare.utils.permissions import ALL_ROLES


def _normalize_role_or_raise(role: str) -> str:
    normalized = str(role or "").strip().lower()
    if normalized not in ALL_ROLES:
        raise HTTPException(status_code=400, detail="유효하지 않은 역할입니다.")
    return normalized


def _normalize_rfid(tag) -> str | None:
    text = str(tag or "").strip()
    return text or None


def _ensure_unique(db: Session, *, login_id: str | None = None, rfid_tag: str | None = None, exclude_user_id: int | None = None):
    if login_id:
        q = db.query(User).filter(User.login_id == login_id)
        if exclude_user_id is not None:
            q = q.filter(User.user_id != exclude_user_id)
        if q.first():
            raise HTTPException(status_code=409, detail="이미 사용 중인 로그인 ID입니다.")
    if rfid_tag:
        q = db.query(User).filter(User.rfid_tag == rfid_tag)
        if exclude_user_id is not None:
            q = q.filter(User.user_id != exclude_user_id)
        if q.first():
            raise HTTPException(status_code=409, detail="이미 등록된 RFID 태그입니다.")


def list_users(db: Session, include_inactive: bool = False, role: str | None = None):
    q = db.query(User)
    if not include_inactive:
        q = q.filter(User.is_active == True)  # noqa: E712
    if role:
        q = q.filter(User.role == role)
    return q.order_by(User.user_id).all()


def get_user(db: Session, user_id: int) -> User:
    user = db.query(User).filter(User.user_id == user_id).first()
    if not user:
        raise HTTPException(status_code=404, detail="사용자를 찾을 수 없습니다.")
    return user


def create_user(db: Session, data: UserCreate) -> User:
    payload = data.model_dump()
    payload["login_id"] = payload["login_id"].strip()
    payload["role"] = _normalize_role_or_raise(payload["role"])
    payload["rfid_tag"] = _normalize_rfid(payload.get("rfid_tag"))
    _ensure_unique(db, login_id=payload["login_id"], rfid_tag=payload["rfid_tag"])

    user = User(**payload)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def update_user(db: Session, user_id: int, data: UserUpdate) -> User:
    user = get_user(db, user_id)
    payload = data.model_dump(exclude_unset=True)
    if "role" in payload:
        payload["role"] = _normalize_role_or_raise(payload["role"])
    if "rfid_tag" in payload:
        payload["rfid_tag"] = _normalize_rfid(payload["rfid_tag"])
        _ensure_unique(db, rfid_tag=payload["rfid_tag"], exclude_user_id=user_id)
    for k, v in payload.items():
        setattr(user, k, v)
    db.commit()
    db.refresh(user)
    return user


def deactivate_user(db: Session, user_id: int, current_user: User):
    if user_id == current_user.user_id:
        raise HTTPException(status_code=400, detail="본인 계정은 비활성화할 수 없습니다.")
    user = get_user(db, user_id)
    user.is_active = False
    # 비활성 계정의 태그는 다른 원아에게 재발급할 수 있도록 해제한다.
    user.rfid_tag = None
    db.commit()
