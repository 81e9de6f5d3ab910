"""Notification Service 도메인 서비스 레이어입니다. 인앱 알림 생성과 읽음 처리를 담당합니다."""

from fastapi import HTTPException
from sqlalchemy.orm import Session
from daycare.models.notification import Notification
from typing import List, Optional


def _unread(db: Session, user_id: int):
    return db.query(Notification).filter(
        Notification.user_id == user_id,
        Notification.is_read == False,  # noqa: E712
    )


def get_notifications(db: Session, user_id: int, unread_only: bool = False, limit: int = 50) -> List[Notification]:
    q = _unread(db, user_id) if unread_only else db.query(Notification).filter(Notification.user_id == user_id)
    return q.order_by(Notification.created_at.desc(), Notification.noti_id.desc()).limit(limit).all()


def count_unread(db: Session, user_id: int) -> int:
    return _unread(db, user_id).count()


def mark_read(db: Session, noti_id: int, user_id: int) -> Notification:
    noti = db.query(Notification).filter(
        Notification.noti_id == noti_id,
        Notification.user_id == user_id,
    ).first()
    if not noti:
        raise HTTPException(status_code=404, detail="알림을 찾을 수 없습니다.")
    noti.is_read = True
    db.commit()
    db.refresh(noti)
    return noti


def mark_all_read(db: Session, user_id: int) -> int:
    updated = _unread(db, user_id).update({"is_read": True}, synchronize_session=False)
    db.commit()
    return updated


def create_notification(
    db: Session,
    *,
    user_id: int,
    noti_type: str,
    title: str,
    message: Optional[str] = None,
    link_url: Optional[str] = None,
    attendance_id: Optional[int] = None,
) -> Notification:
    noti = Notification(
        user_id=user_id,
        noti_type=noti_type,
        title=title,
        message=message,
        link_url=link_url,
        attendance_id=attendance_id,
    )
    db.add(noti)
    db.commit()
    db.refresh(noti)
    return noti
