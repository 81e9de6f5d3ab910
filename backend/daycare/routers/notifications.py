"""인앱 알림 API 라우터입니다. 등원/하원 알림 조회와 읽음 처리를 제공합니다."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List
from daycare.database import get_db
from daycare.schemas.notification import NotificationOut, UnreadCountOut
from daycare.services import notification_service
from daycare.middleware.auth_middleware import get_current_user
from daycare.models.user import User

router = APIRouter(prefix="/api/notifications", tags=["notifications"])


@router.get("", response_model=List[NotificationOut])
def list_notifications(
    unread_only: bool = False,
    limit: int = Query(50, ge=1, le=200),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return notification_service.get_notifications(db, current_user.user_id, unread_only, limit=limit)


@router.get("/unread-count", response_model=UnreadCountOut)
def unread_count(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return {"unread_count": notification_service.count_unread(db, current_user.user_id)}


@router.patch("/{noti_id}/read", response_model=NotificationOut)
def mark_read(noti_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return notification_service.mark_read(db, noti_id, current_user.user_id)


@router.post("/read-all")
def mark_all_read(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    updated = notification_service.mark_all_read(db, current_user.user_id)
    return {"message": "모든 알림을 읽음 처리했습니다.", "updated": updated}
