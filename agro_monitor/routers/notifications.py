from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from typing import List

from agro_monitor.database import get_db
from agro_monitor.models.notification import Notification
from agro_monitor.schemas.notification import NotificationResponse

router = APIRouter(prefix="/api/v1/notifications", tags=["notifications"])

@router.get("/", response_model=List[NotificationResponse])
async def list_notifications(user_id: int, unread_only: bool = False, db: Session = Depends(get_db)):
    """Notifications of a user, newest first"""
    query = db.query(Notification).filter(Notification.user_id == user_id)
    if unread_only:
        query = query.filter(Notification.is_read == False)
    return query.order_by(Notification.created_at.desc(), Notification.id.desc()).all()

@router.post("/read-all")
async def mark_all_read(user_id: int, db: Session = Depends(get_db)):
    """Mark every unread notification of a user as read"""
    updated = (
        db.query(Notification)
        .filter(Notification.user_id == user_id, Notification.is_read == False)
        .update({Notification.is_read: True}, synchronize_session=False)
    )
    db.commit()
    return {"ok": True, "updated": updated}

@router.post("/{notification_id}/read", response_model=NotificationResponse)
async def mark_read(notification_id: int, db: Session = Depends(get_db)):
    """Mark a single notification as read"""
    notification = db.query(Notification).filter(Notification.id == notification_id).first()
    if not notification:
        raise HTTPException(status_code=404, detail="Notification not found")

    notification.is_read = True
    db.commit()
    db.refresh(notification)
    return notification
