"""
站内通知路由 - 仅操作当前用户自己的通知
"""
from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from campus_hub.database import get_db
from campus_hub.models.ontology import User
from campus_hub.models.schemas import NotificationResponse, UnreadCount, MessageResponse
from campus_hub.services.notification_service import NotificationService
from campus_hub.security.auth import get_current_user

router = APIRouter(prefix="/api/notifications", tags=["站内通知"])


@router.get("", response_model=List[NotificationResponse])
def list_notifications(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """我的通知"""
    return NotificationService(db).list_for_user(current_user.id)


@router.get("/unread", response_model=List[NotificationResponse])
def list_unread(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """未读通知"""
    return NotificationService(db).list_unread_for_user(current_user.id)


@router.get("/count", response_model=UnreadCount)
def count_unread(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """未读数量"""
    return UnreadCount(count=NotificationService(db).count_unread(current_user.id))


@router.put("/read-all", response_model=UnreadCount)
def mark_all_as_read(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """全部标记为已读，返回本次更新数量"""
    return UnreadCount(count=NotificationService(db).mark_all_as_read(current_user.id))


@router.put("/{notification_id}/read", response_model=NotificationResponse)
def mark_as_read(
    notification_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """标记为已读"""
    return NotificationService(db).mark_as_read(notification_id, current_user.id)


@router.delete("/{notification_id}", response_model=MessageResponse)
def delete_notification(
    notification_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """删除通知"""
    NotificationService(db).delete_notification(notification_id, current_user.id)
    return MessageResponse(message="Notification deleted")
