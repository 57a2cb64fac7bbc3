"""
通知服务 - 站内通知的写入 / 收件箱 / 标记已读
通知只由预订、工单、评论服务的状态流转创建
"""
import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from campus_hub.clock import Clock, utc_now
from campus_hub.errors import NotFoundError
from campus_hub.models.ontology import Notification, NotificationReference, NotificationType

logger = logging.getLogger(__name__)


class NotificationService:
    """通知服务"""

    def __init__(self, db: Session, clock: Optional[Clock] = None):
        self.db = db
        self._clock = clock or utc_now

    def create_notification(
        self,
        recipient_id: int,
        title: str,
        message: str,
        notification_type: NotificationType,
        reference: Optional[NotificationReference] = None,
    ) -> Notification:
        """写入一条未读通知"""
        notification = Notification(
            user_id=recipient_id,
            title=title,
            message=message,
            type=notification_type,
            read=False,
            created_at=self._clock(),
        )
        notification.reference = reference
        self.db.add(notification)
        self.db.commit()
        self.db.refresh(notification)
        logger.debug(f"Notification {notification_type.value} -> user {recipient_id}")
        return notification

    def list_for_user(self, user_id: int) -> List[Notification]:
        """获取用户全部通知（最新在前）"""
        return self.db.query(Notification).filter(
            Notification.user_id == user_id
        ).order_by(Notification.created_at.desc(), Notification.id.desc()).all()

    def list_unread_for_user(self, user_id: int) -> List[Notification]:
        """获取未读通知"""
        return self.db.query(Notification).filter(
            Notification.user_id == user_id,
            Notification.read == False,  # noqa: E712
        ).order_by(Notification.created_at.desc(), Notification.id.desc()).all()

    def count_unread(self, user_id: int) -> int:
        """获取未读通知数"""
        return self.db.query(Notification).filter(
            Notification.user_id == user_id,
            Notification.read == False,  # noqa: E712
        ).count()

    def get_notification(self, notification_id: int, user_id: Optional[int] = None) -> Notification:
        """获取单条通知；指定 user_id 时他人通知视为不存在"""
        query = self.db.query(Notification).filter(Notification.id == notification_id)
        if user_id is not None:
            query = query.filter(Notification.user_id == user_id)
        notification = query.first()
        if not notification:
            raise NotFoundError(f"Notification not found with id: {notification_id}")
        return notification

    def mark_as_read(self, notification_id: int, user_id: Optional[int] = None) -> Notification:
        """标记通知为已读"""
        notification = self.get_notification(notification_id, user_id)
        notification.read = True
        self.db.commit()
        self.db.refresh(notification)
        return notification

    def mark_all_as_read(self, user_id: int) -> int:
        """将用户当前未读通知全部标记为已读，返回更新数量"""
        count = self.db.query(Notification).filter(
            Notification.user_id == user_id,
            Notification.read == False,  # noqa: E712
        ).update({Notification.read: True}, synchronize_session=False)
        self.db.commit()
        return count

    def delete_notification(self, notification_id: int, user_id: Optional[int] = None) -> None:
        """删除通知"""
        notification = self.get_notification(notification_id, user_id)
        self.db.delete(notification)
        self.db.commit()
