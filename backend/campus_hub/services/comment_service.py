"""
评论服务 - 工单下的讨论
只有作者可以编辑；作者或管理员可以删除
"""
from typing import List, Optional
import logging
from sqlalchemy.orm import Session
from campus_hub.clock import Clock, utc_now
from campus_hub.errors import NotFoundError, NotAuthorizedError
from campus_hub.models.ontology import (
    Comment, Ticket, User, NotificationType, NotificationReference
)
from campus_hub.services.notification_service import NotificationService

logger = logging.getLogger(__name__)


class CommentService:
    """评论服务"""

    def __init__(self, db: Session,
                 notification_service: Optional[NotificationService] = None,
                 clock: Optional[Clock] = None):
        self.db = db
        self._clock = clock or utc_now
        self.notification_service = notification_service or NotificationService(db, self._clock)

    def get_comment(self, comment_id: int) -> Comment:
        comment = self.db.query(Comment).filter(Comment.id == comment_id).first()
        if not comment:
            raise NotFoundError("Comment not found")
        return comment

    def list_comments(self, ticket_id: int) -> List[Comment]:
        """工单评论（最新在前）"""
        return self.db.query(Comment).filter(
            Comment.ticket_id == ticket_id
        ).order_by(Comment.created_at.desc(), Comment.id.desc()).all()

    def add_comment(self, ticket_id: int, content: str, author: User) -> Comment:
        """
        添加评论

        通知报修人（评论者不是报修人时）和处理人（存在且不是评论者时）
        """
        ticket = self.db.query(Ticket).filter(Ticket.id == ticket_id).first()
        if not ticket:
            raise NotFoundError(f"Ticket not found with id: {ticket_id}")

        primary_role = author.primary_role
        now = self._clock()
        comment = Comment(
            ticket_id=ticket.id,
            content=content,
            author_id=author.id,
            author_name=author.name,
            author_role=primary_role.value if primary_role else None,
            edited=False,
            created_at=now,
            updated_at=now,
        )
        self.db.add(comment)
        self.db.commit()
        self.db.refresh(comment)

        reference = NotificationReference.ticket(ticket.id)
        if ticket.reported_by != author.id:
            self.notification_service.create_notification(
                recipient_id=ticket.reported_by,
                title="New Comment",
                message=f"{author.name} commented on your ticket: {ticket.title}",
                notification_type=NotificationType.COMMENT_ADDED,
                reference=reference,
            )
        if ticket.assigned_to is not None and ticket.assigned_to != author.id:
            self.notification_service.create_notification(
                recipient_id=ticket.assigned_to,
                title="New Comment",
                message=f"{author.name} commented on ticket: {ticket.title}",
                notification_type=NotificationType.COMMENT_ADDED,
                reference=reference,
            )
        return comment

    def update_comment(self, comment_id: int, content: str, user: User) -> Comment:
        """编辑评论（仅作者）"""
        comment = self.get_comment(comment_id)
        if comment.author_id != user.id:
            raise NotAuthorizedError("You can only edit your own comments")

        comment.content = content
        comment.edited = True
        comment.updated_at = self._clock()
        self.db.commit()
        self.db.refresh(comment)
        return comment

    def delete_comment(self, comment_id: int, user: User) -> None:
        """删除评论（作者或管理员）"""
        comment = self.get_comment(comment_id)
        if comment.author_id != user.id and not user.is_admin:
            raise NotAuthorizedError("You can only delete your own comments")

        self.db.delete(comment)
        self.db.commit()
        logger.info(f"Comment {comment_id} deleted by {user.id}")
