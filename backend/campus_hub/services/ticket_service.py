"""
工单服务 - 本体操作层
管理 Ticket 对象的报修 / 分配 / 状态流转，流转结果通知报修人
"""
from typing import BinaryIO, Dict, List, Optional, Sequence, Tuple, Union
import logging
from sqlalchemy.orm import Session
from campus_hub.clock import Clock, utc_now
from campus_hub.config import settings
from campus_hub.errors import NotFoundError, InvalidArgumentError, InvalidStateError
from campus_hub.models.ontology import (
    Ticket, TicketStatus, TicketPriority, Facility, User, UserRole,
    NotificationType, NotificationReference
)
from campus_hub.models.schemas import TicketCreate
from campus_hub.services.file_storage import FileStorage
from campus_hub.services.notification_service import NotificationService
from campus_hub.services.transitions import TICKET
from core.engine.state_machine import state_machine_engine

logger = logging.getLogger(__name__)

# (文件名, 内容)：内容为字节或尚未读取的上传流
Attachment = Tuple[Optional[str], Union[bytes, BinaryIO]]

# 新状态 -> (通知类型, 消息模板)，覆盖全部 TicketStatus
STATUS_NOTIFICATIONS: Dict[TicketStatus, Tuple[NotificationType, str]] = {
    TicketStatus.OPEN: (
        NotificationType.TICKET_STATUS_CHANGED,
        "Your ticket '{title}' status changed to {status}",
    ),
    TicketStatus.IN_PROGRESS: (
        NotificationType.TICKET_STATUS_CHANGED,
        "Your ticket '{title}' status changed to {status}",
    ),
    TicketStatus.RESOLVED: (
        NotificationType.TICKET_RESOLVED,
        "Your ticket '{title}' has been resolved.",
    ),
    TicketStatus.CLOSED: (
        NotificationType.TICKET_CLOSED,
        "Your ticket '{title}' has been closed.",
    ),
    TicketStatus.REJECTED: (
        NotificationType.TICKET_REJECTED,
        "Your ticket '{title}' has been rejected. Reason: {reason}",
    ),
}


def parse_priority(value: str) -> TicketPriority:
    """解析优先级（大小写不敏感）"""
    try:
        return TicketPriority((value or "").strip().lower())
    except ValueError:
        raise InvalidArgumentError(f"Invalid priority: {value}")


def parse_status(value: str) -> TicketStatus:
    """解析工单状态（大小写不敏感）"""
    try:
        return TicketStatus((value or "").strip().lower())
    except ValueError:
        raise InvalidArgumentError(f"Invalid status: {value}")


class TicketService:
    """工单服务"""

    def __init__(self, db: Session,
                 notification_service: Optional[NotificationService] = None,
                 storage: Optional[FileStorage] = None,
                 clock: Optional[Clock] = None,
                 strict_transitions: Optional[bool] = None):
        self.db = db
        self._clock = clock or utc_now
        self.notification_service = notification_service or NotificationService(db, self._clock)
        self.storage = storage or FileStorage()
        self.strict_transitions = (
            settings.TICKET_STRICT_TRANSITIONS if strict_transitions is None else strict_transitions
        )

    # ============== 查询 ==============

    def get_ticket(self, ticket_id: int) -> Ticket:
        """获取单个工单"""
        ticket = self.db.query(Ticket).filter(Ticket.id == ticket_id).first()
        if not ticket:
            raise NotFoundError(f"Ticket not found with id: {ticket_id}")
        return ticket

    def list_all(self) -> List[Ticket]:
        return self.db.query(Ticket).order_by(Ticket.created_at.desc(), Ticket.id.desc()).all()

    def list_by_reporter(self, user_id: int) -> List[Ticket]:
        """获取我报修的工单"""
        return self.db.query(Ticket).filter(
            Ticket.reported_by == user_id
        ).order_by(Ticket.created_at.desc(), Ticket.id.desc()).all()

    def list_assigned(self, technician_id: int) -> List[Ticket]:
        """获取分配给我的工单（技术员视图）"""
        return self.db.query(Ticket).filter(
            Ticket.assigned_to == technician_id
        ).order_by(Ticket.created_at.desc(), Ticket.id.desc()).all()

    def list_by_status(self, status: TicketStatus) -> List[Ticket]:
        return self.db.query(Ticket).filter(
            Ticket.status == status
        ).order_by(Ticket.created_at.desc(), Ticket.id.desc()).all()

    # ============== 报修 ==============

    def create_ticket(self, data: TicketCreate, reporter: User,
                      attachments: Optional[Sequence[Attachment]] = None) -> Ticket:
        """创建工单，状态固定为 open"""
        attachments = list(attachments or [])
        priority = parse_priority(data.priority)

        if len(attachments) > settings.MAX_TICKET_ATTACHMENTS:
            raise InvalidArgumentError(
                f"A ticket can have at most {settings.MAX_TICKET_ATTACHMENTS} attachments"
            )

        facility_name = None
        if data.facility_id is not None:
            facility = self.db.query(Facility).filter(Facility.id == data.facility_id).first()
            if not facility:
                raise NotFoundError(f"Facility not found with id: {data.facility_id}")
            facility_name = facility.name

        urls = [self.storage.store(name, content) for name, content in attachments]

        now = self._clock()
        ticket = Ticket(
            title=data.title,
            facility_id=data.facility_id,
            facility_name=facility_name,
            location=data.location,
            category=data.category,
            description=data.description,
            priority=priority,
            status=TicketStatus.OPEN,
            reported_by=reporter.id,
            reported_by_name=reporter.name,
            contact_email=data.contact_email,
            contact_phone=data.contact_phone,
            attachment_urls=urls,
            created_at=now,
            updated_at=now,
        )
        self.db.add(ticket)
        try:
            self.db.commit()
        except Exception:
            # 提交失败时清理已写入的附件
            self.db.rollback()
            for url in urls:
                self.storage.delete(url)
            raise
        self.db.refresh(ticket)
        logger.info(f"Ticket {ticket.id} created by user {reporter.id} ({priority.value})")
        return ticket

    # ============== 分配与流转 ==============

    def _check_transition(self, ticket: Ticket, target: TicketStatus) -> None:
        """流转校验：宽松模式仅记录告警，严格模式拒绝"""
        result = state_machine_engine.validate(TICKET, ticket.status.value, target.value)
        if result.allowed:
            return
        if self.strict_transitions:
            raise InvalidStateError(result.reason)
        logger.warning(f"Ticket {ticket.id}: {result.reason}")

    def assign_ticket(self, ticket_id: int, technician_id: int) -> Ticket:
        """分配技术员，工单进入 in_progress，通知报修人和技术员"""
        ticket = self.get_ticket(ticket_id)

        technician = self.db.query(User).filter(User.id == technician_id).first()
        if not technician:
            raise NotFoundError(f"User not found with id: {technician_id}")
        if not technician.has_role(UserRole.TECHNICIAN, UserRole.ADMIN):
            raise InvalidArgumentError("Assignee must be a technician or admin")

        self._check_transition(ticket, TicketStatus.IN_PROGRESS)

        ticket.assigned_to = technician.id
        ticket.assigned_to_name = technician.name
        ticket.status = TicketStatus.IN_PROGRESS
        ticket.updated_at = self._clock()
        self.db.commit()
        self.db.refresh(ticket)
        logger.info(f"Ticket {ticket_id} assigned to {technician.id}")

        reference = NotificationReference.ticket(ticket.id)
        self.notification_service.create_notification(
            recipient_id=ticket.reported_by,
            title="Ticket Assigned",
            message=f"Your ticket '{ticket.title}' has been assigned to {technician.name}",
            notification_type=NotificationType.TICKET_ASSIGNED,
            reference=reference,
        )
        self.notification_service.create_notification(
            recipient_id=technician.id,
            title="New Ticket Assignment",
            message=f"You have been assigned to ticket: {ticket.title}",
            notification_type=NotificationType.TICKET_ASSIGNED,
            reference=reference,
        )
        return ticket

    def update_status(self, ticket_id: int, status: str,
                      resolution_notes: Optional[str] = None,
                      rejection_reason: Optional[str] = None) -> Ticket:
        """更新工单状态，并通知报修人"""
        ticket = self.get_ticket(ticket_id)
        target = parse_status(status)
        self._check_transition(ticket, target)

        now = self._clock()
        ticket.status = target
        if target == TicketStatus.RESOLVED:
            ticket.resolved_at = now
            ticket.resolution_notes = resolution_notes
        elif target == TicketStatus.CLOSED:
            ticket.closed_at = now
        elif target == TicketStatus.REJECTED:
            ticket.rejection_reason = rejection_reason
        ticket.updated_at = now
        self.db.commit()
        self.db.refresh(ticket)
        logger.info(f"Ticket {ticket_id} status -> {target.value}")

        notification_type, template = STATUS_NOTIFICATIONS[target]
        self.notification_service.create_notification(
            recipient_id=ticket.reported_by,
            title="Ticket Update",
            message=template.format(
                title=ticket.title, status=target.value, reason=rejection_reason
            ),
            notification_type=notification_type,
            reference=NotificationReference.ticket(ticket.id),
        )
        return ticket

    def delete_ticket(self, ticket_id: int) -> None:
        """删除工单及其评论与附件文件"""
        ticket = self.get_ticket(ticket_id)
        urls = list(ticket.attachment_urls or [])
        self.db.delete(ticket)
        self.db.commit()
        for url in urls:
            self.storage.delete(url)
        logger.info(f"Ticket {ticket_id} deleted")
