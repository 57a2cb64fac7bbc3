"""
本体对象定义 (Ontology Objects)
校园设施预订与报修系统的所有持久化实体
"""
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional
from sqlalchemy import (
    Column, Integer, String, DateTime, Date, Time,
    ForeignKey, Text, Enum as SQLEnum, Boolean, JSON
)
from sqlalchemy.orm import relationship
from campus_hub.clock import utc_now
from campus_hub.database import Base


# ============== 枚举定义 ==============

class UserRole(str, Enum):
    """用户角色"""
    USER = "user"                # 普通用户（学生/教职工）
    ADMIN = "admin"              # 管理员
    TECHNICIAN = "technician"    # 维修技术员
    MANAGER = "manager"          # 管理者


class AuthProvider(str, Enum):
    """账号来源"""
    LOCAL = "local"
    GOOGLE = "google"


class FacilityType(str, Enum):
    """设施类型"""
    LECTURE_HALL = "lecture_hall"
    LAB = "lab"
    MEETING_ROOM = "meeting_room"
    AUDITORIUM = "auditorium"
    PROJECTOR = "projector"
    CAMERA = "camera"
    LAPTOP = "laptop"
    WHITEBOARD = "whiteboard"
    OTHER = "other"


class FacilityStatus(str, Enum):
    """设施状态"""
    ACTIVE = "active"                          # 可预订
    OUT_OF_SERVICE = "out_of_service"          # 停用
    UNDER_MAINTENANCE = "under_maintenance"    # 维修中


class DayOfWeek(str, Enum):
    MONDAY = "monday"
    TUESDAY = "tuesday"
    WEDNESDAY = "wednesday"
    THURSDAY = "thursday"
    FRIDAY = "friday"
    SATURDAY = "saturday"
    SUNDAY = "sunday"


class BookingStatus(str, Enum):
    """预订状态"""
    PENDING = "pending"        # 待审批
    APPROVED = "approved"      # 已批准
    REJECTED = "rejected"      # 已驳回
    CANCELLED = "cancelled"    # 已取消


# 占用时间段的预订状态
ACTIVE_BOOKING_STATUSES = (BookingStatus.PENDING, BookingStatus.APPROVED)


class TicketPriority(str, Enum):
    """工单优先级"""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class TicketStatus(str, Enum):
    """工单状态"""
    OPEN = "open"                  # 新建
    IN_PROGRESS = "in_progress"    # 处理中
    RESOLVED = "resolved"          # 已解决
    CLOSED = "closed"              # 已关闭
    REJECTED = "rejected"          # 已驳回


class NotificationType(str, Enum):
    """通知类型"""
    BOOKING_APPROVED = "booking_approved"
    BOOKING_REJECTED = "booking_rejected"
    BOOKING_CANCELLED = "booking_cancelled"
    TICKET_CREATED = "ticket_created"
    TICKET_ASSIGNED = "ticket_assigned"
    TICKET_STATUS_CHANGED = "ticket_status_changed"
    TICKET_RESOLVED = "ticket_resolved"
    TICKET_CLOSED = "ticket_closed"
    TICKET_REJECTED = "ticket_rejected"
    COMMENT_ADDED = "comment_added"
    SYSTEM = "system"


class ReferenceKind(str, Enum):
    """通知可引用的实体类型"""
    BOOKING = "booking"
    TICKET = "ticket"


@dataclass(frozen=True)
class NotificationReference:
    """通知指向的触发实体"""
    kind: ReferenceKind
    id: int

    @classmethod
    def booking(cls, booking_id: int) -> "NotificationReference":
        return cls(ReferenceKind.BOOKING, booking_id)

    @classmethod
    def ticket(cls, ticket_id: int) -> "NotificationReference":
        return cls(ReferenceKind.TICKET, ticket_id)


# ============== 本体对象定义 ==============

class User(Base):
    """
    用户对象
    password_hash 对 Google 账号为空
    """
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=True)
    name = Column(String(100), nullable=False)
    avatar_url = Column(Text)
    provider = Column(SQLEnum(AuthProvider), default=AuthProvider.LOCAL, nullable=False)
    provider_id = Column(String(255))                    # 外部账号 ID (Google sub)
    roles = Column(JSON, nullable=False, default=lambda: [UserRole.USER.value])  # 有序角色列表
    enabled = Column(Boolean, default=True)
    created_at = Column(DateTime, default=utc_now)
    updated_at = Column(DateTime, default=utc_now, onupdate=utc_now)

    @property
    def role_set(self) -> List[UserRole]:
        """角色枚举列表（保持存储顺序）"""
        return [UserRole(r) for r in (self.roles or [])]

    @property
    def primary_role(self) -> Optional[UserRole]:
        """第一个角色，用于评论作者快照"""
        roles = self.role_set
        return roles[0] if roles else None

    def has_role(self, *roles: UserRole) -> bool:
        return any(r in self.role_set for r in roles)

    @property
    def is_admin(self) -> bool:
        return self.has_role(UserRole.ADMIN)


class Facility(Base):
    """
    设施对象 - 可预订/可报修的校园资源
    """
    __tablename__ = "facilities"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(200), nullable=False)
    type = Column(SQLEnum(FacilityType), nullable=False, default=FacilityType.OTHER)
    capacity = Column(Integer, default=0)
    location = Column(String(200))
    building = Column(String(100))
    floor = Column(String(50))
    description = Column(Text)
    amenities = Column(JSON, default=list)               # 有序设施清单
    image_urls = Column(JSON, default=list)
    status = Column(SQLEnum(FacilityStatus), nullable=False, default=FacilityStatus.ACTIVE)
    created_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime, default=utc_now)
    updated_at = Column(DateTime, default=utc_now, onupdate=utc_now)

    # 链接：开放时间窗口（仅作参考，预订逻辑不校验）
    availability_windows = relationship(
        "AvailabilityWindow", back_populates="facility",
        cascade="all, delete-orphan", order_by="AvailabilityWindow.id"
    )


class AvailabilityWindow(Base):
    """设施每周开放时间窗口"""
    __tablename__ = "facility_availability"

    id = Column(Integer, primary_key=True, index=True)
    facility_id = Column(Integer, ForeignKey("facilities.id", ondelete="CASCADE"), nullable=False)
    day_of_week = Column(SQLEnum(DayOfWeek), nullable=False)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)

    facility = relationship("Facility", back_populates="availability_windows")


class Booking(Base):
    """
    预订对象 - 预订生命周期的聚合根
    同一设施同一日期内，pending/approved 预订的 [start_time, end_time) 互不重叠
    """
    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, index=True)
    # 设施删除不级联，仅按 ID 引用
    facility_id = Column(Integer, nullable=False, index=True)
    facility_name = Column(String(200))                  # 冗余缓存
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    user_name = Column(String(100))                      # 冗余缓存
    date = Column(Date, nullable=False, index=True)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    purpose = Column(Text)
    expected_attendees = Column(Integer, default=1)
    status = Column(SQLEnum(BookingStatus), nullable=False, default=BookingStatus.PENDING)
    reviewed_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    rejection_reason = Column(Text)
    cancellation_reason = Column(Text)
    created_at = Column(DateTime, default=utc_now)
    updated_at = Column(DateTime, default=utc_now)

    # 链接
    requester = relationship("User", foreign_keys=[user_id])


class Ticket(Base):
    """
    报修工单对象
    状态: open -> in_progress -> resolved / closed / rejected
    """
    __tablename__ = "tickets"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(200), nullable=False)
    facility_id = Column(Integer, nullable=True, index=True)
    facility_name = Column(String(200))
    location = Column(String(200))
    category = Column(String(100))
    description = Column(Text)
    priority = Column(SQLEnum(TicketPriority), nullable=False, default=TicketPriority.MEDIUM)
    status = Column(SQLEnum(TicketStatus), nullable=False, default=TicketStatus.OPEN)
    reported_by = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    reported_by_name = Column(String(100))
    assigned_to = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)
    assigned_to_name = Column(String(100))
    contact_email = Column(String(255))
    contact_phone = Column(String(50))
    attachment_urls = Column(JSON, default=list)         # 最多 3 个附件引用
    resolution_notes = Column(Text)
    rejection_reason = Column(Text)
    created_at = Column(DateTime, default=utc_now)
    updated_at = Column(DateTime, default=utc_now)
    resolved_at = Column(DateTime)
    closed_at = Column(DateTime)

    # 链接：工单删除时评论一并删除
    comments = relationship(
        "Comment", back_populates="ticket",
        cascade="all, delete-orphan", order_by="Comment.id"
    )


class Comment(Base):
    """工单评论"""
    __tablename__ = "comments"

    id = Column(Integer, primary_key=True, index=True)
    ticket_id = Column(Integer, ForeignKey("tickets.id", ondelete="CASCADE"), nullable=False, index=True)
    content = Column(Text, nullable=False)
    author_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    author_name = Column(String(100))
    author_role = Column(String(20))                     # 作者首个角色快照
    edited = Column(Boolean, default=False)
    created_at = Column(DateTime, default=utc_now)
    updated_at = Column(DateTime, default=utc_now)

    ticket = relationship("Ticket", back_populates="comments")


class Notification(Base):
    """
    站内通知
    仅由其他服务的状态流转创建，之后只有 read 标记会被修改
    """
    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    title = Column(String(200), nullable=False)
    message = Column(Text, nullable=False)
    type = Column(SQLEnum(NotificationType), nullable=False)
    reference_type = Column(SQLEnum(ReferenceKind), nullable=True)
    reference_id = Column(Integer, nullable=True)
    read = Column("is_read", Boolean, default=False, index=True)
    created_at = Column(DateTime, default=utc_now, index=True)

    @property
    def reference(self) -> Optional[NotificationReference]:
        if self.reference_type is None or self.reference_id is None:
            return None
        return NotificationReference(self.reference_type, self.reference_id)

    @reference.setter
    def reference(self, value: Optional[NotificationReference]) -> None:
        if value is None:
            self.reference_type = None
            self.reference_id = None
        else:
            self.reference_type = value.kind
            self.reference_id = value.id
