"""
Pydantic 模式定义
用于 API 请求/响应验证
"""
from datetime import datetime, date, time
from typing import Optional, List
from pydantic import BaseModel, Field, EmailStr, ConfigDict
from campus_hub.models.ontology import (
    UserRole, AuthProvider, FacilityType, FacilityStatus, DayOfWeek,
    BookingStatus, TicketPriority, TicketStatus, NotificationType, ReferenceKind
)


# ============== 认证 Schemas ==============

class RegisterRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=6)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class GoogleCredential(BaseModel):
    credential: str = Field(..., min_length=1)


class UserResponse(BaseModel):
    id: int
    email: str
    name: str
    avatar_url: Optional[str] = None
    provider: AuthProvider
    roles: List[UserRole]
    enabled: bool
    created_at: datetime
    model_config = ConfigDict(from_attributes=True)


class AuthResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserResponse


class UserRolesUpdate(BaseModel):
    roles: List[str] = Field(..., min_length=1)


class UserEnabledUpdate(BaseModel):
    enabled: bool


# ============== 设施 Schemas ==============

class AvailabilityWindowSchema(BaseModel):
    day_of_week: DayOfWeek
    start_time: time
    end_time: time
    model_config = ConfigDict(from_attributes=True)


class FacilityBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    type: FacilityType = FacilityType.OTHER
    capacity: int = Field(default=0, ge=0)
    location: Optional[str] = Field(None, max_length=200)
    building: Optional[str] = Field(None, max_length=100)
    floor: Optional[str] = Field(None, max_length=50)
    description: Optional[str] = None
    amenities: List[str] = Field(default_factory=list)
    image_urls: List[str] = Field(default_factory=list)
    status: FacilityStatus = FacilityStatus.ACTIVE
    availability_windows: List[AvailabilityWindowSchema] = Field(default_factory=list)


class FacilityCreate(FacilityBase):
    pass


class FacilityUpdate(FacilityBase):
    """整体替换可编辑字段"""
    pass


class FacilityResponse(FacilityBase):
    id: int
    created_by: Optional[int] = None
    created_at: datetime
    updated_at: datetime
    model_config = ConfigDict(from_attributes=True)


# ============== 预订 Schemas ==============

class BookingCreate(BaseModel):
    facility_id: int
    date: date
    start_time: time
    end_time: time
    purpose: str = Field(..., min_length=1)
    expected_attendees: int = Field(default=1, gt=0)


class BookingReject(BaseModel):
    reason: str = Field(..., min_length=1)


class BookingCancel(BaseModel):
    reason: Optional[str] = None


class BookingResponse(BaseModel):
    id: int
    facility_id: int
    facility_name: Optional[str] = None
    user_id: int
    user_name: Optional[str] = None
    date: date
    start_time: time
    end_time: time
    purpose: Optional[str] = None
    expected_attendees: int
    status: BookingStatus
    reviewed_by: Optional[int] = None
    rejection_reason: Optional[str] = None
    cancellation_reason: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    model_config = ConfigDict(from_attributes=True)


# ============== 工单 Schemas ==============

class TicketCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    facility_id: Optional[int] = None
    location: str = Field(..., min_length=1)
    category: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    priority: str                              # 服务层解析，未知值返回 400
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None


class TicketAssign(BaseModel):
    technician_id: int


class TicketStatusUpdate(BaseModel):
    status: str
    resolution_notes: Optional[str] = None
    rejection_reason: Optional[str] = None


class TicketResponse(BaseModel):
    id: int
    title: str
    facility_id: Optional[int] = None
    facility_name: Optional[str] = None
    location: Optional[str] = None
    category: Optional[str] = None
    description: Optional[str] = None
    priority: TicketPriority
    status: TicketStatus
    reported_by: int
    reported_by_name: Optional[str] = None
    assigned_to: Optional[int] = None
    assigned_to_name: Optional[str] = None
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None
    attachment_urls: List[str] = Field(default_factory=list)
    resolution_notes: Optional[str] = None
    rejection_reason: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    resolved_at: Optional[datetime] = None
    closed_at: Optional[datetime] = None
    model_config = ConfigDict(from_attributes=True)


# ============== 评论 Schemas ==============

class CommentContent(BaseModel):
    content: str = Field(..., min_length=1)


class CommentResponse(BaseModel):
    id: int
    ticket_id: int
    content: str
    author_id: int
    author_name: Optional[str] = None
    author_role: Optional[str] = None
    edited: bool
    created_at: datetime
    updated_at: datetime
    model_config = ConfigDict(from_attributes=True)


# ============== 通知 Schemas ==============

class NotificationResponse(BaseModel):
    id: int
    user_id: int
    title: str
    message: str
    type: NotificationType
    reference_type: Optional[ReferenceKind] = None
    reference_id: Optional[int] = None
    read: bool
    created_at: datetime
    model_config = ConfigDict(from_attributes=True)


class UnreadCount(BaseModel):
    count: int


class MessageResponse(BaseModel):
    message: str
