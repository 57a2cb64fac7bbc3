"""
预订管理路由
"""
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from campus_hub.database import get_db
from campus_hub.models.ontology import User, BookingStatus
from campus_hub.models.schemas import (
    BookingCreate, BookingReject, BookingCancel, BookingResponse
)
from campus_hub.services.booking_service import BookingService
from campus_hub.security.auth import get_current_user, require_admin

router = APIRouter(prefix="/api/bookings", tags=["预订管理"])


@router.post("", response_model=BookingResponse)
def create_booking(
    data: BookingCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """创建预订"""
    return BookingService(db).create_booking(data, current_user)


@router.get("/my", response_model=List[BookingResponse])
def list_my_bookings(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """我的预订"""
    return BookingService(db).list_by_user(current_user.id)


@router.get("", response_model=List[BookingResponse])
def list_bookings(
    status: Optional[BookingStatus] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin)
):
    """获取预订列表（可按状态筛选）"""
    service = BookingService(db)
    if status:
        return service.list_by_status(status)
    return service.list_all()


@router.get("/facility/{facility_id}", response_model=List[BookingResponse])
def list_facility_bookings(
    facility_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """某设施的预订"""
    return BookingService(db).list_by_facility(facility_id)


@router.get("/{booking_id}", response_model=BookingResponse)
def get_booking(
    booking_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """获取预订详情"""
    return BookingService(db).get_booking(booking_id)


@router.put("/{booking_id}/approve", response_model=BookingResponse)
def approve_booking(
    booking_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin)
):
    """审批通过"""
    return BookingService(db).approve_booking(booking_id, current_user.id)


@router.put("/{booking_id}/reject", response_model=BookingResponse)
def reject_booking(
    booking_id: int,
    data: BookingReject,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin)
):
    """驳回预订"""
    return BookingService(db).reject_booking(booking_id, current_user.id, data.reason)


@router.put("/{booking_id}/cancel", response_model=BookingResponse)
def cancel_booking(
    booking_id: int,
    data: Optional[BookingCancel] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """取消预订（本人或管理员）"""
    service = BookingService(db)
    booking = service.get_booking(booking_id)
    if booking.user_id != current_user.id and not current_user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You can only cancel your own bookings"
        )
    reason = data.reason if data else None
    return service.cancel_booking(booking_id, current_user.id, reason)
