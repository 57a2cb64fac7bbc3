"""
设施管理路由
"""
from typing import List, Optional
from datetime import date
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from campus_hub.database import get_db
from campus_hub.models.ontology import User, FacilityType, FacilityStatus
from campus_hub.models.schemas import (
    FacilityCreate, FacilityUpdate, FacilityResponse, BookingResponse, MessageResponse
)
from campus_hub.services.facility_service import FacilityService
from campus_hub.services.booking_service import BookingService
from campus_hub.security.auth import get_current_user, require_admin

router = APIRouter(prefix="/api/facilities", tags=["设施管理"])


@router.get("", response_model=List[FacilityResponse])
def list_facilities(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """获取设施列表"""
    return FacilityService(db).get_facilities()


@router.get("/search", response_model=List[FacilityResponse])
def search_facilities(
    type: Optional[FacilityType] = None,
    location: Optional[str] = None,
    min_capacity: Optional[int] = Query(None, ge=0),
    status: Optional[FacilityStatus] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """按类型 / 位置 / 最小容量 / 状态筛选设施"""
    return FacilityService(db).search_facilities(type, location, min_capacity, status)


@router.get("/{facility_id}", response_model=FacilityResponse)
def get_facility(
    facility_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """获取设施详情"""
    return FacilityService(db).get_facility(facility_id)


@router.get("/{facility_id}/availability", response_model=List[BookingResponse])
def get_availability(
    facility_id: int,
    day: date = Query(..., alias="date"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """某日已占用的时段（pending / approved 预订）"""
    FacilityService(db).get_facility(facility_id)
    return BookingService(db).list_active_on(facility_id, day)


@router.post("", response_model=FacilityResponse)
def create_facility(
    data: FacilityCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin)
):
    """创建设施"""
    return FacilityService(db).create_facility(data, current_user.id)


@router.put("/{facility_id}", response_model=FacilityResponse)
def update_facility(
    facility_id: int,
    data: FacilityUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin)
):
    """更新设施"""
    return FacilityService(db).update_facility(facility_id, data)


@router.delete("/{facility_id}", response_model=MessageResponse)
def delete_facility(
    facility_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin)
):
    """删除设施"""
    FacilityService(db).delete_facility(facility_id)
    return MessageResponse(message="Facility deleted")
