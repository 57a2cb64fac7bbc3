"""
设施服务 - 设施目录的增删改查
"""
from typing import List, Optional
import logging
from sqlalchemy.orm import Session
from campus_hub.clock import Clock, utc_now
from campus_hub.errors import NotFoundError
from campus_hub.models.ontology import (
    Facility, AvailabilityWindow, FacilityType, FacilityStatus
)
from campus_hub.models.schemas import FacilityCreate, FacilityUpdate

logger = logging.getLogger(__name__)


class FacilityService:
    """设施服务"""

    def __init__(self, db: Session, clock: Optional[Clock] = None):
        self.db = db
        self._clock = clock or utc_now

    def get_facility(self, facility_id: int) -> Facility:
        """获取单个设施"""
        facility = self.db.query(Facility).filter(Facility.id == facility_id).first()
        if not facility:
            raise NotFoundError(f"Facility not found with id: {facility_id}")
        return facility

    def get_facilities(self) -> List[Facility]:
        """获取全部设施"""
        return self.db.query(Facility).order_by(Facility.id).all()

    def search_facilities(self, facility_type: Optional[FacilityType] = None,
                          location: Optional[str] = None,
                          min_capacity: Optional[int] = None,
                          status: Optional[FacilityStatus] = None) -> List[Facility]:
        """按条件筛选设施（条件之间为 AND）"""
        query = self.db.query(Facility)

        if facility_type:
            query = query.filter(Facility.type == facility_type)
        if location:
            query = query.filter(Facility.location.ilike(f"%{location}%"))
        if min_capacity is not None:
            query = query.filter(Facility.capacity >= min_capacity)
        if status:
            query = query.filter(Facility.status == status)

        return query.order_by(Facility.id).all()

    def create_facility(self, data: FacilityCreate, created_by: Optional[int] = None) -> Facility:
        """创建设施"""
        now = self._clock()
        facility = Facility(created_by=created_by, created_at=now, updated_at=now)
        self._apply(facility, data)
        self.db.add(facility)
        self.db.commit()
        self.db.refresh(facility)
        logger.info(f"Facility {facility.id} created: {facility.name}")
        return facility

    def update_facility(self, facility_id: int, data: FacilityUpdate) -> Facility:
        """更新设施（整体替换可编辑字段）"""
        facility = self.get_facility(facility_id)
        self._apply(facility, data)
        facility.updated_at = self._clock()
        self.db.commit()
        self.db.refresh(facility)
        return facility

    def delete_facility(self, facility_id: int) -> None:
        """删除设施，已有预订和工单按 ID 保留"""
        facility = self.get_facility(facility_id)
        self.db.delete(facility)
        self.db.commit()
        logger.info(f"Facility {facility_id} deleted")

    def _apply(self, facility: Facility, data: FacilityCreate) -> None:
        payload = data.model_dump(exclude={"availability_windows"})
        for key, value in payload.items():
            setattr(facility, key, value)
        facility.availability_windows = [
            AvailabilityWindow(
                day_of_week=w.day_of_week,
                start_time=w.start_time,
                end_time=w.end_time,
            )
            for w in data.availability_windows
        ]
