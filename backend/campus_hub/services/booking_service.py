"""
预订服务 - 本体操作层
管理 Booking 对象（预订生命周期的聚合根）

同一设施同一日期内，pending/approved 预订的时间段互不重叠：
冲突检查与写入在时段锁内完成，审批/驳回/取消为带状态条件的单行更新
"""
from typing import List, Optional
from datetime import date, time
import logging
from sqlalchemy.orm import Session
from campus_hub.clock import Clock, utc_now
from campus_hub.errors import (
    NotFoundError, InvalidArgumentError, InvalidStateError, ConflictError
)
from campus_hub.models.ontology import (
    Booking, BookingStatus, Facility, FacilityStatus, User,
    NotificationType, NotificationReference, ACTIVE_BOOKING_STATUSES
)
from campus_hub.models.schemas import BookingCreate
from campus_hub.services.notification_service import NotificationService
from campus_hub.services.slot_lock import SlotLockRegistry, slot_locks
from campus_hub.services.transitions import booking_machine

logger = logging.getLogger(__name__)


class BookingService:
    """预订服务"""

    def __init__(self, db: Session,
                 notification_service: Optional[NotificationService] = None,
                 clock: Optional[Clock] = None,
                 locks: Optional[SlotLockRegistry] = None):
        self.db = db
        self._clock = clock or utc_now
        self.notification_service = notification_service or NotificationService(db, self._clock)
        self._locks = locks or slot_locks

    # ============== 查询 ==============

    def get_booking(self, booking_id: int) -> Booking:
        """获取单个预订"""
        booking = self.db.query(Booking).filter(Booking.id == booking_id).first()
        if not booking:
            raise NotFoundError(f"Booking not found with id: {booking_id}")
        return booking

    def list_all(self) -> List[Booking]:
        return self.db.query(Booking).order_by(Booking.created_at.desc(), Booking.id.desc()).all()

    def list_by_user(self, user_id: int) -> List[Booking]:
        """获取某用户的预订"""
        return self.db.query(Booking).filter(
            Booking.user_id == user_id
        ).order_by(Booking.created_at.desc(), Booking.id.desc()).all()

    def list_by_facility(self, facility_id: int) -> List[Booking]:
        """获取某设施的预订"""
        return self.db.query(Booking).filter(
            Booking.facility_id == facility_id
        ).order_by(Booking.date, Booking.start_time).all()

    def list_by_status(self, status: BookingStatus) -> List[Booking]:
        return self.db.query(Booking).filter(
            Booking.status == status
        ).order_by(Booking.created_at.desc(), Booking.id.desc()).all()

    def find_conflicts(self, facility_id: int, booking_date: date,
                       start_time: time, end_time: time) -> List[Booking]:
        """
        查找与 [start_time, end_time) 重叠的有效预订

        半开区间：首尾相接（existing.end == start）不算冲突
        """
        return self.db.query(Booking).filter(
            Booking.facility_id == facility_id,
            Booking.date == booking_date,
            Booking.status.in_(ACTIVE_BOOKING_STATUSES),
            Booking.start_time < end_time,
            Booking.end_time > start_time,
        ).order_by(Booking.start_time).all()

    def list_active_on(self, facility_id: int, booking_date: date) -> List[Booking]:
        """某设施某日占用时段的预订（可用性查询）"""
        return self.db.query(Booking).filter(
            Booking.facility_id == facility_id,
            Booking.date == booking_date,
            Booking.status.in_(ACTIVE_BOOKING_STATUSES),
        ).order_by(Booking.start_time).all()

    # ============== 创建 ==============

    def create_booking(self, data: BookingCreate, requester: User) -> Booking:
        """
        创建预订（pending）

        校验顺序：设施存在 -> 设施可用 -> 时间合法 -> 无冲突
        """
        with self._locks.hold(data.facility_id, data.date):
            try:
                facility = self.db.query(Facility).filter(
                    Facility.id == data.facility_id
                ).with_for_update().first()
                if not facility:
                    raise NotFoundError(f"Facility not found with id: {data.facility_id}")

                if facility.status != FacilityStatus.ACTIVE:
                    raise InvalidStateError("Facility is not available for booking")

                if data.start_time >= data.end_time:
                    raise InvalidArgumentError("Start time must be before end time")

                conflicts = self.find_conflicts(
                    data.facility_id, data.date, data.start_time, data.end_time
                )
                if conflicts:
                    logger.warning(
                        f"Booking conflict on facility {data.facility_id} {data.date} "
                        f"{data.start_time}-{data.end_time}: "
                        f"{[b.id for b in conflicts]}"
                    )
                    raise ConflictError("Time slot conflicts with existing booking(s)")

                now = self._clock()
                booking = Booking(
                    facility_id=facility.id,
                    facility_name=facility.name,
                    user_id=requester.id,
                    user_name=requester.name,
                    date=data.date,
                    start_time=data.start_time,
                    end_time=data.end_time,
                    purpose=data.purpose,
                    expected_attendees=data.expected_attendees,
                    status=BookingStatus.PENDING,
                    created_at=now,
                    updated_at=now,
                )
                self.db.add(booking)
                # 释放时段锁前提交
                self.db.commit()
            except Exception:
                self.db.rollback()
                raise

        self.db.refresh(booking)
        logger.info(
            f"Booking {booking.id} created: facility {booking.facility_id} "
            f"{booking.date} {booking.start_time}-{booking.end_time}"
        )
        return booking

    # ============== 状态流转 ==============

    def _transition(self, booking_id: int, target: BookingStatus, values: dict) -> bool:
        """
        条件更新：仅当当前状态可流转到 target 时写入

        Returns:
            是否更新成功；并发下的失败方返回 False
        """
        sources = [BookingStatus(s) for s in booking_machine.sources_of(target.value)]
        values = dict(values, status=target, updated_at=self._clock())
        count = self.db.query(Booking).filter(
            Booking.id == booking_id,
            Booking.status.in_(sources),
        ).update(values, synchronize_session=False)
        self.db.commit()
        return count == 1

    def approve_booking(self, booking_id: int, reviewer_id: int) -> Booking:
        """审批通过，通知申请人"""
        booking = self.get_booking(booking_id)
        if not self._transition(booking_id, BookingStatus.APPROVED, {"reviewed_by": reviewer_id}):
            raise InvalidStateError("Only pending bookings can be approved")

        self.db.refresh(booking)
        logger.info(f"Booking {booking_id} approved by {reviewer_id}")

        self.notification_service.create_notification(
            recipient_id=booking.user_id,
            title="Booking Approved",
            message=(
                f"Your booking for {booking.facility_name} on "
                f"{booking.date.isoformat()} has been approved."
            ),
            notification_type=NotificationType.BOOKING_APPROVED,
            reference=NotificationReference.booking(booking.id),
        )
        return booking

    def reject_booking(self, booking_id: int, reviewer_id: int, reason: str) -> Booking:
        """驳回，原因原样保存并通知申请人"""
        booking = self.get_booking(booking_id)
        if not self._transition(booking_id, BookingStatus.REJECTED, {
            "reviewed_by": reviewer_id,
            "rejection_reason": reason,
        }):
            raise InvalidStateError("Only pending bookings can be rejected")

        self.db.refresh(booking)
        logger.info(f"Booking {booking_id} rejected by {reviewer_id}: {reason}")

        self.notification_service.create_notification(
            recipient_id=booking.user_id,
            title="Booking Rejected",
            message=(
                f"Your booking for {booking.facility_name} has been rejected. "
                f"Reason: {reason}"
            ),
            notification_type=NotificationType.BOOKING_REJECTED,
            reference=NotificationReference.booking(booking.id),
        )
        return booking

    def cancel_booking(self, booking_id: int, actor_id: int,
                       reason: Optional[str] = None) -> Booking:
        """取消预订（pending/approved 均可取消），不发通知"""
        booking = self.get_booking(booking_id)
        if not self._transition(booking_id, BookingStatus.CANCELLED, {
            "cancellation_reason": reason,
        }):
            self.db.refresh(booking)
            if booking.status == BookingStatus.CANCELLED:
                raise InvalidStateError("Booking is already cancelled")
            raise InvalidStateError("Cannot cancel a rejected booking")

        self.db.refresh(booking)
        logger.info(f"Booking {booking_id} cancelled by {actor_id}")
        return booking
