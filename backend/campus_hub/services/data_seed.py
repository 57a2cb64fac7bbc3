"""
演示数据 - 空库启动时写入默认账号和设施

默认账号（密码均为 password123）：
  admin@smartcampus.com   Admin User       管理员
  tech@smartcampus.com    John Technician  技术员
  user@smartcampus.com    Jane Student     普通用户
"""
import logging
from datetime import time
from sqlalchemy.orm import Session
from campus_hub.clock import utc_now
from campus_hub.models.ontology import (
    User, UserRole, AuthProvider, Facility, FacilityType, FacilityStatus,
    AvailabilityWindow, DayOfWeek
)
from campus_hub.security.auth import get_password_hash

logger = logging.getLogger(__name__)

DEMO_PASSWORD = "password123"

SEED_USERS = [
    ("Admin User", "admin@smartcampus.com", UserRole.ADMIN),
    ("John Technician", "tech@smartcampus.com", UserRole.TECHNICIAN),
    ("Jane Student", "user@smartcampus.com", UserRole.USER),
]

# (名称, 类型, 容量, 位置, 楼栋, 楼层, 描述, 配套设施)
SEED_FACILITIES = [
    ("Main Lecture Hall A", FacilityType.LECTURE_HALL, 200,
     "Block A, Ground Floor", "Block A", "Ground",
     "Large lecture hall with tiered seating and AV system",
     ["Projector", "Microphone", "Air Conditioning", "Whiteboard"]),
    ("Computer Lab 101", FacilityType.LAB, 50,
     "Block B, 1st Floor", "Block B", "1st",
     "Modern computer lab with high-spec workstations",
     ["Computers", "Projector", "Air Conditioning", "Printer"]),
    ("Board Meeting Room", FacilityType.MEETING_ROOM, 20,
     "Admin Block, 3rd Floor", "Admin Block", "3rd",
     "Executive meeting room with video conferencing",
     ["Video Conferencing", "Whiteboard", "Projector", "Coffee Machine"]),
    ("Science Lab 201", FacilityType.LAB, 40,
     "Block C, 2nd Floor", "Block C", "2nd",
     "Fully equipped science laboratory",
     ["Lab Equipment", "Safety Gear", "Ventilation", "Emergency Shower"]),
    ("Seminar Room B2", FacilityType.MEETING_ROOM, 30,
     "Block B, 2nd Floor", "Block B", "2nd",
     "Seminar room suitable for workshops",
     ["Projector", "Whiteboard", "Air Conditioning"]),
    ("Sony Projector #1", FacilityType.PROJECTOR, 0,
     "Equipment Store, Block A", "Block A", "Ground",
     "Portable Sony VPL-FHZ75 projector",
     ["4K Resolution", "Wireless Connectivity"]),
    ("Canon Camera #1", FacilityType.CAMERA, 0,
     "Media Room, Block D", "Block D", "1st",
     "Canon EOS R5 camera for event photography",
     ["4K Video", "Extra Batteries", "Tripod"]),
    ("Auditorium", FacilityType.AUDITORIUM, 500,
     "Main Building, Ground Floor", "Main Building", "Ground",
     "Main university auditorium for large events",
     ["Stage", "Sound System", "Lighting", "Air Conditioning", "Backstage"]),
]

WEEKDAYS = [
    DayOfWeek.MONDAY, DayOfWeek.TUESDAY, DayOfWeek.WEDNESDAY,
    DayOfWeek.THURSDAY, DayOfWeek.FRIDAY,
]


def seed_users(db: Session) -> int:
    """用户表为空时创建默认账号"""
    if db.query(User).count() > 0:
        return 0
    now = utc_now()
    password_hash = get_password_hash(DEMO_PASSWORD)
    for name, email, role in SEED_USERS:
        db.add(User(
            name=name, email=email, password_hash=password_hash,
            provider=AuthProvider.LOCAL, roles=[role.value], enabled=True,
            created_at=now, updated_at=now,
        ))
    db.flush()
    return len(SEED_USERS)


def seed_facilities(db: Session) -> int:
    """设施表为空时创建演示设施，工作日 08:00-18:00 开放"""
    if db.query(Facility).count() > 0:
        return 0
    now = utc_now()
    for name, ftype, capacity, location, building, floor, description, amenities in SEED_FACILITIES:
        db.add(Facility(
            name=name, type=ftype, capacity=capacity, location=location,
            building=building, floor=floor, description=description,
            amenities=amenities, image_urls=[], status=FacilityStatus.ACTIVE,
            availability_windows=[
                AvailabilityWindow(day_of_week=day, start_time=time(8, 0), end_time=time(18, 0))
                for day in WEEKDAYS
            ],
            created_at=now, updated_at=now,
        ))
    db.flush()
    return len(SEED_FACILITIES)


def seed_demo_data(db: Session) -> None:
    """写入演示数据（已有数据的表跳过）"""
    users = seed_users(db)
    facilities = seed_facilities(db)
    db.commit()
    if users or facilities:
        logger.info(f"Seeded demo data: {users} users, {facilities} facilities")
