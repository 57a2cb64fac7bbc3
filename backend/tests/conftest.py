"""
Pytest 配置和共享 fixtures
"""
import os
import tempfile

# 必须在导入应用之前设置：测试不写演示数据，也不落地到工作目录
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SEED_DEMO_DATA", "false")
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="campus_hub_uploads_"))

import pytest
from datetime import datetime
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient

from campus_hub.clock import FixedClock
from campus_hub.database import Base, get_db
from campus_hub.models import ontology  # noqa: F401
from campus_hub.models.ontology import (
    User, UserRole, AuthProvider, Facility, FacilityType, FacilityStatus
)
from campus_hub.security.auth import get_password_hash, create_token_for
from campus_hub.services.file_storage import FileStorage
from campus_hub.main import app


@pytest.fixture(scope="function")
def db_engine():
    """创建内存数据库引擎"""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def db_session(db_engine):
    """创建数据库会话"""
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture(scope="function")
def client(db_session):
    """创建测试客户端"""
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def clock():
    """固定时间源"""
    return FixedClock(datetime(2026, 3, 1, 9, 0, 0))


@pytest.fixture
def storage(tmp_path):
    """临时目录中的附件存储"""
    return FileStorage(str(tmp_path / "uploads"))


# ============== 用户相关 Fixtures ==============

def make_user(db, email, name, roles, password="password123", enabled=True):
    """创建本地账号"""
    user = User(
        email=email,
        name=name,
        password_hash=get_password_hash(password),
        provider=AuthProvider.LOCAL,
        roles=[r.value for r in roles],
        enabled=enabled,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def admin_user(db_session):
    return make_user(db_session, "admin@campus.edu", "Admin User", [UserRole.ADMIN])


@pytest.fixture
def technician_user(db_session):
    return make_user(db_session, "tech@campus.edu", "John Technician", [UserRole.TECHNICIAN])


@pytest.fixture
def student_user(db_session):
    return make_user(db_session, "student@campus.edu", "Jane Student", [UserRole.USER])


@pytest.fixture
def other_user(db_session):
    return make_user(db_session, "other@campus.edu", "Other Student", [UserRole.USER])


@pytest.fixture
def admin_auth_headers(admin_user):
    """返回管理员认证的请求头"""
    return {"Authorization": f"Bearer {create_token_for(admin_user)}"}


@pytest.fixture
def technician_auth_headers(technician_user):
    """返回技术员认证的请求头"""
    return {"Authorization": f"Bearer {create_token_for(technician_user)}"}


@pytest.fixture
def student_auth_headers(student_user):
    """返回普通用户认证的请求头"""
    return {"Authorization": f"Bearer {create_token_for(student_user)}"}


@pytest.fixture
def other_auth_headers(other_user):
    return {"Authorization": f"Bearer {create_token_for(other_user)}"}


# ============== 实体相关 Fixtures ==============

def make_facility(db, name="Main Lecture Hall A", status=FacilityStatus.ACTIVE,
                  facility_type=FacilityType.LECTURE_HALL, capacity=200,
                  location="Block A, Ground Floor"):
    """创建设施"""
    facility = Facility(
        name=name,
        type=facility_type,
        capacity=capacity,
        location=location,
        building="Block A",
        floor="Ground",
        amenities=["Projector", "Whiteboard"],
        image_urls=[],
        status=status,
    )
    db.add(facility)
    db.commit()
    db.refresh(facility)
    return facility


@pytest.fixture
def sample_facility(db_session):
    """创建可预订设施"""
    return make_facility(db_session)


@pytest.fixture
def user_factory(db_session):
    """按需创建用户: user_factory(email, name, roles)"""
    def _create(email, name="Test User", roles=(UserRole.USER,), **kwargs):
        return make_user(db_session, email, name, list(roles), **kwargs)
    return _create


@pytest.fixture
def facility_factory(db_session):
    """按需创建设施"""
    def _create(**kwargs):
        return make_facility(db_session, **kwargs)
    return _create
