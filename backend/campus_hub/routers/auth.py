"""
认证路由 - 注册 / 登录 / Google 登录 / 用户管理
"""
from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from campus_hub.database import get_db
from campus_hub.models.ontology import User
from campus_hub.models.schemas import (
    RegisterRequest, LoginRequest, GoogleCredential, AuthResponse, UserResponse,
    UserRolesUpdate, UserEnabledUpdate
)
from campus_hub.services.user_service import UserService
from campus_hub.security.auth import get_current_user, require_admin, create_token_for

router = APIRouter(prefix="/api/auth", tags=["认证"])


def _auth_response(user: User) -> AuthResponse:
    return AuthResponse(
        access_token=create_token_for(user),
        user=UserResponse.model_validate(user),
    )


@router.post("/register", response_model=AuthResponse)
def register(data: RegisterRequest, db: Session = Depends(get_db)):
    """注册"""
    user = UserService(db).register(data)
    return _auth_response(user)


@router.post("/login", response_model=AuthResponse)
def login(data: LoginRequest, db: Session = Depends(get_db)):
    """用户登录"""
    user = UserService(db).login(data)
    return _auth_response(user)


@router.post("/google/verify", response_model=AuthResponse)
def google_verify(data: GoogleCredential, db: Session = Depends(get_db)):
    """Google 登录"""
    user = UserService(db).google_sign_in(data.credential)
    return _auth_response(user)


@router.get("/me", response_model=UserResponse)
def get_current_user_info(current_user: User = Depends(get_current_user)):
    """获取当前用户信息"""
    return current_user


@router.get("/users", response_model=List[UserResponse])
def list_users(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin)
):
    """用户列表"""
    return UserService(db).list_users()


@router.put("/users/{user_id}/roles", response_model=UserResponse)
def update_user_roles(
    user_id: int,
    data: UserRolesUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin)
):
    """设置用户角色"""
    return UserService(db).update_user_roles(user_id, data.roles)


@router.put("/users/{user_id}/enabled", response_model=UserResponse)
def set_user_enabled(
    user_id: int,
    data: UserEnabledUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin)
):
    """启用 / 停用用户"""
    return UserService(db).set_user_enabled(user_id, data.enabled)
