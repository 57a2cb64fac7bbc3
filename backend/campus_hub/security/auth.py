"""
认证与授权模块
bcrypt 密码哈希 + HS256 JWT Bearer Token + 基于角色的接口访问控制
"""
import bcrypt
import logging
from datetime import datetime, timedelta, UTC
from typing import List, Optional
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError, jwt
from sqlalchemy.orm import Session
from campus_hub.config import settings
from campus_hub.database import get_db
from campus_hub.models.ontology import User, UserRole

logger = logging.getLogger(__name__)

# 缺少凭证时由 get_current_user 统一返回 401
security = HTTPBearer(auto_error=False)


def get_password_hash(password: str) -> str:
    """密码哈希"""
    salt = bcrypt.gensalt()
    return bcrypt.hashpw(password.encode('utf-8'), salt).decode('utf-8')


def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    """验证密码；无密码账号（Google 登录）一律失败"""
    if not hashed_password:
        return False
    return bcrypt.checkpw(plain_password.encode('utf-8'), hashed_password.encode('utf-8'))


def create_access_token(user_id: int, email: str, roles: List[str],
                        expires_delta: Optional[timedelta] = None) -> str:
    """创建 JWT token，携带 sub / email / roles"""
    expire = datetime.now(UTC) + (
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    to_encode = {
        "sub": str(user_id),
        "email": email,
        "roles": list(roles),
        "exp": expire
    }
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def create_token_for(user: User) -> str:
    return create_access_token(user.id, user.email, user.roles or [])


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def decode_token(token: str) -> dict:
    """解码 JWT token"""
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
        return payload
    except JWTError:
        raise _unauthorized("Invalid authentication credentials")


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db)
) -> User:
    """获取当前登录用户"""
    if credentials is None:
        raise _unauthorized("Not authenticated")

    payload = decode_token(credentials.credentials)
    try:
        user_id = int(payload.get("sub"))
    except (TypeError, ValueError):
        raise _unauthorized("Invalid authentication credentials")

    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise _unauthorized("User not found")

    if not user.enabled:
        raise _unauthorized("Account is disabled")

    return user


def require_roles(*allowed_roles: UserRole):
    """角色权限验证：持有任一角色即通过"""
    async def role_checker(current_user: User = Depends(get_current_user)):
        if not current_user.has_role(*allowed_roles):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Access denied"
            )
        return current_user
    return role_checker


# 便捷的角色检查器
require_admin = require_roles(UserRole.ADMIN)
require_admin_or_technician = require_roles(UserRole.ADMIN, UserRole.TECHNICIAN)
