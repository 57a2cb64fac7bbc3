"""
用户服务 - 注册 / 登录 / Google 登录 / 用户管理
"""
from typing import List, Optional
import logging
from sqlalchemy.orm import Session
from campus_hub.clock import Clock, utc_now
from campus_hub.errors import NotFoundError, InvalidArgumentError, AuthenticationError
from campus_hub.models.ontology import User, UserRole, AuthProvider
from campus_hub.models.schemas import RegisterRequest, LoginRequest
from campus_hub.security.auth import get_password_hash, verify_password
from campus_hub.services.google_verifier import GoogleTokenVerifier

logger = logging.getLogger(__name__)


class UserService:
    """用户服务"""

    def __init__(self, db: Session, verifier: Optional[GoogleTokenVerifier] = None,
                 clock: Optional[Clock] = None):
        self.db = db
        self._verifier = verifier
        self._clock = clock or utc_now

    def get_user(self, user_id: int) -> User:
        user = self.db.query(User).filter(User.id == user_id).first()
        if not user:
            raise NotFoundError(f"User not found with id: {user_id}")
        return user

    def get_by_email(self, email: str) -> Optional[User]:
        return self.db.query(User).filter(User.email == email).first()

    def list_users(self) -> List[User]:
        return self.db.query(User).order_by(User.id).all()

    def register(self, data: RegisterRequest) -> User:
        """注册本地账号，默认角色 user"""
        if self.get_by_email(data.email):
            raise InvalidArgumentError("Email already registered")

        now = self._clock()
        user = User(
            email=data.email,
            name=data.name,
            password_hash=get_password_hash(data.password),
            provider=AuthProvider.LOCAL,
            roles=[UserRole.USER.value],
            enabled=True,
            created_at=now,
            updated_at=now,
        )
        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)
        logger.info(f"User registered: {user.email}")
        return user

    def login(self, data: LoginRequest) -> User:
        """邮箱密码登录"""
        user = self.get_by_email(data.email)
        if not user or not verify_password(data.password, user.password_hash):
            logger.warning(f"Failed login attempt for {data.email}")
            raise AuthenticationError("Invalid email or password")
        if not user.enabled:
            raise AuthenticationError("Account is disabled")
        return user

    def google_sign_in(self, credential: str) -> User:
        """
        Google 登录：校验 ID Token 后按邮箱查找或创建用户

        已有用户刷新姓名与头像
        """
        verifier = self._verifier or GoogleTokenVerifier()
        identity = verifier.verify(credential)

        now = self._clock()
        user = self.get_by_email(identity.email)
        if user is None:
            user = User(
                email=identity.email,
                name=identity.name,
                avatar_url=identity.picture,
                provider=AuthProvider.GOOGLE,
                provider_id=identity.sub,
                roles=[UserRole.USER.value],
                enabled=True,
                created_at=now,
                updated_at=now,
            )
            self.db.add(user)
            logger.info(f"Google user created: {identity.email}")
        else:
            if not user.enabled:
                raise AuthenticationError("Account is disabled")
            user.name = identity.name
            if identity.picture:
                user.avatar_url = identity.picture
            user.updated_at = now

        self.db.commit()
        self.db.refresh(user)
        return user

    def update_user_roles(self, user_id: int, roles: List[str]) -> User:
        """替换用户角色列表（保持给定顺序，去重）"""
        if not roles:
            raise InvalidArgumentError("At least one role is required")
        parsed = []
        for role in roles:
            try:
                value = UserRole(role.strip().lower()).value
            except ValueError:
                raise InvalidArgumentError(f"Unknown role: {role}")
            if value not in parsed:
                parsed.append(value)

        user = self.get_user(user_id)
        user.roles = parsed
        user.updated_at = self._clock()
        self.db.commit()
        self.db.refresh(user)
        logger.info(f"User {user_id} roles set to {parsed}")
        return user

    def set_user_enabled(self, user_id: int, enabled: bool) -> User:
        user = self.get_user(user_id)
        user.enabled = enabled
        user.updated_at = self._clock()
        self.db.commit()
        self.db.refresh(user)
        logger.info(f"User {user_id} {'enabled' if enabled else 'disabled'}")
        return user
