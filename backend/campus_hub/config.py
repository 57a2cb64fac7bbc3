"""
应用配置
从环境变量读取配置，支持 .env 文件
"""
import os
from typing import List, Optional
from pydantic import ConfigDict
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """应用设置"""

    # 应用基础配置
    APP_NAME: str = "Campus Hub"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: List[str] = ["*"]

    # 数据库配置
    DATABASE_URL: str = "sqlite:///./campus_hub.db"

    # JWT 配置
    SECRET_KEY: str = "campus-hub-secret-key-change-in-production"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 1440

    # 附件存储
    UPLOAD_DIR: str = os.environ.get("UPLOAD_DIR", "./uploads")
    MAX_TICKET_ATTACHMENTS: int = 3

    # Google 登录
    GOOGLE_CLIENT_ID: Optional[str] = None
    GOOGLE_TOKENINFO_URL: str = "https://oauth2.googleapis.com/tokeninfo"
    GOOGLE_VERIFY_TIMEOUT: float = 10.0

    # 工单状态流转：False 时非法流转只记录告警
    TICKET_STRICT_TRANSITIONS: bool = False

    # 空库启动时写入演示数据
    SEED_DEMO_DATA: bool = True

    model_config = ConfigDict(env_file=".env", case_sensitive=True, extra="ignore")


# 全局设置实例
settings = Settings()
