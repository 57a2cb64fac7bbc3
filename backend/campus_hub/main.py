"""
Campus Hub 主应用入口
校园设施预订与报修系统
"""
import logging
from contextlib import asynccontextmanager
from pathlib import Path
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from campus_hub.config import settings
from campus_hub.database import init_db, SessionLocal
from campus_hub.errors import ServiceError
from campus_hub.routers import auth, facilities, bookings, tickets, comments, notifications

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """应用生命周期管理"""
    # 初始化数据库
    init_db()

    # 注册状态机
    from campus_hub.services.transitions import register_state_machines
    register_state_machines()

    Path(settings.UPLOAD_DIR).mkdir(parents=True, exist_ok=True)

    # 演示数据
    if settings.SEED_DEMO_DATA:
        from campus_hub.services.data_seed import seed_demo_data
        db = SessionLocal()
        try:
            seed_demo_data(db)
        finally:
            db.close()

    logger.info(f"{settings.APP_NAME} started")

    yield

    # 关闭时执行
    logger.info(f"{settings.APP_NAME} stopped")


# 创建应用
app = FastAPI(
    title=settings.APP_NAME,
    description="校园设施预订与报修系统",
    version="1.0.0",
    lifespan=lifespan
)

# CORS 配置
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError):
    """业务异常统一转换为 JSON 响应"""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path}: {exc.message}")
    else:
        logger.debug(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


# 注册路由
app.include_router(auth.router)
app.include_router(facilities.router)
app.include_router(bookings.router)
app.include_router(tickets.router)
app.include_router(comments.router)
app.include_router(notifications.router)

# 附件访问
app.mount("/uploads", StaticFiles(directory=settings.UPLOAD_DIR, check_dir=False), name="uploads")


@app.get("/")
def root():
    """根路径"""
    return {
        "name": settings.APP_NAME,
        "version": "1.0.0",
        "description": "校园设施预订与报修系统"
    }


@app.get("/health")
def health_check():
    """健康检查"""
    return {"status": "healthy"}
