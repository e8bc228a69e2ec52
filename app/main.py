from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI, Request

from app.api.admin_api import router as admin_api_router
from app.api.auth_api import router as auth_api_router
from app.api.catches_api import router as catches_api_router
from app.api.comments_api import router as comments_api_router
from app.api.lakes_api import router as lakes_api_router
from app.api.leaderboard_api import router as leaderboard_api_router
from app.api.system_api import router as system_api_router
from app.api.users_api import router as users_api_router
from app.core.concurrency import run_in_thread
from app.core.metrics import log_api_metric, measure_ms
from app.database import Database
from app.logger import logger

# Load environment variables
load_dotenv()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """应用启动时初始化数据库结构，关闭时记录日志"""
    db = await run_in_thread(Database)
    logger.info(f"服务已启动，数据库: {db.db_path}")
    try:
        yield
    finally:
        logger.info("服务已停止")


app = FastAPI(title="Catchlog API", lifespan=lifespan)


@app.middleware("http")
async def api_metrics_middleware(request: Request, call_next):
    status_code = 500
    with measure_ms("api", path=request.url.path) as snapshot:
        response = await call_next(request)
        status_code = response.status_code
    log_api_metric(
        path=request.url.path,
        method=request.method,
        status_code=status_code,
        snapshot=snapshot,
    )
    return response


app.include_router(system_api_router)
app.include_router(auth_api_router)
app.include_router(users_api_router)
app.include_router(catches_api_router)
app.include_router(comments_api_router)
app.include_router(lakes_api_router)
app.include_router(leaderboard_api_router)
app.include_router(admin_api_router)
