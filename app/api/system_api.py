from typing import Optional

from fastapi import APIRouter, Depends, Query

from app.core.concurrency import run_in_thread
from app.core.deps import get_db
from app.logger import clear_logs, read_logs
from app.security import require_admin_token

router = APIRouter()


@router.get("/api/status")
async def get_status():
    return {"status": "online"}


@router.get("/api/logs")
async def get_logs(
    lines: int = Query(200, ge=1, le=5000, description="Number of log lines to return"),
    level: Optional[str] = Query(None, description="INFO / WARNING / ERROR"),
):
    log_lines = await run_in_thread(read_logs, lines, level)
    return {"logs": log_lines}


@router.delete("/api/logs", dependencies=[Depends(require_admin_token)])
async def delete_logs():
    await run_in_thread(clear_logs)
    return {"message": "日志已清空"}


@router.get("/api/database/stats")
async def get_database_stats(db=Depends(get_db)):
    return await run_in_thread(db.get_database_stats)
