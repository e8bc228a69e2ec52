import sqlite3
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from app.core.deps import get_db
from app.logger import logger
from app.models import LeaderboardEntry
from app.services import LeaderboardService, LeaderboardValidationError

router = APIRouter()
service = LeaderboardService()


async def _leaderboard_response(*, db, criterion, scope, limit):
    try:
        return await service.get_leaderboard(db=db, criterion=criterion, scope=scope, limit=limit)
    except LeaderboardValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except sqlite3.Error as exc:
        logger.error(f"排行榜查询失败: criterion={criterion} scope={scope} error={exc}")
        raise HTTPException(status_code=500, detail="Failed to fetch leaderboard data")


@router.get("/api/leaderboard", response_model=List[LeaderboardEntry])
async def get_leaderboard(
    criterion: str = Query(..., description="total_catches / unique_species / largest_catch"),
    scope: str = Query("global", description="global 或水域 ID"),
    limit: Optional[int] = Query(None, description="返回条数，超过上限时截断"),
    db=Depends(get_db),
):
    return await _leaderboard_response(db=db, criterion=criterion, scope=scope, limit=limit)


@router.get("/api/leaderboard/global", response_model=List[LeaderboardEntry])
async def get_global_leaderboard(
    criteria: str = Query("catches", description="catches / species / size"),
    limit: Optional[int] = Query(None),
    db=Depends(get_db),
):
    return await _leaderboard_response(db=db, criterion=criteria, scope="global", limit=limit)


@router.get("/api/leaderboard/lake/{lake_id}", response_model=List[LeaderboardEntry])
async def get_lake_leaderboard(
    lake_id: int,
    criteria: str = Query("catches", description="catches / species / size"),
    limit: Optional[int] = Query(None),
    db=Depends(get_db),
):
    return await _leaderboard_response(db=db, criterion=criteria, scope=lake_id, limit=limit)
