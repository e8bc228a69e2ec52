"""
排行榜聚合服务

按统计口径（渔获总数 / 鱼种数 / 单条最大渔获）与范围（全局或单个水域）
实时计算前 N 名。每次调用都基于全量渔获重新计算，不做缓存。
"""
from dataclasses import dataclass
from typing import Dict, List, Optional

from app.core.concurrency import run_in_thread
from app.core.config import load_app_config
from app.repositories import LeaderboardRepository

TOTAL_CATCHES = "total_catches"
UNIQUE_SPECIES = "unique_species"
LARGEST_CATCH = "largest_catch"
CRITERIA = (TOTAL_CATCHES, UNIQUE_SPECIES, LARGEST_CATCH)

# 旧版接口的口径名称
CRITERION_ALIASES = {
    "catches": TOTAL_CATCHES,
    "species": UNIQUE_SPECIES,
    "size": LARGEST_CATCH,
}

GLOBAL_SCOPE = "global"


class LeaderboardValidationError(ValueError):
    pass


@dataclass(frozen=True)
class LeaderboardQuery:
    criterion: str
    lake_id: Optional[int]
    limit: int

    @property
    def scope(self) -> str:
        return GLOBAL_SCOPE if self.lake_id is None else str(self.lake_id)


def parse_criterion(raw: Optional[str]) -> str:
    value = (raw or "").strip().lower()
    value = CRITERION_ALIASES.get(value, value)
    if value not in CRITERIA:
        raise LeaderboardValidationError(
            f"Invalid criterion: {raw!r} (expected one of {', '.join(CRITERIA)})"
        )
    return value


def parse_scope(raw) -> Optional[int]:
    if raw is None:
        return None
    if isinstance(raw, int) and not isinstance(raw, bool):
        lake_id = raw
    else:
        text = str(raw).strip().lower()
        if text in ("", GLOBAL_SCOPE):
            return None
        if not text.isdigit():
            raise LeaderboardValidationError(f"Invalid scope: {raw!r}")
        lake_id = int(text)
    if lake_id <= 0:
        raise LeaderboardValidationError(f"Invalid scope: {raw!r}")
    return lake_id


class LeaderboardService:
    def __init__(self, default_limit: Optional[int] = None, max_limit: Optional[int] = None):
        config = load_app_config()
        self.default_limit = default_limit or config.leaderboard_default_limit
        self.max_limit = max_limit or config.leaderboard_max_limit

    def parse_limit(self, raw) -> int:
        if raw is None:
            return self.default_limit
        try:
            limit = int(raw)
        except (TypeError, ValueError):
            raise LeaderboardValidationError(f"Invalid limit: {raw!r}")
        if limit < 1:
            raise LeaderboardValidationError(f"Invalid limit: {raw!r}")
        return min(limit, self.max_limit)

    def build_query(self, criterion: Optional[str], scope=GLOBAL_SCOPE, limit=None) -> LeaderboardQuery:
        """校验参数；非法口径在访问存储之前即被拒绝。"""
        return LeaderboardQuery(
            criterion=parse_criterion(criterion),
            lake_id=parse_scope(scope),
            limit=self.parse_limit(limit),
        )

    @staticmethod
    def _to_entries(query: LeaderboardQuery, rows: List[Dict]) -> List[Dict]:
        entries = []
        for idx, row in enumerate(rows, start=1):
            if query.criterion == LARGEST_CATCH:
                metric_value = {
                    "catch_id": int(row["catch_id"]),
                    "species": row["species"],
                    "size": float(row["size"]),
                    "weight": float(row["weight"]) if row.get("weight") is not None else None,
                    "catch_date": row.get("catch_date"),
                }
            else:
                metric_value = int(row["metric_value"])
            entries.append({
                "rank": idx,
                "user_id": row["user_id"],
                "username": row["username"],
                "profile_image_url": row.get("profile_image_url"),
                "metric_value": metric_value,
            })
        return entries

    def compute(self, db, query: LeaderboardQuery) -> List[Dict]:
        repo = LeaderboardRepository(db)
        if query.criterion == LARGEST_CATCH:
            rows = repo.rank_largest_catches(query.lake_id, query.limit)
        else:
            rows = repo.rank_users_by_count(query.criterion, query.lake_id, query.limit)
        return self._to_entries(query, rows)

    async def get_leaderboard(self, *, db, criterion: Optional[str], scope=GLOBAL_SCOPE, limit=None) -> List[Dict]:
        query = self.build_query(criterion, scope=scope, limit=limit)
        return await run_in_thread(self.compute, db, query)
