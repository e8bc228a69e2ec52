from typing import Dict, List, Optional

# 聚合口径：内连接（无渔获的用户不会出现），同分按 user_id 升序保证结果稳定
_COUNT_EXPRESSIONS = {
    "total_catches": "COUNT(c.id)",
    "unique_species": "COUNT(DISTINCT c.species)",
}


class LeaderboardRepository:
    def __init__(self, db):
        self.db = db

    def rank_users_by_count(self, criterion: str, lake_id: Optional[int], limit: int) -> List[Dict]:
        count_expr = _COUNT_EXPRESSIONS.get(criterion)
        if count_expr is None:
            raise ValueError(f"unsupported count criterion: {criterion}")

        where_sql = ""
        params: list = []
        if lake_id is not None:
            where_sql = "WHERE c.lake_id = ?"
            params.append(int(lake_id))
        params.append(int(limit))

        conn = self.db._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                f"""
                SELECT
                    u.id AS user_id,
                    u.username,
                    u.profile_image_url,
                    {count_expr} AS metric_value
                FROM users u
                JOIN catches c ON u.id = c.user_id
                {where_sql}
                GROUP BY u.id, u.username, u.profile_image_url
                ORDER BY metric_value DESC, u.id ASC
                LIMIT ?
                """,
                params,
            )
            rows = cursor.fetchall()
        finally:
            conn.close()
        return [dict(row) for row in rows]

    def rank_largest_catches(self, lake_id: Optional[int], limit: int) -> List[Dict]:
        where_sql = "WHERE c.size IS NOT NULL AND c.size > 0"
        params: list = []
        if lake_id is not None:
            where_sql += " AND c.lake_id = ?"
            params.append(int(lake_id))
        params.append(int(limit))

        conn = self.db._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                f"""
                SELECT
                    u.id AS user_id,
                    u.username,
                    u.profile_image_url,
                    c.id AS catch_id,
                    c.species,
                    c.size,
                    c.weight,
                    c.catch_date
                FROM users u
                JOIN catches c ON u.id = c.user_id
                {where_sql}
                ORDER BY c.size DESC, u.id ASC, c.id ASC
                LIMIT ?
                """,
                params,
            )
            rows = cursor.fetchall()
        finally:
            conn.close()
        return [dict(row) for row in rows]
