import json
from typing import Dict, List, Optional

CATCH_COLUMNS = (
    "species",
    "size",
    "weight",
    "lake_id",
    "lake_name",
    "latitude",
    "longitude",
    "temperature",
    "depth",
    "lure",
    "weather_data",
    "comments",
    "catch_date",
)

_SELECT_WITH_USER = """
    SELECT
        c.*,
        u.username AS user_username,
        u.first_name AS user_first_name,
        u.last_name AS user_last_name,
        u.profile_image_url AS user_profile_image_url
    FROM catches c
    LEFT JOIN users u ON c.user_id = u.id
"""


class CatchRepository:
    def __init__(self, db):
        self.db = db

    @staticmethod
    def _row_to_catch(row) -> Dict:
        data = dict(row)
        weather_json = data.get("weather_data")
        try:
            data["weather_data"] = json.loads(weather_json) if weather_json else None
        except (TypeError, ValueError):
            data["weather_data"] = None
        data["is_verified"] = bool(data.get("is_verified"))
        if "user_username" in data:
            username = data.pop("user_username")
            user = {
                "id": data.get("user_id"),
                "username": username,
                "first_name": data.pop("user_first_name", None),
                "last_name": data.pop("user_last_name", None),
                "profile_image_url": data.pop("user_profile_image_url", None),
            }
            data["user"] = user if username is not None else None
        return data

    @staticmethod
    def _normalize_values(catch_data: Dict) -> Dict:
        values = {}
        for column in CATCH_COLUMNS:
            if column not in catch_data:
                continue
            value = catch_data[column]
            if column == "weather_data" and value is not None:
                value = json.dumps(value, ensure_ascii=False)
            if column == "species":
                value = (value or "").strip()
                if not value:
                    raise ValueError("species 不能为空")
            if column == "lake_name" and value is not None:
                value = value.strip() or None
            values[column] = value
        return values

    def create_catch(self, user_id: str, catch_data: Dict) -> Dict:
        values = self._normalize_values(catch_data)
        if "species" not in values:
            raise ValueError("species 不能为空")
        values = {k: v for k, v in values.items() if not (k == "catch_date" and v is None)}
        columns = ["user_id", *values.keys()]
        placeholders = ", ".join("?" for _ in columns)

        conn = self.db._get_connection()
        cursor = conn.cursor()
        cursor.execute(
            f"INSERT INTO catches ({', '.join(columns)}) VALUES ({placeholders})",
            [user_id, *values.values()],
        )
        catch_id = cursor.lastrowid
        conn.commit()
        conn.close()
        return self.get_catch(catch_id)

    def get_catch(self, catch_id: int) -> Optional[Dict]:
        conn = self.db._get_connection()
        cursor = conn.cursor()
        cursor.execute(f"{_SELECT_WITH_USER} WHERE c.id = ?", (int(catch_id),))
        row = cursor.fetchone()
        conn.close()
        if not row:
            return None
        return self._row_to_catch(row)

    def list_catches(self, limit: int = 20, offset: int = 0) -> List[Dict]:
        safe_limit = max(1, min(int(limit), 200))
        safe_offset = max(0, int(offset))
        conn = self.db._get_connection()
        cursor = conn.cursor()
        cursor.execute(
            f"""
            {_SELECT_WITH_USER}
            ORDER BY c.created_at DESC, c.id DESC
            LIMIT ? OFFSET ?
            """,
            (safe_limit, safe_offset),
        )
        rows = cursor.fetchall()
        conn.close()
        return [self._row_to_catch(row) for row in rows]

    def list_user_catches(self, user_id: str, limit: int = 10) -> List[Dict]:
        safe_limit = max(1, min(int(limit), 200))
        conn = self.db._get_connection()
        cursor = conn.cursor()
        cursor.execute(
            f"""
            {_SELECT_WITH_USER}
            WHERE c.user_id = ?
            ORDER BY c.created_at DESC, c.id DESC
            LIMIT ?
            """,
            (user_id, safe_limit),
        )
        rows = cursor.fetchall()
        conn.close()
        return [self._row_to_catch(row) for row in rows]

    def update_catch(self, catch_id: int, changes: Dict) -> Optional[Dict]:
        values = self._normalize_values(changes)
        if not values:
            return self.get_catch(catch_id)
        assignments = ", ".join(f"{column} = ?" for column in values)

        conn = self.db._get_connection()
        cursor = conn.cursor()
        cursor.execute(
            f"""
            UPDATE catches
            SET {assignments}, updated_at = CURRENT_TIMESTAMP
            WHERE id = ?
            """,
            [*values.values(), int(catch_id)],
        )
        updated = cursor.rowcount > 0
        conn.commit()
        conn.close()
        if not updated:
            return None
        return self.get_catch(catch_id)

    def delete_catch(self, catch_id: int) -> bool:
        conn = self.db._get_connection()
        cursor = conn.cursor()
        cursor.execute("DELETE FROM catches WHERE id = ?", (int(catch_id),))
        deleted = cursor.rowcount > 0
        conn.commit()
        conn.close()
        return deleted

    def verify_catch(self, catch_id: int) -> Optional[Dict]:
        conn = self.db._get_connection()
        cursor = conn.cursor()
        cursor.execute(
            "UPDATE catches SET is_verified = 1, updated_at = CURRENT_TIMESTAMP WHERE id = ?",
            (int(catch_id),),
        )
        updated = cursor.rowcount > 0
        conn.commit()
        conn.close()
        if not updated:
            return None
        return self.get_catch(catch_id)

    def like_catch(self, user_id: str, catch_id: int):
        conn = self.db._get_connection()
        cursor = conn.cursor()
        cursor.execute(
            "INSERT OR IGNORE INTO likes (user_id, catch_id) VALUES (?, ?)",
            (user_id, int(catch_id)),
        )
        conn.commit()
        conn.close()

    def unlike_catch(self, user_id: str, catch_id: int):
        conn = self.db._get_connection()
        cursor = conn.cursor()
        cursor.execute(
            "DELETE FROM likes WHERE user_id = ? AND catch_id = ?",
            (user_id, int(catch_id)),
        )
        conn.commit()
        conn.close()

    def get_like_status(self, user_id: Optional[str], catch_id: int) -> Dict:
        conn = self.db._get_connection()
        cursor = conn.cursor()
        cursor.execute("SELECT COUNT(*) AS count FROM likes WHERE catch_id = ?", (int(catch_id),))
        likes = int(cursor.fetchone()["count"])
        liked = False
        if user_id:
            cursor.execute(
                "SELECT 1 FROM likes WHERE user_id = ? AND catch_id = ? LIMIT 1",
                (user_id, int(catch_id)),
            )
            liked = cursor.fetchone() is not None
        conn.close()
        return {"catch_id": int(catch_id), "liked": liked, "likes": likes}

    def list_catches_for_export(self) -> List[Dict]:
        conn = self.db._get_connection()
        cursor = conn.cursor()
        cursor.execute(
            """
            SELECT
                c.id, u.username, c.species, c.size, c.weight,
                COALESCE(l.name, c.lake_name) AS lake,
                c.latitude, c.longitude, c.temperature, c.depth, c.lure,
                c.catch_date, c.is_verified
            FROM catches c
            JOIN users u ON c.user_id = u.id
            LEFT JOIN lakes l ON c.lake_id = l.id
            ORDER BY c.id ASC
            """
        )
        rows = cursor.fetchall()
        conn.close()
        return [dict(row) for row in rows]
