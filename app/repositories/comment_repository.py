from typing import Dict, List, Optional

_SELECT_WITH_USER = """
    SELECT
        cm.id, cm.catch_id, cm.user_id, cm.content, cm.created_at, cm.updated_at,
        u.username AS user_username,
        u.first_name AS user_first_name,
        u.last_name AS user_last_name,
        u.profile_image_url AS user_profile_image_url
    FROM comments cm
    LEFT JOIN users u ON cm.user_id = u.id
"""


class CommentRepository:
    def __init__(self, db):
        self.db = db

    @staticmethod
    def _row_to_comment(row) -> Dict:
        data = dict(row)
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

    def add_comment(self, user_id: str, catch_id: int, content: str) -> Dict:
        conn = self.db._get_connection()
        cursor = conn.cursor()
        cursor.execute(
            "INSERT INTO comments (user_id, catch_id, content) VALUES (?, ?, ?)",
            (user_id, int(catch_id), content),
        )
        comment_id = cursor.lastrowid
        conn.commit()
        conn.close()
        return self.get_comment(comment_id)

    def get_comment(self, comment_id: int) -> Optional[Dict]:
        conn = self.db._get_connection()
        cursor = conn.cursor()
        cursor.execute(f"{_SELECT_WITH_USER} WHERE cm.id = ?", (int(comment_id),))
        row = cursor.fetchone()
        conn.close()
        if not row:
            return None
        return self._row_to_comment(row)

    def list_catch_comments(self, catch_id: int) -> List[Dict]:
        """按发表时间正序。"""
        conn = self.db._get_connection()
        cursor = conn.cursor()
        cursor.execute(
            f"""
            {_SELECT_WITH_USER}
            WHERE cm.catch_id = ?
            ORDER BY cm.created_at ASC, cm.id ASC
            """,
            (int(catch_id),),
        )
        rows = cursor.fetchall()
        conn.close()
        return [self._row_to_comment(row) for row in rows]

    def update_comment(self, comment_id: int, content: str) -> Optional[Dict]:
        conn = self.db._get_connection()
        cursor = conn.cursor()
        cursor.execute(
            "UPDATE comments SET content = ?, updated_at = CURRENT_TIMESTAMP WHERE id = ?",
            (content, int(comment_id)),
        )
        updated = cursor.rowcount > 0
        conn.commit()
        conn.close()
        if not updated:
            return None
        return self.get_comment(comment_id)

    def delete_comment(self, comment_id: int) -> bool:
        conn = self.db._get_connection()
        cursor = conn.cursor()
        cursor.execute("DELETE FROM comments WHERE id = ?", (int(comment_id),))
        deleted = cursor.rowcount > 0
        conn.commit()
        conn.close()
        return deleted
