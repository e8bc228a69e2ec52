import sqlite3
import uuid
from typing import Dict, List, Optional

VALID_ROLES = ("user", "moderator", "admin")

_PUBLIC_COLUMNS = "id, username, email, first_name, last_name, profile_image_url, bio, role, created_at"


class UserRepository:
    def __init__(self, db):
        self.db = db

    def create_user(
        self,
        *,
        username: str,
        email: str,
        password_hash: str,
        role: str = "user",
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
    ) -> Dict:
        if role not in VALID_ROLES:
            raise ValueError(f"非法角色: {role}")
        user_id = str(uuid.uuid4())
        conn = self.db._get_connection()
        cursor = conn.cursor()
        try:
            cursor.execute(
                """
                INSERT INTO users (id, username, email, password_hash, role, first_name, last_name)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (user_id, username.strip(), email.strip().lower(), password_hash, role, first_name, last_name),
            )
            conn.commit()
        except sqlite3.IntegrityError as exc:
            raise ValueError("Username or email already in use") from exc
        finally:
            conn.close()
        return self.get_user(user_id)

    def get_user(self, user_id: str) -> Optional[Dict]:
        conn = self.db._get_connection()
        cursor = conn.cursor()
        cursor.execute(f"SELECT {_PUBLIC_COLUMNS} FROM users WHERE id = ?", (user_id,))
        row = cursor.fetchone()
        conn.close()
        return dict(row) if row else None

    def get_user_with_password(self, email: str) -> Optional[Dict]:
        conn = self.db._get_connection()
        cursor = conn.cursor()
        cursor.execute(
            f"SELECT {_PUBLIC_COLUMNS}, password_hash FROM users WHERE email = ?",
            ((email or "").strip().lower(),),
        )
        row = cursor.fetchone()
        conn.close()
        return dict(row) if row else None

    def exists(self, *, email: Optional[str] = None, username: Optional[str] = None) -> bool:
        conn = self.db._get_connection()
        cursor = conn.cursor()
        if email is not None:
            cursor.execute("SELECT 1 FROM users WHERE email = ? LIMIT 1", (email.strip().lower(),))
        else:
            cursor.execute("SELECT 1 FROM users WHERE username = ? LIMIT 1", ((username or "").strip(),))
        found = cursor.fetchone() is not None
        conn.close()
        return found

    def list_users(self) -> List[Dict]:
        conn = self.db._get_connection()
        cursor = conn.cursor()
        cursor.execute(f"SELECT {_PUBLIC_COLUMNS} FROM users ORDER BY created_at ASC, username ASC")
        rows = cursor.fetchall()
        conn.close()
        return [dict(row) for row in rows]

    def update_user_role(self, user_id: str, role: str) -> Optional[Dict]:
        if role not in VALID_ROLES:
            raise ValueError(f"非法角色: {role}")
        conn = self.db._get_connection()
        cursor = conn.cursor()
        cursor.execute(
            "UPDATE users SET role = ?, updated_at = CURRENT_TIMESTAMP WHERE id = ?",
            (role, user_id),
        )
        updated = cursor.rowcount > 0
        conn.commit()
        conn.close()
        if not updated:
            return None
        return self.get_user(user_id)

    def follow_user(self, follower_id: str, following_id: str):
        if follower_id == following_id:
            raise ValueError("You cannot follow yourself")
        conn = self.db._get_connection()
        cursor = conn.cursor()
        cursor.execute(
            "INSERT OR IGNORE INTO follows (follower_id, following_id) VALUES (?, ?)",
            (follower_id, following_id),
        )
        conn.commit()
        conn.close()

    def unfollow_user(self, follower_id: str, following_id: str):
        conn = self.db._get_connection()
        cursor = conn.cursor()
        cursor.execute(
            "DELETE FROM follows WHERE follower_id = ? AND following_id = ?",
            (follower_id, following_id),
        )
        conn.commit()
        conn.close()

    def is_following(self, follower_id: str, following_id: str) -> bool:
        conn = self.db._get_connection()
        cursor = conn.cursor()
        cursor.execute(
            "SELECT 1 FROM follows WHERE follower_id = ? AND following_id = ? LIMIT 1",
            (follower_id, following_id),
        )
        found = cursor.fetchone() is not None
        conn.close()
        return found

    def list_followers(self, user_id: str) -> List[Dict]:
        conn = self.db._get_connection()
        cursor = conn.cursor()
        cursor.execute(
            """
            SELECT u.id, u.username, u.first_name, u.last_name, u.profile_image_url
            FROM follows f
            JOIN users u ON u.id = f.follower_id
            WHERE f.following_id = ?
            ORDER BY f.created_at DESC, u.username ASC
            """,
            (user_id,),
        )
        rows = cursor.fetchall()
        conn.close()
        return [dict(row) for row in rows]

    def list_following(self, user_id: str) -> List[Dict]:
        conn = self.db._get_connection()
        cursor = conn.cursor()
        cursor.execute(
            """
            SELECT u.id, u.username, u.first_name, u.last_name, u.profile_image_url
            FROM follows f
            JOIN users u ON u.id = f.following_id
            WHERE f.follower_id = ?
            ORDER BY f.created_at DESC, u.username ASC
            """,
            (user_id,),
        )
        rows = cursor.fetchall()
        conn.close()
        return [dict(row) for row in rows]

    def get_user_stats(self, user_id: str) -> Dict:
        conn = self.db._get_connection()
        cursor = conn.cursor()
        cursor.execute(
            """
            SELECT COUNT(*) AS total_catches, COUNT(DISTINCT species) AS unique_species
            FROM catches
            WHERE user_id = ?
            """,
            (user_id,),
        )
        counts = cursor.fetchone()
        cursor.execute(
            """
            SELECT COUNT(*) AS total_likes
            FROM likes l
            JOIN catches c ON l.catch_id = c.id
            WHERE c.user_id = ?
            """,
            (user_id,),
        )
        likes = cursor.fetchone()
        cursor.execute(
            """
            SELECT id
            FROM catches
            WHERE user_id = ? AND size IS NOT NULL
            ORDER BY size DESC, id ASC
            LIMIT 1
            """,
            (user_id,),
        )
        largest = cursor.fetchone()
        conn.close()
        return {
            "total_catches": int(counts["total_catches"] or 0),
            "unique_species": int(counts["unique_species"] or 0),
            "total_likes": int(likes["total_likes"] or 0),
            "largest_catch_id": int(largest["id"]) if largest else None,
        }

    def get_species_breakdown(self, user_id: str) -> List[Dict]:
        conn = self.db._get_connection()
        cursor = conn.cursor()
        cursor.execute(
            """
            SELECT species, COUNT(*) AS count
            FROM catches
            WHERE user_id = ?
            GROUP BY species
            ORDER BY count DESC, species ASC
            """,
            (user_id,),
        )
        rows = cursor.fetchall()
        conn.close()
        return [dict(row) for row in rows]

    def get_lakes_breakdown(self, user_id: str) -> List[Dict]:
        conn = self.db._get_connection()
        cursor = conn.cursor()
        cursor.execute(
            """
            SELECT COALESCE(lake_name, 'Unknown Location') AS lake, COUNT(*) AS count
            FROM catches
            WHERE user_id = ?
            GROUP BY lake
            ORDER BY count DESC, lake ASC
            """,
            (user_id,),
        )
        rows = cursor.fetchall()
        conn.close()
        return [dict(row) for row in rows]
