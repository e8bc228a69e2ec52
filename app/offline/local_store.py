"""
离线渔获本地存储 - 使用SQLite持久化待同步渔获与同步状态
"""
import json
import os
import sqlite3
import threading
import uuid
from pathlib import Path
from typing import Dict, List, Optional

from app.logger import logger

PENDING = "pending"
SYNCING = "syncing"
SYNCED = "synced"
RECORD_STATES = (PENDING, SYNCING, SYNCED)

STATUS_ONLINE = "online"
STATUS_OFFLINE = "offline"
STATUS_SYNCING = "syncing"
SYNC_STATUSES = (STATUS_ONLINE, STATUS_OFFLINE, STATUS_SYNCING)

SYNC_STATUS_KEY = "sync_status"

_RECORD_COLUMNS = """
    id, seq, payload, state, revision, attempts, last_error,
    created_at, updated_at, synced_at
"""


def _init_offline_schema(conn: sqlite3.Connection):
    cursor = conn.cursor()
    cursor.execute("""
        CREATE TABLE IF NOT EXISTS offline_catches (
            seq INTEGER PRIMARY KEY AUTOINCREMENT,
            id TEXT NOT NULL UNIQUE,
            payload TEXT NOT NULL,
            state TEXT NOT NULL DEFAULT 'pending',
            revision INTEGER NOT NULL DEFAULT 1,
            attempts INTEGER NOT NULL DEFAULT 0,
            last_error TEXT,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            synced_at TIMESTAMP
        )
    """)
    cursor.execute("""
        CREATE INDEX IF NOT EXISTS idx_offline_catches_state
        ON offline_catches(state, seq)
    """)
    cursor.execute("""
        CREATE TABLE IF NOT EXISTS sync_meta (
            key TEXT PRIMARY KEY,
            value TEXT NOT NULL,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
    """)
    conn.commit()


class OfflineCatchStore:
    """离线队列的持久化层，每次操作独立建连。"""
    _init_lock = threading.Lock()
    _initialized_paths = set()

    def __init__(self, db_path: str):
        self.db_path = str(Path(db_path).expanduser())
        os.makedirs(os.path.dirname(os.path.abspath(self.db_path)), exist_ok=True)
        self._init_once()

    def _init_once(self):
        identity = str(Path(self.db_path).resolve())
        if identity in self._initialized_paths:
            return
        with self._init_lock:
            if identity in self._initialized_paths:
                return
            conn = self._get_connection()
            try:
                _init_offline_schema(conn)
            finally:
                conn.close()
            self._initialized_paths.add(identity)

    def _get_connection(self):
        conn = sqlite3.connect(self.db_path, timeout=30)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA busy_timeout=5000;")
        return conn

    @staticmethod
    def _row_to_record(row) -> Dict:
        record = dict(row)
        record["payload"] = json.loads(record["payload"] or "{}")
        record["synced"] = record["state"] == SYNCED
        return record

    def insert(self, payload: Dict) -> Dict:
        record_id = uuid.uuid4().hex
        conn = self._get_connection()
        try:
            conn.execute(
                "INSERT INTO offline_catches (id, payload, state) VALUES (?, ?, ?)",
                (record_id, json.dumps(payload, ensure_ascii=False), PENDING),
            )
            conn.commit()
        finally:
            conn.close()
        return self.get(record_id)

    def get(self, record_id: str) -> Optional[Dict]:
        conn = self._get_connection()
        try:
            row = conn.execute(
                f"SELECT {_RECORD_COLUMNS} FROM offline_catches WHERE id = ?",
                (record_id,),
            ).fetchone()
        finally:
            conn.close()
        return self._row_to_record(row) if row else None

    def list_records(self, state: Optional[str] = None) -> List[Dict]:
        if state is not None and state not in RECORD_STATES:
            raise ValueError(f"非法状态: {state}")
        sql = f"SELECT {_RECORD_COLUMNS} FROM offline_catches"
        params = ()
        if state is not None:
            sql += " WHERE state = ?"
            params = (state,)
        sql += " ORDER BY seq ASC"
        conn = self._get_connection()
        try:
            rows = conn.execute(sql, params).fetchall()
        finally:
            conn.close()
        return [self._row_to_record(row) for row in rows]

    def pending_ids(self) -> List[str]:
        conn = self._get_connection()
        try:
            rows = conn.execute(
                "SELECT id FROM offline_catches WHERE state = ? ORDER BY seq ASC",
                (PENDING,),
            ).fetchall()
        finally:
            conn.close()
        return [row["id"] for row in rows]

    def count_unsynced(self) -> int:
        conn = self._get_connection()
        try:
            row = conn.execute(
                "SELECT COUNT(*) AS count FROM offline_catches WHERE state != ?",
                (SYNCED,),
            ).fetchone()
        finally:
            conn.close()
        return int(row["count"]) if row else 0

    def claim(self, record_id: str) -> Optional[Dict]:
        """pending -> syncing；记录已被删除或已被其他同步流程认领时返回 None。"""
        conn = self._get_connection()
        try:
            cursor = conn.execute(
                """
                UPDATE offline_catches
                SET state = ?, updated_at = CURRENT_TIMESTAMP
                WHERE id = ? AND state = ?
                """,
                (SYNCING, record_id, PENDING),
            )
            conn.commit()
            claimed = cursor.rowcount > 0
        finally:
            conn.close()
        return self.get(record_id) if claimed else None

    def mark_synced(self, record_id: str, revision: int) -> bool:
        # 仅当提交期间记录未被修改时才确认，否则保持 pending 等待下一轮
        conn = self._get_connection()
        try:
            cursor = conn.execute(
                """
                UPDATE offline_catches
                SET state = ?, last_error = NULL,
                    synced_at = CURRENT_TIMESTAMP, updated_at = CURRENT_TIMESTAMP
                WHERE id = ? AND revision = ? AND state = ?
                """,
                (SYNCED, record_id, int(revision), SYNCING),
            )
            conn.commit()
            return cursor.rowcount > 0
        finally:
            conn.close()

    def mark_failed(self, record_id: str, error: str):
        conn = self._get_connection()
        try:
            conn.execute(
                """
                UPDATE offline_catches
                SET state = ?, attempts = attempts + 1, last_error = ?,
                    updated_at = CURRENT_TIMESTAMP
                WHERE id = ? AND state != ?
                """,
                (PENDING, error, record_id, SYNCED),
            )
            conn.commit()
        finally:
            conn.close()

    def update_payload(self, record_id: str, changes: Dict) -> Optional[Dict]:
        conn = self._get_connection()
        try:
            row = conn.execute(
                "SELECT payload FROM offline_catches WHERE id = ?",
                (record_id,),
            ).fetchone()
            if not row:
                return None
            payload = json.loads(row["payload"] or "{}")
            payload.update(changes)
            conn.execute(
                """
                UPDATE offline_catches
                SET payload = ?, state = ?, revision = revision + 1,
                    synced_at = NULL, updated_at = CURRENT_TIMESTAMP
                WHERE id = ?
                """,
                (json.dumps(payload, ensure_ascii=False), PENDING, record_id),
            )
            conn.commit()
        finally:
            conn.close()
        return self.get(record_id)

    def delete(self, record_id: str) -> bool:
        conn = self._get_connection()
        try:
            cursor = conn.execute("DELETE FROM offline_catches WHERE id = ?", (record_id,))
            conn.commit()
            return cursor.rowcount > 0
        finally:
            conn.close()

    def prune_synced(self) -> int:
        conn = self._get_connection()
        try:
            cursor = conn.execute("DELETE FROM offline_catches WHERE state = ?", (SYNCED,))
            conn.commit()
            return cursor.rowcount
        finally:
            conn.close()

    def recover_interrupted(self, stale_after_seconds: float = 0) -> int:
        """
        超过认领时限仍处于 syncing 的记录回退为 pending。

        未超时的 syncing 记录可能正由其他进程提交，保持不动。
        """
        cutoff = f"-{max(0, int(stale_after_seconds))} seconds"
        conn = self._get_connection()
        try:
            cursor = conn.execute(
                """
                UPDATE offline_catches
                SET state = ?, updated_at = CURRENT_TIMESTAMP
                WHERE state = ? AND updated_at <= datetime('now', ?)
                """,
                (PENDING, SYNCING, cutoff),
            )
            conn.commit()
            recovered = cursor.rowcount
        finally:
            conn.close()
        if recovered:
            logger.warning(f"离线队列恢复 {recovered} 条中断的同步记录，将重新提交")
        return recovered

    def get_meta(self, key: str, default: Optional[str] = None) -> Optional[str]:
        conn = self._get_connection()
        try:
            row = conn.execute("SELECT value FROM sync_meta WHERE key = ?", (key,)).fetchone()
        finally:
            conn.close()
        return row["value"] if row else default

    def set_meta(self, key: str, value: str):
        conn = self._get_connection()
        try:
            conn.execute(
                """
                INSERT INTO sync_meta (key, value, updated_at)
                VALUES (?, ?, CURRENT_TIMESTAMP)
                ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = CURRENT_TIMESTAMP
                """,
                (key, value),
            )
            conn.commit()
        finally:
            conn.close()
