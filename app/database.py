"""
数据库持久化层 - 使用SQLite存储用户、水域与渔获数据
"""
import sqlite3
import os
from pathlib import Path
import threading

from app.core.config import load_app_config
from app.core.database_schema import init_database_schema
from app.logger import logger


class Database:
    """SQLite数据库管理类"""
    _init_lock = threading.Lock()
    _initialized_db_paths = set()

    def __init__(self, db_path: str = None):
        if db_path is None:
            db_path = load_app_config().db_path
            if not os.path.isabs(db_path):
                project_root = Path(__file__).parent.parent
                db_path = project_root / db_path

        self.db_path = str(db_path)

        # 确保数据目录存在
        os.makedirs(os.path.dirname(os.path.abspath(self.db_path)), exist_ok=True)

        # 初始化数据库（同一路径仅执行一次）
        self._init_database_once()

    def _db_identity(self) -> str:
        return str(Path(self.db_path).expanduser().resolve())

    def _init_database_once(self):
        identity = self._db_identity()
        if identity in self._initialized_db_paths:
            return
        with self._init_lock:
            if identity in self._initialized_db_paths:
                return
            init_database_schema(self._get_connection(), logger)
            self._initialized_db_paths.add(identity)

    def _get_connection(self):
        """获取数据库连接"""
        conn = sqlite3.connect(self.db_path, timeout=30)
        conn.row_factory = sqlite3.Row  # 支持字典访问
        conn.execute("PRAGMA busy_timeout=5000;")
        conn.execute("PRAGMA foreign_keys=ON;")
        conn.execute("PRAGMA synchronous=NORMAL;")
        conn.execute("PRAGMA temp_store=MEMORY;")
        return conn

    def get_database_stats(self) -> dict:
        conn = self._get_connection()
        cursor = conn.cursor()
        stats = {}
        for table in ("users", "lakes", "catches", "follows", "likes", "comments"):
            cursor.execute(f"SELECT COUNT(*) AS count FROM {table}")
            row = cursor.fetchone()
            stats[table] = int(row["count"]) if row else 0
        conn.close()
        stats["db_path"] = self.db_path
        return stats

    def close(self):
        # 每次操作独立建连，无常驻连接需要释放
        return None
