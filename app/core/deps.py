from typing import Iterator

from app.database import Database


def get_db() -> Iterator[Database]:
    """每个请求一个 Database 实例，请求结束时释放。"""
    db = Database()
    try:
        yield db
    finally:
        db.close()
