"""
日志模块 - 服务端与离线同步工具共用的日志配置
"""
import logging
import os
from pathlib import Path
from logging.handlers import TimedRotatingFileHandler
from typing import List, Optional

# 可通过 CATCHLOG_LOG_DIR 指定日志目录
LOG_DIR = Path(os.getenv("CATCHLOG_LOG_DIR") or Path(__file__).parent.parent / "logs")
LOG_DIR.mkdir(parents=True, exist_ok=True)
LOG_FILE = LOG_DIR / "catchlog.log"

LOG_FORMAT = "%(asctime)s | %(levelname)-5s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
LOG_LEVEL = getattr(logging, os.getenv("LOG_LEVEL", "INFO").strip().upper(), logging.INFO)
LOG_BACKUP_COUNT = int(os.getenv("LOG_BACKUP_COUNT", "7"))


def _build_handlers() -> List[logging.Handler]:
    formatter = logging.Formatter(LOG_FORMAT, DATE_FORMAT)

    file_handler = TimedRotatingFileHandler(
        LOG_FILE,
        when="midnight",
        interval=1,
        backupCount=max(1, LOG_BACKUP_COUNT),
        encoding="utf-8",
    )
    console_handler = logging.StreamHandler()

    for handler in (file_handler, console_handler):
        handler.setLevel(LOG_LEVEL)
        handler.setFormatter(formatter)
    return [file_handler, console_handler]


logger = logging.getLogger("catchlog")
logger.setLevel(LOG_LEVEL)
logger.propagate = False

# uvicorn --reload 会重复导入本模块
if not logger.handlers:
    for _handler in _build_handlers():
        logger.addHandler(_handler)


def get_log_file_path() -> str:
    return str(LOG_FILE)


def _tail_lines(path: Path, wanted: int) -> List[str]:
    chunk_size = 4096
    buffer = b""
    with open(path, "rb") as f:
        f.seek(0, os.SEEK_END)
        pos = f.tell()
        while pos > 0 and buffer.count(b"\n") <= wanted:
            read_size = min(chunk_size, pos)
            pos -= read_size
            f.seek(pos)
            buffer = f.read(read_size) + buffer
    return buffer.decode("utf-8", errors="replace").splitlines(keepends=True)


def read_logs(lines: int = 200, level: Optional[str] = None) -> list:
    """
    读取最近的日志行（最新的在前）

    Args:
        lines: 返回的最大行数
        level: 只保留指定级别，如 "ERROR"
    """
    if not LOG_FILE.exists():
        return []

    lines = max(1, int(lines))
    if not level:
        return list(reversed(_tail_lines(LOG_FILE, lines)[-lines:]))

    # 按级别过滤时需要多读一些
    marker = f"| {level.strip().upper():<5} |"
    matched = [line for line in _tail_lines(LOG_FILE, lines * 20) if marker in line]
    return list(reversed(matched[-lines:]))


def clear_logs():
    with open(LOG_FILE, "w", encoding="utf-8") as f:
        f.write("")
    logger.info("日志已清空")
