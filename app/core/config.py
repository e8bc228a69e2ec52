from dataclasses import dataclass
import os
import secrets

from dotenv import load_dotenv

from app.logger import logger

load_dotenv()


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes")


def _env_int(name: str, default: int, minimum: int | None = None) -> int:
    raw = os.getenv(name)
    if raw is None:
        value = default
    else:
        try:
            value = int(raw)
        except ValueError:
            logger.warning(f"环境变量 {name}={raw} 非法，使用默认值 {default}")
            value = default
    if minimum is not None:
        value = max(minimum, value)
    return value


def _env_float(name: str, default: float, minimum: float | None = None) -> float:
    raw = os.getenv(name)
    if raw is None:
        value = default
    else:
        try:
            value = float(raw)
        except ValueError:
            logger.warning(f"环境变量 {name}={raw} 非法，使用默认值 {default}")
            value = default
    if minimum is not None:
        value = max(minimum, value)
    return value


@dataclass(frozen=True)
class AppConfig:
    db_path: str
    secret_key: str
    token_algorithm: str
    token_expire_minutes: int
    leaderboard_default_limit: int
    leaderboard_max_limit: int


@dataclass(frozen=True)
class SyncClientConfig:
    server_url: str
    queue_path: str
    api_token: str | None
    request_timeout_seconds: float
    connectivity_poll_seconds: int
    flush_debounce_seconds: float
    auto_sync: bool
    scheduler_timezone: str


_process_secret_key: str | None = None


def load_app_config() -> AppConfig:
    global _process_secret_key
    secret_key = os.getenv("CATCHLOG_SECRET_KEY") or ""
    if not secret_key:
        # 未配置时每个进程生成随机密钥，重启后旧令牌全部失效
        if _process_secret_key is None:
            _process_secret_key = secrets.token_urlsafe(48)
            logger.warning("未配置 CATCHLOG_SECRET_KEY，已生成进程内随机密钥，重启后需重新登录")
        secret_key = _process_secret_key
    default_limit = _env_int("LEADERBOARD_DEFAULT_LIMIT", 10, minimum=1)
    return AppConfig(
        db_path=os.getenv("CATCHLOG_DB_PATH", "data/catchlog.db"),
        secret_key=secret_key,
        token_algorithm=os.getenv("CATCHLOG_TOKEN_ALGORITHM", "HS256"),
        token_expire_minutes=_env_int("CATCHLOG_TOKEN_EXPIRE_MINUTES", 720, minimum=1),
        leaderboard_default_limit=default_limit,
        leaderboard_max_limit=_env_int("LEADERBOARD_MAX_LIMIT", 100, minimum=default_limit),
    )


def load_sync_client_config() -> SyncClientConfig:
    return SyncClientConfig(
        server_url=os.getenv("CATCHLOG_SERVER_URL", "http://127.0.0.1:8000").rstrip("/"),
        queue_path=os.getenv("CATCHLOG_OFFLINE_DB", os.path.expanduser("~/.catchlog/offline_catches.db")),
        api_token=os.getenv("CATCHLOG_API_TOKEN") or None,
        request_timeout_seconds=_env_float("CATCHLOG_REQUEST_TIMEOUT_SECONDS", 10.0, minimum=1.0),
        connectivity_poll_seconds=_env_int("CATCHLOG_CONNECTIVITY_POLL_SECONDS", 30, minimum=1),
        flush_debounce_seconds=_env_float("CATCHLOG_FLUSH_DEBOUNCE_SECONDS", 5.0, minimum=0.0),
        auto_sync=_env_bool("CATCHLOG_AUTO_SYNC", True),
        scheduler_timezone=os.getenv("SCHEDULER_TIMEZONE", "UTC"),
    )
