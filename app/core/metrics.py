"""接口与后台任务耗时统计，日志输出默认关闭，通过环境变量开启。"""
from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass, field
import os
from time import perf_counter

from app.logger import logger

API_METRIC_ENV = "ENABLE_API_METRIC_LOG"
JOB_METRIC_ENV = "ENABLE_JOB_METRIC_LOG"


@dataclass
class TimingSnapshot:
    name: str
    tags: dict[str, str] = field(default_factory=dict)
    started_at: float = field(default_factory=perf_counter)
    elapsed_ms: float = 0.0

    def stop(self) -> float:
        self.elapsed_ms = max((perf_counter() - self.started_at) * 1000.0, 0.0)
        return self.elapsed_ms


def metric_log_enabled(env_name: str) -> bool:
    return os.getenv(env_name, "0").strip().lower() in ("1", "true", "yes", "on")


@contextmanager
def measure_ms(name: str, **tags: object):
    snapshot = TimingSnapshot(name=name, tags={k: str(v) for k, v in tags.items()})
    try:
        yield snapshot
    finally:
        snapshot.stop()


def log_api_metric(*, path: str, method: str, status_code: int, snapshot: TimingSnapshot):
    if not metric_log_enabled(API_METRIC_ENV):
        return
    emit = logger.warning if status_code >= 500 else logger.info
    emit(
        "接口耗时 | %s %s status=%s elapsed_ms=%.2f",
        method,
        path,
        status_code,
        snapshot.elapsed_ms,
    )


def log_job_metric(*, job_name: str, status: str, snapshot: TimingSnapshot):
    if not metric_log_enabled(JOB_METRIC_ENV):
        return
    logger.info(
        "任务耗时 | job=%s status=%s elapsed_ms=%.2f",
        job_name,
        status,
        snapshot.elapsed_ms,
    )
