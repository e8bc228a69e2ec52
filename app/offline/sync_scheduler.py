"""
离线同步调度器 - 连接状态轮询与去抖后的后台同步
"""
import threading
import time
from datetime import datetime, timedelta, timezone as dt_timezone
from zoneinfo import ZoneInfo

from apscheduler.schedulers.background import BackgroundScheduler

from app.core.metrics import log_job_metric, measure_ms
from app.logger import logger
from app.offline.local_store import STATUS_OFFLINE, STATUS_ONLINE

FLUSH_JOB_ID = "offline_flush"
CONNECTIVITY_JOB_ID = "connectivity_watch"


class OfflineSyncScheduler:
    def __init__(
        self,
        queue,
        *,
        poll_seconds: int = 30,
        debounce_seconds: float = 5.0,
        timezone: str = "UTC",
        scheduler=None,
        clock=time.monotonic,
    ):
        self.queue = queue
        self.poll_seconds = max(1, int(poll_seconds))
        self.debounce_seconds = max(0.0, float(debounce_seconds))
        if scheduler is None:
            try:
                scheduler = BackgroundScheduler(timezone=ZoneInfo(timezone))
            except Exception as exc:
                logger.warning(f"无效的调度器时区 {timezone}: {exc}，使用默认时区")
                scheduler = BackgroundScheduler()
        self.scheduler = scheduler
        self._clock = clock
        self._request_lock = threading.Lock()
        self._scheduled_at = None
        self._last_online = None
        queue.set_sync_requester(self.request_sync)

    def start(self):
        self.scheduler.add_job(
            func=self.check_connectivity,
            trigger="interval",
            seconds=self.poll_seconds,
            id=CONNECTIVITY_JOB_ID,
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )
        if not self.scheduler.running:
            self.scheduler.start()
        logger.info(f"离线同步调度器已启动: poll={self.poll_seconds}s debounce={self.debounce_seconds}s")
        self.request_sync("startup")

    def stop(self):
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)
            logger.info("离线同步调度器已停止")
        self.queue.set_sync_requester(None)

    def request_sync(self, reason: str = "manual") -> bool:
        """
        提交一次后台同步。

        去抖窗口外的请求立即执行；窗口内的请求延后到窗口结束时执行一次，
        已有尚未到点的延后同步时直接并入，返回 False。
        """
        with self._request_lock:
            now = self._clock()
            if self._scheduled_at is not None and now < self._scheduled_at:
                logger.debug(f"同步请求并入已排队的同步: reason={reason}")
                return False
            run_at = now
            if self._scheduled_at is not None:
                run_at = max(now, self._scheduled_at + self.debounce_seconds)
            self._scheduled_at = run_at
            delay = run_at - now
            job_kwargs = {}
            if delay > 0:
                job_kwargs["run_date"] = datetime.now(dt_timezone.utc) + timedelta(seconds=delay)
            self.scheduler.add_job(
                func=self.run_flush,
                trigger="date",
                id=FLUSH_JOB_ID,
                replace_existing=True,
                max_instances=1,
                coalesce=True,
                misfire_grace_time=None,
                **job_kwargs,
            )
        logger.info(f"已提交后台同步: reason={reason} delay={delay:.1f}s")
        return True

    def run_flush(self):
        status = "success"
        with measure_ms("offline.flush") as metric:
            try:
                summary = self.queue.flush()
                if summary.failed:
                    status = "error"
                elif not summary.success:
                    status = "skipped"
            except Exception:
                status = "error"
                raise
            finally:
                log_job_metric(job_name="offline_flush", status=status, snapshot=metric)
        return summary

    def check_connectivity(self) -> bool:
        online = bool(self.queue.connectivity.is_online())
        previous = self._last_online
        self._last_online = online

        if not online:
            if previous is not False:
                logger.warning("网络不可用，离线渔获将在恢复后同步")
            self.queue.set_sync_status(STATUS_OFFLINE)
            return False

        if previous is False:
            logger.info("网络已恢复，触发离线渔获同步")
            self.queue.set_sync_status(STATUS_ONLINE)
            self.request_sync("reconnected")
        elif self.queue.get_sync_status() == STATUS_OFFLINE:
            self.queue.set_sync_status(STATUS_ONLINE)
        return True
