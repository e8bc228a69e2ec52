import asyncio
import threading
from contextlib import contextmanager

from app.logger import logger


async def run_in_thread(func, *args, **kwargs):
    return await asyncio.to_thread(func, *args, **kwargs)


class SingleFlightGuard:
    """同一时刻只允许一个执行者进入，后来者直接跳过而不是排队。"""

    def __init__(self, lock_wait_seconds: float = 0):
        self.lock_wait_seconds = max(0.0, float(lock_wait_seconds))
        self._lock = threading.Lock()

    @property
    def in_flight(self) -> bool:
        return self._lock.locked()

    def try_acquire(self, source: str) -> bool:
        if self.lock_wait_seconds > 0:
            acquired = self._lock.acquire(timeout=self.lock_wait_seconds)
        else:
            acquired = self._lock.acquire(blocking=False)
        if not acquired:
            logger.warning(f"{source}跳过: 已有任务在执行中")
        return acquired

    def release(self):
        if self._lock.locked():
            self._lock.release()

    @contextmanager
    def hold(self, source: str):
        acquired = self.try_acquire(source)
        try:
            yield acquired
        finally:
            if acquired:
                self.release()
