"""
离线渔获队列

断网时记录的渔获先写入本地，恢复连接后按入队顺序逐条提交。
投递语义为至少一次：服务端确认与本地标记之间若进程退出，记录会被再次提交，
服务端不做去重。
"""
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional

from app.core.concurrency import SingleFlightGuard
from app.logger import logger
from app.offline.local_store import (
    STATUS_OFFLINE,
    STATUS_ONLINE,
    STATUS_SYNCING,
    SYNC_STATUS_KEY,
    SYNC_STATUSES,
    OfflineCatchStore,
)

MSG_OFFLINE = "Cannot sync while offline"
MSG_EMPTY = "No catches to sync"
MSG_BUSY = "Sync already in progress"


@dataclass
class SyncSummary:
    """
    一轮同步的结果。

    requeued 为服务端已接收、但提交期间本地被修改而保留为 pending 的记录数，
    不计入 synced，下一轮会带着新内容再次提交。
    """
    success: bool
    synced: int
    failed: int
    message: str
    requeued: int = 0

    def to_dict(self) -> Dict:
        return asdict(self)


class OfflineCatchQueue:
    def __init__(
        self,
        store: OfflineCatchStore,
        client,
        connectivity,
        sync_requester: Optional[Callable[[str], object]] = None,
        claim_timeout_seconds: float = 60.0,
    ):
        self.store = store
        self.client = client
        self.connectivity = connectivity
        self._sync_requester = sync_requester
        self.claim_timeout_seconds = max(0.0, float(claim_timeout_seconds))
        self._flush_guard = SingleFlightGuard()
        self.store.recover_interrupted(self.claim_timeout_seconds)

    def set_sync_requester(self, requester: Optional[Callable[[str], object]]):
        self._sync_requester = requester

    def _request_background_sync(self, reason: str):
        if self._sync_requester is None:
            return
        try:
            self._sync_requester(reason)
        except Exception as exc:
            logger.warning(f"后台同步请求失败: reason={reason} error={exc}")

    def enqueue(self, catch_data: Dict) -> Dict:
        payload = dict(catch_data or {})
        species = str(payload.get("species") or "").strip()
        if not species:
            raise ValueError("species 不能为空")
        payload["species"] = species
        payload.setdefault("catch_date", datetime.now(timezone.utc).isoformat())
        payload.setdefault("created_at", datetime.now(timezone.utc).isoformat())

        record = self.store.insert(payload)
        logger.info(f"离线渔获入队: id={record['id']} species={species}")
        self._request_background_sync("enqueue")
        return record

    def update(self, record_id: str, changes: Dict) -> Optional[Dict]:
        changes = dict(changes or {})
        if "species" in changes and not str(changes["species"] or "").strip():
            raise ValueError("species 不能为空")
        record = self.store.update_payload(record_id, changes)
        if record:
            self._request_background_sync("update")
        return record

    def delete(self, record_id: str) -> bool:
        return self.store.delete(record_id)

    def get(self, record_id: str) -> Optional[Dict]:
        return self.store.get(record_id)

    def list_records(self, state: Optional[str] = None) -> List[Dict]:
        return self.store.list_records(state)

    def has_unsynced(self) -> bool:
        return self.store.count_unsynced() > 0

    def prune_synced(self) -> int:
        removed = self.store.prune_synced()
        if removed:
            logger.info(f"清理已同步离线渔获: {removed} 条")
        return removed

    def get_sync_status(self) -> str:
        return self.store.get_meta(SYNC_STATUS_KEY, STATUS_ONLINE)

    def set_sync_status(self, status: str):
        if status not in SYNC_STATUSES:
            raise ValueError(f"非法同步状态: {status}")
        self.store.set_meta(SYNC_STATUS_KEY, status)

    def flush(self) -> SyncSummary:
        if not self._flush_guard.try_acquire("离线渔获同步"):
            return SyncSummary(success=False, synced=0, failed=0, message=MSG_BUSY)
        try:
            return self._flush_locked()
        finally:
            self._flush_guard.release()

    def _flush_locked(self) -> SyncSummary:
        if not self.connectivity.is_online():
            self.set_sync_status(STATUS_OFFLINE)
            return SyncSummary(success=False, synced=0, failed=0, message=MSG_OFFLINE)

        self.store.recover_interrupted(self.claim_timeout_seconds)

        # 本轮只处理开始时已存在的 pending 记录，期间新入队的留给下一轮
        record_ids = self.store.pending_ids()
        if not record_ids:
            self.set_sync_status(STATUS_ONLINE)
            return SyncSummary(success=True, synced=0, failed=0, message=MSG_EMPTY)

        self.set_sync_status(STATUS_SYNCING)
        synced = 0
        failed = 0
        requeued = 0
        try:
            for record_id in record_ids:
                record = self.store.claim(record_id)
                if record is None:
                    continue
                ok, error = self.client.submit_catch(record["payload"])
                if ok:
                    if self.store.mark_synced(record_id, record["revision"]):
                        synced += 1
                    else:
                        requeued += 1
                        logger.info(f"离线渔获提交期间被修改，保留待下一轮同步: id={record_id}")
                else:
                    failed += 1
                    self.store.mark_failed(record_id, error or "unknown error")
        finally:
            self.set_sync_status(STATUS_ONLINE)

        if failed:
            message = f"Synced {synced} catches, {failed} failed"
            logger.warning(f"离线渔获同步部分失败: synced={synced} failed={failed}")
        else:
            message = f"Successfully synced {synced} catches"
            logger.info(f"离线渔获同步完成: synced={synced} requeued={requeued}")
        return SyncSummary(
            success=failed == 0, synced=synced, failed=failed, message=message, requeued=requeued
        )
