from app.core.config import load_sync_client_config

from .catch_api_client import CatchApiClient
from .catch_queue import OfflineCatchQueue, SyncSummary
from .connectivity import ConnectivityMonitor
from .local_store import OfflineCatchStore
from .sync_scheduler import OfflineSyncScheduler


def build_offline_queue(config=None) -> OfflineCatchQueue:
    config = config or load_sync_client_config()
    return OfflineCatchQueue(
        store=OfflineCatchStore(config.queue_path),
        client=CatchApiClient(
            config.server_url,
            api_token=config.api_token,
            timeout=config.request_timeout_seconds,
        ),
        connectivity=ConnectivityMonitor(config.server_url, timeout=config.request_timeout_seconds),
        claim_timeout_seconds=max(60.0, config.request_timeout_seconds * 3),
    )


__all__ = [
    "CatchApiClient",
    "ConnectivityMonitor",
    "OfflineCatchQueue",
    "OfflineCatchStore",
    "OfflineSyncScheduler",
    "SyncSummary",
    "build_offline_queue",
]
