from typing import Optional

import requests


class ConnectivityMonitor:
    """通过服务端 /api/status 探测网络是否可用。"""

    def __init__(self, server_url: str, timeout: float = 3.0, session: Optional[requests.Session] = None):
        self.server_url = (server_url or "").rstrip("/")
        self.timeout = float(timeout)
        self.session = session or requests.Session()

    def is_online(self) -> bool:
        try:
            response = self.session.get(f"{self.server_url}/api/status", timeout=self.timeout)
        except requests.exceptions.RequestException:
            return False
        return response.ok
