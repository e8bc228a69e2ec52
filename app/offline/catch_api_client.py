"""
渔获提交客户端 - 将离线渔获 POST 到服务端 /api/catches
"""
from typing import Dict, Optional, Tuple

import requests

from app.logger import logger

# 服务端 CatchCreate 接受的字段
SUBMIT_FIELDS = (
    "species",
    "size",
    "weight",
    "lake_id",
    "lake_name",
    "latitude",
    "longitude",
    "temperature",
    "depth",
    "lure",
    "comments",
    "weather_data",
    "catch_date",
)


class CatchApiClient:
    def __init__(
        self,
        server_url: str,
        api_token: Optional[str] = None,
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
    ):
        self.server_url = (server_url or "").rstrip("/")
        self.api_token = api_token or ""
        self.timeout = float(timeout)
        self.session = session or requests.Session()

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.api_token:
            headers["Authorization"] = f"Bearer {self.api_token}"
        return headers

    @staticmethod
    def build_body(payload: Dict) -> Dict:
        return {key: payload[key] for key in SUBMIT_FIELDS if payload.get(key) is not None}

    def submit_catch(self, payload: Dict) -> Tuple[bool, Optional[str]]:
        """返回 (是否成功, 错误信息)。2xx 视为成功，其余状态码与网络异常均视为失败。"""
        url = f"{self.server_url}/api/catches"
        try:
            response = self.session.post(
                url,
                json=self.build_body(payload),
                headers=self._headers(),
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as exc:
            logger.error(f"渔获提交失败: {exc}")
            return False, str(exc)

        if 200 <= response.status_code < 300:
            return True, None

        error = f"HTTP {response.status_code}: {response.text[:200]}"
        logger.error(f"渔获提交被拒绝: {error}")
        return False, error
