# api.py
"""
REST コレクションエンドポイントのクライアント。

    GET    /<resource>        一覧
    POST   /<resource>        作成（id はサーバー採番）
    PUT    /<resource>/<id>   全項目で更新
    DELETE /<resource>/<id>   削除

失敗はすべて TransportError にして返す。リトライはしない。
"""
from __future__ import annotations

import logging
from typing import Any, Generic, List, Optional, Type, TypeVar

import requests

from errors import TransportError
from models import Record

logger = logging.getLogger(__name__)

R = TypeVar("R", bound=Record)


class ApiSession:
    """ベース URL・タイムアウト・requests.Session をまとめたもの"""

    def __init__(self, base_url: str, timeout: float = 10.0,
                 session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = float(timeout)
        self._session = session

    def configure(self, base_url: str, timeout: float) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = float(timeout)

    @property
    def session(self) -> requests.Session:
        if self._session is None:
            self._session = requests.Session()
            self._session.headers.update({"Accept": "application/json"})
        return self._session

    def close(self) -> None:
        if self._session is not None:
            self._session.close()
            self._session = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def url(self, *parts: str) -> str:
        return "/".join([self.base_url] + [p.strip("/") for p in parts if p])

    def request(self, method: str, *parts: str, payload: Optional[dict] = None) -> Any:
        url = self.url(*parts)
        logger.debug("%s %s", method, url)
        try:
            resp = self.session.request(method, url, json=payload, timeout=self.timeout)
        except requests.RequestException as e:
            logger.warning("%s %s failed: %s", method, url, e)
            raise TransportError(f"Could not reach the server: {e}") from e

        if resp.status_code < 200 or resp.status_code >= 300:
            logger.warning("%s %s -> HTTP %s", method, url, resp.status_code)
            raise TransportError(
                f"Server responded with HTTP {resp.status_code}",
                status=resp.status_code,
            )
        if not resp.content:
            return None
        try:
            return resp.json()
        except ValueError as e:
            raise TransportError("Server response is not valid JSON", status=resp.status_code) from e


class ResourceClient(Generic[R]):
    def __init__(self, api: ApiSession, endpoint: str, record_cls: Type[R]):
        self.api = api
        self.endpoint = endpoint
        self.record_cls = record_cls

    def _one(self, body: Any, fallback: R) -> R:
        # 作成・更新の応答はレコード本体か {"data": {...}} のどちらか
        if isinstance(body, dict) and isinstance(body.get("data"), dict):
            body = body["data"]
        if isinstance(body, dict) and any(k in body for k in ("_id", "id")):
            try:
                return self.record_cls.from_api(body)
            except (TypeError, ValueError) as e:
                raise TransportError(f"Unexpected record in {self.endpoint}: {e}") from e
        return fallback

    def list(self) -> List[R]:
        body = self.api.request("GET", self.endpoint)
        if isinstance(body, dict) and isinstance(body.get("data"), list):
            body = body["data"]
        if not isinstance(body, list):
            raise TransportError(f"Unexpected response for {self.endpoint}")
        try:
            return [self.record_cls.from_api(d) for d in body if isinstance(d, dict)]
        except (TypeError, ValueError) as e:
            raise TransportError(f"Unexpected record in {self.endpoint}: {e}") from e

    def create(self, record: R) -> R:
        body = self.api.request("POST", self.endpoint, payload=record.to_payload())
        return self._one(body, record)

    def update(self, record_id: str, record: R) -> R:
        if not record_id:
            raise ValueError("record_id is empty")
        body = self.api.request("PUT", self.endpoint, record_id, payload=record.to_payload())
        saved = self._one(body, record)
        if saved.id is None:
            saved.id = record_id
        return saved

    def delete(self, record_id: str) -> None:
        if not record_id:
            raise ValueError("record_id is empty")
        self.api.request("DELETE", self.endpoint, record_id)
