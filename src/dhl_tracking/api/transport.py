# src/dhl_tracking/api/transport.py
from __future__ import annotations

import asyncio
import json as _json
from dataclasses import dataclass
from typing import Any, Dict, Optional, Protocol

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .errors import TransportError


@dataclass(frozen=True)
class TransportResponse:
    status_code: int
    body: bytes = b""

    @property
    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")

    def json(self) -> Any:
        return _json.loads(self.body)


class AsyncTransport(Protocol):
    async def get(self, url: str, *, headers: Optional[Dict[str, str]] = None) -> TransportResponse:
        ...


class RequestsTransport:
    """Requests session wrapper exposed as an awaitable transport.

    The blocking call runs in a worker thread. Retries are off by default so one
    fetch is one HTTP attempt; pass `max_retries` to retry transient failures
    (connection errors and 429/5xx) at the adapter level.
    """

    def __init__(self, timeout: float = 30, max_retries: int = 0, backoff_factor: float = 0.3) -> None:
        self.session = requests.Session()
        self.timeout = timeout

        retry = Retry(
            total=max_retries,
            read=max_retries,
            connect=max_retries,
            backoff_factor=backoff_factor,
            status_forcelist=(429, 500, 502, 503, 504),
            allowed_methods=("GET",),
            raise_on_status=False,
        )
        adapter = HTTPAdapter(max_retries=retry)
        self.session.mount("https://", adapter)
        self.session.mount("http://", adapter)

    def get_sync(self, url: str, *, headers: Optional[Dict[str, str]] = None) -> TransportResponse:
        try:
            resp = self.session.get(url, headers=headers, timeout=self.timeout)
        except requests.RequestException as ex:
            raise TransportError(f"GET {url} failed: {ex}") from ex
        return TransportResponse(status_code=resp.status_code, body=resp.content or b"")

    async def get(self, url: str, *, headers: Optional[Dict[str, str]] = None) -> TransportResponse:
        return await asyncio.to_thread(self.get_sync, url, headers=headers)

    def close(self) -> None:
        self.session.close()
