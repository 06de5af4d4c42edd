# src/dhl_tracking/api/client.py
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional
from urllib.parse import parse_qs, quote, urlsplit

from dhl_tracking.models.env_cfg import DEFAULT_BASE_URL
from dhl_tracking.models.shipment import Response

from .errors import (
    ClientError,
    DeserializationError,
    ParcelNotFound,
    ServerError,
    TransportError,
    Unauthorized,
)
from .tracking_number import TrackingNumber
from .transport import AsyncTransport, RequestsTransport, TransportResponse

SHIPMENTS_PATH = "/track/shipments"
API_KEY_HEADER = "DHL-API-KEY"

_PREVIEW = 2000


def _preview(text: Optional[str]) -> Optional[str]:
    if text and len(text) > _PREVIEW:
        return text[:_PREVIEW] + "..."
    return text


class TrackingClient:
    """Async client for the DHL Shipment Tracking API.

    `fetch()` validates the tracking number, performs a single GET through the
    transport, maps the status code to an error kind and parses the body into a
    `Response`. It holds only the key, base URL and transport, so concurrent
    fetches need no coordination.
    """

    def __init__(
        self,
        api_key: str,
        transport: Optional[AsyncTransport] = None,
        *,
        base_url: str = DEFAULT_BASE_URL,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.api_key = api_key
        self.transport = transport or RequestsTransport()
        self.base_url = base_url.rstrip("/")
        self.logger: logging.Logger = logger or logging.getLogger(
            "dhl_tracking.api.client"
        )

    def close(self) -> None:
        """Release the transport's resources, if it holds any."""
        close = getattr(self.transport, "close", None)
        if callable(close):
            close()

    def url_for(self, tracking_number: TrackingNumber) -> str:
        return f"{self.base_url}{SHIPMENTS_PATH}?trackingNumber={quote(tracking_number.value, safe='')}"

    def headers_for(self, api_key: Optional[str] = None) -> Dict[str, str]:
        return {
            "Accept": "application/json",
            API_KEY_HEADER: api_key if api_key is not None else self.api_key,
        }

    async def fetch(self, raw_tracking_number: Any, api_key: Optional[str] = None) -> Response:
        """Track one shipment.

        Raises InvalidTrackingNumber before any network call, Unauthorized (401),
        ParcelNotFound (404), ServerError (other non-200), TransportError, or
        DeserializationError when a 200 body does not fit the model.
        """
        tracking_number = TrackingNumber.parse(raw_tracking_number)
        url = self.url_for(tracking_number)

        self.logger.debug("DHL GET %s", url)
        try:
            resp = await self.transport.get(url, headers=self.headers_for(api_key))
        except ClientError:
            raise
        except Exception as ex:
            self.logger.warning("DHL transport GET failed for %s: %s", url, ex)
            raise TransportError(f"GET {url} failed: {ex}") from ex

        self._check_status(resp, tracking_number)
        return self.parse_response(resp)

    def _check_status(self, resp: TransportResponse, tracking_number: TrackingNumber) -> None:
        status = resp.status_code
        if status == 200:
            self.logger.debug("DHL tracking %s status=200 bytes=%d", tracking_number, len(resp.body))
            return

        self.logger.warning(
            "DHL tracking %s returned status=%s response_body=%s",
            tracking_number,
            status,
            _preview(resp.text),
        )
        if status == 401:
            raise Unauthorized(f"DHL rejected the API key (status=401) for {tracking_number}")
        if status == 404:
            raise ParcelNotFound(f"No DHL shipment found for {tracking_number}")
        raise ServerError(status, _preview(resp.text))

    @staticmethod
    def parse_response(resp: TransportResponse) -> Response:
        try:
            payload = resp.json()
        except (ValueError, RecursionError) as ex:
            # ValueError covers JSONDecodeError and UnicodeDecodeError; very deep
            # nesting exhausts the decoder stack instead
            raise DeserializationError(f"Response body is not valid JSON: {ex}", path="$") from ex
        return Response.from_dict(payload)


def tracking_number_from_url(url: str) -> Optional[str]:
    values = parse_qs(urlsplit(url).query).get("trackingNumber")
    return values[0] if values else None


@dataclass
class ReplayTransport:
    """Offline transport that serves captured response bodies.

    `replay_file` must be one JSON file holding a single response body or an
    array of bodies (the format `ResponseWriter` produces). Each body is indexed
    by every `shipments[*].id` and any nested `trackingNumber` string. Unknown
    tracking numbers get a 404 problem body, like the live API.
    """

    replay_file: Path
    _index: Dict[str, Any] = field(default_factory=dict, init=False, repr=False)

    def __post_init__(self) -> None:
        self.replay_file = Path(self.replay_file)
        if not self.replay_file.exists():
            raise ValueError(f"Replay file does not exist: {self.replay_file}")
        if not self.replay_file.is_file():
            raise ValueError(
                "ReplayTransport requires a single JSON file containing one or more API bodies."
            )

        try:
            raw = json.loads(self.replay_file.read_text(encoding="utf-8"))
        except RecursionError as ex:
            raise ValueError(f"Replay file {self.replay_file} is nested too deeply") from ex
        entries: List[Any] = raw if isinstance(raw, list) else [raw]

        idx: Dict[str, Any] = {}
        for i, entry in enumerate(entries):
            try:
                tracking_numbers = self._extract_tracking_numbers(entry)
            except RecursionError as ex:
                raise ValueError(f"Replay body #{i} in {self.replay_file} is nested too deeply") from ex
            for tn in tracking_numbers:
                idx.setdefault(tn, entry)
        self._index = idx

    @staticmethod
    def _extract_tracking_numbers(payload: Any) -> List[str]:
        results: List[str] = []
        if isinstance(payload, dict):
            shipments = payload.get("shipments") or []
            if not isinstance(shipments, list):
                raise ValueError(f"Replay body has a non-array \"shipments\": {shipments!r}")
            for shipment in shipments:
                if isinstance(shipment, dict) and isinstance(shipment.get("id"), str):
                    results.append(shipment["id"].strip())

        def recurse(obj: Any) -> None:
            if isinstance(obj, dict):
                for k, v in obj.items():
                    if k == "trackingNumber" and isinstance(v, str) and v.strip():
                        results.append(v.strip())
                    else:
                        recurse(v)
            elif isinstance(obj, list):
                for e in obj:
                    recurse(e)

        recurse(payload)

        seen: set[str] = set()
        out_list: List[str] = []
        for r in results:
            if r not in seen:
                seen.add(r)
                out_list.append(r)
        return out_list

    @property
    def tracking_numbers(self) -> List[str]:
        return list(self._index)

    async def get(self, url: str, *, headers: Optional[Dict[str, str]] = None) -> TransportResponse:
        tn = tracking_number_from_url(url)
        payload = self._index.get(tn) if tn else None
        if payload is None:
            problem = {
                "status": 404,
                "title": "No result found",
                "detail": f"No shipment with given tracking number found: {tn}",
            }
            return TransportResponse(404, json.dumps(problem).encode("utf-8"))
        return TransportResponse(200, json.dumps(payload, ensure_ascii=False).encode("utf-8"))


__all__ = [
    "SHIPMENTS_PATH",
    "API_KEY_HEADER",
    "TrackingClient",
    "ReplayTransport",
    "tracking_number_from_url",
]
