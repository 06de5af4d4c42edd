# src/dhl_tracking/api/errors.py
from __future__ import annotations

from typing import Any, Optional


class ClientError(RuntimeError):
    """Base class for every error surfaced by the tracking client."""


class InvalidTrackingNumber(ClientError, ValueError):
    """The input did not match any DHL tracking-number format. No request was made."""

    def __init__(self, raw: Any) -> None:
        self.raw = raw
        super().__init__(f"Tracking number did not match DHL format: {raw!r}")


class Unauthorized(ClientError):
    """HTTP 401: the DHL-API-KEY was rejected."""


class ParcelNotFound(ClientError):
    """HTTP 404: DHL has no shipment for the tracking number."""


class ServerError(ClientError):
    """Any non-200 status other than 401/404."""

    def __init__(self, status_code: Optional[int], body: Optional[str] = None) -> None:
        self.status_code = status_code
        self.body = body
        super().__init__(f"DHL API returned status={status_code}")


class TransportError(ClientError):
    """The transport itself failed (connection, DNS, TLS, timeout)."""


class DeserializationError(ClientError):
    """A 200 body did not match the expected shape.

    `path` is the dotted JSON path of the offending field (e.g.
    ``shipments[0].events[1].statusCode``) and `value` the raw value found there.
    """

    def __init__(self, message: str, *, path: str = "", value: Any = None) -> None:
        self.path = path
        self.value = value
        where = f" at {path}" if path else ""
        super().__init__(f"{message}{where} (value={value!r})")


class CodecError(ValueError):
    """Raised by the enum/date codecs on unrecognized or malformed input."""


__all__ = [
    "ClientError",
    "InvalidTrackingNumber",
    "Unauthorized",
    "ParcelNotFound",
    "ServerError",
    "TransportError",
    "DeserializationError",
    "CodecError",
]
