# src/dhl_tracking/api/codecs.py
"""
Post-parse codecs for DHL's enumerated codes and date strings.

These run on values already decoded by `json.loads`; the model layer calls them
per field and turns `CodecError` into a `DeserializationError` with the field path.
"""
from __future__ import annotations

import enum
from datetime import datetime, timezone
from typing import Any, Dict, Type, TypeVar, Union

from .errors import CodecError


class Service(str, enum.Enum):
    FREIGHT = "freight"
    EXPRESS = "express"
    PARCEL_DE = "parcel-de"
    PARCEL_NL = "parcel-nl"
    PARCEL_PL = "parcel-pl"
    DSC = "dsc"
    DGF = "dgf"
    ECOMMERCE = "ecommerce"


class StatusCode(str, enum.Enum):
    PRE_TRANSIT = "pre-transit"
    TRANSIT = "transit"
    DELIVERED = "delivered"
    FAILURE = "failure"
    UNKNOWN = "unknown"


# Accepted wire strings. PARCEL_PL is a Service member but DHL never sends
# "parcel-pl" here, so it is intentionally absent from the parse table.
SERVICE_CODES: Dict[str, Service] = {
    "freight": Service.FREIGHT,
    "express": Service.EXPRESS,
    "parcel-de": Service.PARCEL_DE,
    "parcel-nl": Service.PARCEL_NL,
    "dsc": Service.DSC,
    "dgf": Service.DGF,
    "ecommerce": Service.ECOMMERCE,
}

STATUS_CODES: Dict[str, StatusCode] = {m.value: m for m in StatusCode}

_TABLES: Dict[type, Dict[str, Any]] = {
    Service: SERVICE_CODES,
    StatusCode: STATUS_CODES,
}

E = TypeVar("E", Service, StatusCode)


def parse_enum(kind: Type[E], raw: Any) -> E:
    """Map a DHL code to `kind`. Whitespace is stripped; matching is exact and case-sensitive."""
    table = _TABLES.get(kind)
    if table is None:
        raise TypeError(f"No codec table for {kind!r}")
    if not isinstance(raw, str):
        raise CodecError(f"Not a valid {kind.__name__}: expected string, got {type(raw).__name__}")
    try:
        return table[raw.strip()]
    except KeyError:
        raise CodecError(f"Not a valid {kind.__name__}: {raw!r}") from None


def parse_service(raw: Any) -> Service:
    return parse_enum(Service, raw)


def parse_status_code(raw: Any) -> StatusCode:
    return parse_enum(StatusCode, raw)


def encode_enum(member: Union[Service, StatusCode]) -> str:
    return member.value


DATETIME_FORMAT = "%Y-%m-%dT%H:%M:%S"
DATE_FORMAT = "%Y-%m-%d"
# DHL sends bare dates for ETAs; pin them one second past midnight UTC.
DATE_TIME_OF_DAY = "00:00:01"


def parse_datetime(raw: Any) -> datetime:
    """Parse ``YYYY-MM-DDTHH:MM:SS`` as UTC (DHL sends no offset)."""
    if not isinstance(raw, str):
        raise CodecError(f"Could not parse date-time: expected string, got {type(raw).__name__}")
    try:
        naive = datetime.strptime(raw, DATETIME_FORMAT)
    except ValueError as ex:
        raise CodecError(f"Could not parse date-time {raw!r}: {ex}") from ex
    return naive.replace(tzinfo=timezone.utc)


def parse_date(raw: Any) -> datetime:
    """Parse ``YYYY-MM-DD`` into ``YYYY-MM-DDT00:00:01Z``."""
    if not isinstance(raw, str):
        raise CodecError(f"Could not parse date: expected string, got {type(raw).__name__}")
    try:
        naive = datetime.strptime(f"{raw} {DATE_TIME_OF_DAY}", "%Y-%m-%d %H:%M:%S")
    except ValueError as ex:
        raise CodecError(f"Could not parse date {raw!r}: {ex}") from ex
    return naive.replace(tzinfo=timezone.utc)


def format_datetime(ts: datetime) -> str:
    if ts.tzinfo is not None:
        ts = ts.astimezone(timezone.utc)
    return ts.strftime(DATETIME_FORMAT)


def format_date(ts: datetime) -> str:
    if ts.tzinfo is not None:
        ts = ts.astimezone(timezone.utc)
    return ts.strftime(DATE_FORMAT)


__all__ = [
    "Service",
    "StatusCode",
    "SERVICE_CODES",
    "STATUS_CODES",
    "parse_enum",
    "parse_service",
    "parse_status_code",
    "encode_enum",
    "parse_datetime",
    "parse_date",
    "format_datetime",
    "format_date",
]
