# src/dhl_tracking/api/tracking_number.py
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any

from .errors import InvalidTrackingNumber

# One alternative per historical DHL format. `\Z` is end-of-text: a trailing
# newline must not satisfy an anchor.
# The last alternative is deliberately left as "starts with 9-10 digits OR
# ends with 14 digits"; the anchors bind to each side of the `|` separately.
_ALTERNATIVES = (
    r"^\d{10}\Z",
    r"^(?:000|JJD01|JJD00|JVGL)\d+\Z",
    r"^(?:GM|LX|RX|[a-zA-Z]{5})\d+\Z",
    r"^\d{10,39}\Z",
    r"^(?:3S|JVGL|JJD)[a-zA-Z0-9]+\Z",
    r"^\d{7}\Z",
    r"^\d[a-zA-Z]{2}\d{4,6}\Z",
    r"^[a-zA-Z]{3,4}\d+\Z",
    r"^\d{3}-\d{8}\Z",
    r"^[a-zA-Z]{2,3}-[a-zA-Z]{2,3}-\d{7}\Z",
    r"^\d{4}-\d{5}\Z",
    r"^\d{9,10}|\d{14}\Z",
)

TRACKING_NUMBER_RE = re.compile("|".join(f"(?:{alt})" for alt in _ALTERNATIVES))


@dataclass(frozen=True)
class TrackingNumber:
    """A tracking number that passed format validation.

    Build one with `TrackingNumber.parse(raw)`; the pattern is matched against
    the raw input and only the stored value is stripped.
    """

    value: str

    def __post_init__(self) -> None:
        v = self.value
        if not isinstance(v, str) or v != v.strip() or not TRACKING_NUMBER_RE.search(v):
            raise InvalidTrackingNumber(v)

    @classmethod
    def parse(cls, raw: Any) -> "TrackingNumber":
        if not isinstance(raw, str) or not TRACKING_NUMBER_RE.search(raw):
            raise InvalidTrackingNumber(raw)
        return cls(raw.strip())

    def __str__(self) -> str:
        return self.value


def validate(raw: Any) -> TrackingNumber:
    """Functional alias for `TrackingNumber.parse`."""
    return TrackingNumber.parse(raw)


def is_valid(raw: Any) -> bool:
    try:
        TrackingNumber.parse(raw)
    except InvalidTrackingNumber:
        return False
    return True


__all__ = ["TRACKING_NUMBER_RE", "TrackingNumber", "validate", "is_valid"]
