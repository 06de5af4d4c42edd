from __future__ import annotations

import logging
import os
import tempfile
import threading
import json
from typing import Any, Optional, Union
from pathlib import Path
from dataclasses import dataclass

from dhl_tracking.models.shipment import Response


class CaptureFileError(ValueError):
    """The capture file exists but is not a JSON array this writer can extend."""


@dataclass
class ResponseWriter:
    """Persist DHL tracking response bodies as a single JSON array.

    File shape on disk:
        [
          { "shipments": [...], "possibleAdditionalShipmentsUrl": [...] },
          ...
        ]

    The file can be fed straight back into `ReplayTransport`. Every append
    rewrites a temp file next to the target and swaps it in with `os.replace`,
    so readers never see a half-written array. An existing file that does not
    decode is left untouched and `CaptureFileError` is raised.
    """

    path: Path
    logger: Optional[logging.Logger] = None

    def __post_init__(self) -> None:
        self.path = Path(self.path)
        self.logger = self.logger or logging.getLogger(
            "dhl_tracking.api.response_writer")
        self._lock = threading.Lock()

    def add_response(self, response: Union[Response, dict[str, Any]]) -> None:
        """Append one body; accepts a parsed `Response` or a raw dict."""
        body = response.to_dict() if isinstance(response, Response) else response
        with self._lock:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            items = self._read_unlocked()
            items.append(body)
            self._replace_unlocked(items)
        self.logger.debug("Captured DHL response body → %s (%d total)", self.path, len(items))

    def _replace_unlocked(self, items: list) -> None:
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(items, fh, ensure_ascii=False, indent=2)
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def _read_unlocked(self) -> list:
        if not self.path.exists():
            return []
        try:
            with self.path.open("r", encoding="utf-8") as fh:
                data = json.load(fh)
        except ValueError as ex:
            self.logger.warning(
                "Capture file %s is not valid JSON; leaving it untouched: %s", self.path, ex)
            raise CaptureFileError(f"Capture file {self.path} is not valid JSON: {ex}") from ex
        return data if isinstance(data, list) else [data]

    def read_all(self) -> list:
        """Return all saved response bodies (JSON array)."""
        with self._lock:
            return self._read_unlocked()
