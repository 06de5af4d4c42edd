# src/dhl_tracking/config/env.py
from __future__ import annotations

import os
from pathlib import Path
from typing import Optional, Tuple, Dict

from dotenv import load_dotenv, dotenv_values

from dhl_tracking.models.env_cfg import DEFAULT_BASE_URL, EnvCfg


class EnvError(RuntimeError):
    """Raised when required environment variables are missing."""


REQUIRED_KEYS: Tuple[str, ...] = (
    "DHL_API_KEY",
)


def load_env(
    dotenv_path: Optional[Path] = None,
    *,
    override: bool = False,
    required_keys: Tuple[str, ...] = (),
    strict: bool = False,
) -> Dict[str, str]:
    """
    Load env vars from a .env file into the process environment and return the
    key/value pairs found in that file.

    - A missing `dotenv_path` (None or not a file) loads nothing.
    - `override` controls whether file values replace existing process env values.
    - `strict=True` with `required_keys`: raise EnvError unless every key is set
      in `os.environ` after loading.
    """
    loaded: Dict[str, str] = {}
    if dotenv_path is not None and Path(dotenv_path).is_file():
        path = Path(dotenv_path)
        load_dotenv(dotenv_path=path, override=override)
        loaded = {k: v for k, v in dotenv_values(path).items() if v is not None}

    if strict and required_keys:
        missing = [k for k in required_keys if not os.getenv(k)]
        if missing:
            raise EnvError(
                f"Missing required environment variable(s): {', '.join(missing)}")

    return loaded


def get_app_env(dotenv_path: Path | str | None = ".env", *, strict: bool = True) -> EnvCfg:
    """
    Load the DHL settings and return a typed config object.

    - `dotenv_path` points at a specific .env file, or None to skip file loading.
    - Existing process env wins over the file.
    - `strict=True` raises EnvError when DHL_API_KEY is missing; otherwise the key
      comes back empty (replay runs need no key).
    """
    load_env(
        Path(dotenv_path) if dotenv_path else None,
        override=False,
        required_keys=REQUIRED_KEYS,
        strict=strict,
    )

    return EnvCfg(
        DHL_API_KEY=os.getenv("DHL_API_KEY", ""),
        DHL_API_BASE_URL=os.getenv("DHL_API_BASE_URL") or DEFAULT_BASE_URL,
    )


__all__ = [
    "EnvError",
    "REQUIRED_KEYS",
    "load_env",
    "get_app_env",
]
