from __future__ import annotations
from dataclasses import dataclass

DEFAULT_BASE_URL = "https://api-eu.dhl.com"


@dataclass(frozen=True)
class EnvCfg:
    """What get_app_env() hands to the CLI."""
    DHL_API_KEY: str = ""
    DHL_API_BASE_URL: str = DEFAULT_BASE_URL
