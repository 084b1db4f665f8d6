"""
SubSweep - Open Source Subdomain Enumeration Tool
Author: ha-2
GitHub: https://github.com/ha-2
License: CC BY-NC 4.0
"""

import os
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, field_validator

# Load environment variables from .env file
load_dotenv()

DEFAULT_PROVIDER_TIMEOUT = 5.0
DEFAULT_USER_AGENT = "Mozilla/5.0 (compatible; SubSweep/1.0)"
SCAN_MODES = ("basic", "aggressive")


def _split_list(value: Optional[str]) -> List[str]:
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


class Settings(BaseModel):
    provider_timeout: float = DEFAULT_PROVIDER_TIMEOUT
    mode: str = "basic"
    providers: List[str] = []
    user_agent: str = DEFAULT_USER_AGENT
    history_path: Optional[str] = None
    certapi_base_url: str = ""
    log_level: str = "INFO"
    cors_origins: List[str] = ["*"]

    @field_validator("provider_timeout")
    @classmethod
    def _positive_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("provider timeout must be positive")
        return value

    @field_validator("mode")
    @classmethod
    def _known_mode(cls, value: str) -> str:
        value = (value or "basic").strip().lower()
        if value not in SCAN_MODES:
            raise ValueError(f"unknown scan mode: {value}")
        return value

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, value: str) -> str:
        return value.strip().upper()


def get_settings() -> Settings:
    """Build settings from SUBSWEEP_* environment variables"""
    values = {
        "provider_timeout": os.getenv("SUBSWEEP_PROVIDER_TIMEOUT", str(DEFAULT_PROVIDER_TIMEOUT)),
        "mode": os.getenv("SUBSWEEP_MODE", "basic"),
        "providers": _split_list(os.getenv("SUBSWEEP_PROVIDERS")),
        "user_agent": os.getenv("SUBSWEEP_USER_AGENT", DEFAULT_USER_AGENT),
        "history_path": os.getenv("SUBSWEEP_HISTORY_PATH", "").strip() or None,
        "certapi_base_url": os.getenv("SUBSWEEP_CERTAPI_BASE_URL", "").strip(),
        "log_level": os.getenv("SUBSWEEP_LOG_LEVEL", "INFO"),
    }
    origins = _split_list(os.getenv("SUBSWEEP_CORS_ORIGINS"))
    if origins:
        values["cors_origins"] = origins
    return Settings(**values)
