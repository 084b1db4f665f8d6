"""
SubSweep - Open Source Subdomain Enumeration Tool
Author: ha-2
GitHub: https://github.com/ha-2
License: CC BY-NC 4.0
"""

from pydantic import BaseModel, ConfigDict
from typing import Dict, List, Optional, Sequence
from datetime import datetime

from subsweep.errors import FailureReason


class ProviderResult(BaseModel):
    """Outcome of one provider call: hostnames on success, a reason on failure"""
    model_config = ConfigDict(frozen=True)

    provider: str
    ok: bool
    hostnames: List[str] = []
    reason: Optional[FailureReason] = None
    detail: str = ""

    @classmethod
    def success(cls, provider: str, hostnames: Sequence[str]) -> "ProviderResult":
        return cls(provider=provider, ok=True, hostnames=list(hostnames))

    @classmethod
    def failure(cls, provider: str, reason: FailureReason, detail: str = "") -> "ProviderResult":
        return cls(provider=provider, ok=False, reason=reason, detail=detail)


class ProviderFailure(BaseModel):
    model_config = ConfigDict(frozen=True)

    provider: str
    reason: FailureReason
    detail: str = ""


class ScanResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    domain: Optional[str] = None
    records: List[str]
    count: int
    failures: List[ProviderFailure] = []
    sources: Dict[str, List[str]] = {}
    all_failed: bool = False


class ScanRequest(BaseModel):
    domain: str
    mode: Optional[str] = None


class SubdomainInfo(BaseModel):
    host: str
    sources: List[str]


class ScanResponse(BaseModel):
    domain: str
    started_at: datetime
    finished_at: datetime
    subdomains: List[SubdomainInfo]
    total_subdomains: int
    failed_providers: List[ProviderFailure]
