"""
SubSweep - Open Source Subdomain Enumeration Tool
Author: ha-2
GitHub: https://github.com/ha-2
License: CC BY-NC 4.0
"""

from enum import Enum
from typing import List, Optional


class FailureReason(str, Enum):
    """Terminal failure state of a single provider call"""
    TIMEOUT = "timeout"
    TRANSPORT_ERROR = "transport_error"
    UNPARSEABLE_RESPONSE = "unparseable_response"
    RATE_LIMITED = "rate_limited"


class ProviderError(Exception):
    """Raised inside a provider adapter; never escapes Provider.fetch"""
    reason = FailureReason.TRANSPORT_ERROR

    def __init__(self, message: str, reason: Optional[FailureReason] = None):
        super().__init__(message)
        if reason is not None:
            self.reason = reason


class ProviderStatusError(ProviderError):
    """Provider answered with a non-success HTTP status"""

    def __init__(self, status: int):
        reason = FailureReason.RATE_LIMITED if status == 429 else FailureReason.TRANSPORT_ERROR
        super().__init__(f"HTTP {status}", reason)
        self.status = status


class RateLimitedError(ProviderError):
    reason = FailureReason.RATE_LIMITED


class UnparseableResponseError(ProviderError):
    reason = FailureReason.UNPARSEABLE_RESPONSE


class ScanError(Exception):
    """Base class for errors surfaced to the caller of scan_domain"""


class InvalidDomainError(ScanError):
    def __init__(self, domain: str, message: str = "Please enter a valid domain name (e.g., example.com)"):
        super().__init__(message)
        self.domain = domain


class AllProvidersFailedError(ScanError):
    """Every configured provider ended in failure"""

    def __init__(self, domain: str, failures: List):
        super().__init__(f"All {len(failures)} providers failed for {domain}")
        self.domain = domain
        self.failures = failures


class PersistenceError(Exception):
    """Raised by history stores; logged by the coordinator, never escalated"""
