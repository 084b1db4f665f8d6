"""
SubSweep - Open Source Subdomain Enumeration Tool
Author: ha-2
GitHub: https://github.com/ha-2
License: CC BY-NC 4.0
"""

from typing import Dict, Optional, Sequence, Set

from subsweep.schemas import ProviderFailure, ProviderResult, ScanResult
from subsweep.services.normalization import in_scope, normalize_hostname


def merge_results(results: Sequence[ProviderResult], domain: Optional[str] = None) -> ScanResult:
    """
    Combine provider results into one sorted, deduplicated ScanResult.

    Failed providers contribute only their failure metadata. When ``domain``
    is given, hostnames outside it are dropped.
    """
    sources: Dict[str, Set[str]] = {}
    failures = []

    for result in results:
        if not result.ok:
            failures.append(ProviderFailure(
                provider=result.provider, reason=result.reason, detail=result.detail))
            continue
        for raw in result.hostnames:
            host = normalize_hostname(raw)
            if host is None:
                continue
            if domain and not in_scope(host, domain):
                continue
            sources.setdefault(host, set()).add(result.provider)

    records = sorted(sources)
    return ScanResult(
        domain=domain,
        records=records,
        count=len(records),
        failures=failures,
        sources={host: sorted(sources[host]) for host in records},
        all_failed=not any(result.ok for result in results),
    )
