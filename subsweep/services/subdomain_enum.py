"""
SubSweep - Open Source Subdomain Enumeration Tool
Author: ha-2
GitHub: https://github.com/ha-2
License: CC BY-NC 4.0
"""

import aiohttp
from typing import Optional, Sequence
import logging

from subsweep.config import Settings, get_settings
from subsweep.errors import AllProvidersFailedError
from subsweep.schemas import ScanResult
from subsweep.services.fanout import run_providers
from subsweep.services.history import HistoryStore, JsonlHistoryStore
from subsweep.services.merge import merge_results
from subsweep.services.normalization import validate_domain
from subsweep.services.providers import Provider, build_providers

logger = logging.getLogger(__name__)


def _record_history(store: HistoryStore, domain: str, result: ScanResult) -> None:
    try:
        store.record(domain, result)
    except Exception as e:
        logger.warning(f"Persistence failure for {domain}, scan result kept: {str(e)}")


async def scan_domain(domain: str, mode: Optional[str] = None, *,
                      providers: Optional[Sequence[Provider]] = None,
                      timeout: Optional[float] = None,
                      session: Optional[aiohttp.ClientSession] = None,
                      history: Optional[HistoryStore] = None,
                      settings: Optional[Settings] = None) -> ScanResult:
    """
    Main scanning function that combines all sources.

    Args:
        domain (str): Domain as supplied by the user
        mode (str): "basic" or "aggressive"; defaults to the configured mode
        providers (Sequence[Provider]): Explicit provider set, bypassing configuration
        timeout (float): Per-provider budget in seconds
        session (aiohttp.ClientSession): Session to reuse; one is opened and closed otherwise
        history (HistoryStore): Store for scan history; defaults to SUBSWEEP_HISTORY_PATH

    Returns:
        ScanResult: Sorted, deduplicated subdomains plus per-provider failures

    Raises:
        InvalidDomainError: The domain is not valid; no provider is queried
        AllProvidersFailedError: Every provider failed
    """
    domain = validate_domain(domain)
    settings = settings or get_settings()

    if providers is None:
        providers = build_providers(mode or settings.mode, settings.providers, settings.certapi_base_url)
    if not providers:
        raise ValueError("No providers selected for scan")
    timeout = timeout or settings.provider_timeout
    if history is None and settings.history_path:
        history = JsonlHistoryStore(settings.history_path)

    logger.info(f"Starting scan for domain: {domain} with {len(providers)} providers")

    if session is None:
        async with aiohttp.ClientSession(headers={"User-Agent": settings.user_agent}) as own_session:
            results = await run_providers(domain, providers, own_session, timeout)
    else:
        results = await run_providers(domain, providers, session, timeout)

    result = merge_results(results, domain)
    if result.all_failed:
        logger.error(f"Scan failed for domain {domain}: all {len(results)} providers failed")
        raise AllProvidersFailedError(domain, result.failures)

    logger.info(
        f"Total unique subdomains found for {domain}: {result.count} "
        f"({len(result.failures)} of {len(results)} providers failed)"
    )

    if history is not None:
        _record_history(history, domain, result)

    return result
