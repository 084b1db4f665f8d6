"""
SubSweep - Open Source Subdomain Enumeration Tool
Author: ha-2
GitHub: https://github.com/ha-2
License: CC BY-NC 4.0
"""

import asyncio
import logging
from functools import partial
from typing import Dict, List, Sequence

import aiohttp

from subsweep.errors import FailureReason
from subsweep.schemas import ProviderResult
from subsweep.services.providers import Provider

logger = logging.getLogger(__name__)


def _discard_late_result(name: str, task: asyncio.Task) -> None:
    # Retrieve the outcome of an abandoned task so the loop never reports it
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.debug(f"Discarded late failure from {name}: {exc!r}")
    else:
        logger.debug(f"Discarded late result from {name}")


async def run_providers(domain: str, providers: Sequence[Provider],
                        session: aiohttp.ClientSession, timeout: float) -> List[ProviderResult]:
    """
    Run every provider concurrently, each bounded by its own deadline.

    Args:
        domain (str): Validated target domain
        providers (Sequence[Provider]): Providers to query
        session (aiohttp.ClientSession): Shared HTTP session
        timeout (float): Default per-provider budget in seconds

    Returns:
        List[ProviderResult]: One result per provider, in provider order.
        Providers that miss their deadline are cancelled and reported as
        TIMEOUT without waiting for the cancellation to complete.
    """
    if timeout <= 0:
        raise ValueError("timeout must be positive")
    if not providers:
        return []

    loop = asyncio.get_running_loop()
    started = loop.time()
    tasks = [
        asyncio.ensure_future(provider.fetch(domain, session, provider.timeout or timeout))
        for provider in providers
    ]
    deadlines: Dict[asyncio.Task, float] = {
        task: started + (provider.timeout or timeout) for task, provider in zip(tasks, providers)
    }

    timed_out = set()
    pending = set(tasks)
    try:
        while pending:
            now = loop.time()
            for task in [t for t in pending if deadlines[t] <= now]:
                pending.discard(task)
                timed_out.add(task)
                task.cancel()
            if not pending:
                break
            _, pending = await asyncio.wait(
                pending,
                timeout=min(deadlines[t] for t in pending) - now,
                return_when=asyncio.FIRST_COMPLETED,
            )
    except asyncio.CancelledError:
        for task in tasks:
            task.cancel()
        raise

    results = []
    for provider, task in zip(providers, tasks):
        budget = provider.timeout or timeout
        if task in timed_out:
            task.add_done_callback(partial(_discard_late_result, provider.name))
            logger.warning(f"{provider.name} scan timed out after {budget}s")
            results.append(ProviderResult.failure(
                provider.name, FailureReason.TIMEOUT, f"no response within {budget}s"))
        elif task.cancelled():
            logger.warning(f"{provider.name} scan was cancelled before its deadline")
            results.append(ProviderResult.failure(
                provider.name, FailureReason.TRANSPORT_ERROR, "cancelled before completion"))
        elif task.exception() is not None:
            # Provider.fetch converts faults itself; this covers foreign adapters
            exc = task.exception()
            logger.warning(f"{provider.name} scan failed: {exc!r}")
            results.append(ProviderResult.failure(
                provider.name, FailureReason.UNPARSEABLE_RESPONSE, repr(exc)))
        else:
            results.append(task.result())

    logger.debug(f"Fan-out for {domain} finished in {loop.time() - started:.2f}s")
    return results
