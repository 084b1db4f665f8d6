"""
SubSweep - Open Source Subdomain Enumeration Tool
Author: ha-2
GitHub: https://github.com/ha-2
License: CC BY-NC 4.0
"""

import asyncio
import aiohttp
import aiodns
import inspect
import re
from dataclasses import dataclass
from functools import partial
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence
from urllib.parse import urlparse
import logging

from subsweep.errors import (
    FailureReason,
    ProviderError,
    ProviderStatusError,
    RateLimitedError,
    UnparseableResponseError,
)
from subsweep.schemas import ProviderResult

logger = logging.getLogger(__name__)

FetchHostnames = Callable[[str, aiohttp.ClientSession, float], Awaitable[List[str]]]


@dataclass(frozen=True)
class Provider:
    """
    One external reconnaissance source.

    ``fetch_hostnames`` builds the source's request, parses its response and
    returns raw hostname strings, raising ProviderError on anything it cannot
    use. ``fetch`` is the boundary that turns every fault into a failed
    ProviderResult. ``timeout`` overrides the scan-wide budget when set.
    """
    name: str
    fetch_hostnames: FetchHostnames
    timeout: Optional[float] = None

    async def fetch(self, domain: str, session: aiohttp.ClientSession, timeout: float) -> ProviderResult:
        try:
            hostnames = await self.fetch_hostnames(domain, session, timeout)
        except asyncio.TimeoutError as e:
            logger.debug(f"{self.name} scan skipped for this run: Timeout error - {str(e)}")
            return ProviderResult.failure(self.name, FailureReason.TIMEOUT, "timed out")
        except ProviderError as e:
            logger.warning(f"{self.name} scan failed: {str(e)}")
            return ProviderResult.failure(self.name, e.reason, str(e))
        except aiohttp.ClientError as e:
            logger.warning(f"{self.name} scan failed: Client error - {str(e)}")
            return ProviderResult.failure(self.name, FailureReason.TRANSPORT_ERROR, f"Client error - {str(e)}")
        except Exception as e:
            logger.warning(f"{self.name} scan failed: {e!r}")
            return ProviderResult.failure(self.name, FailureReason.UNPARSEABLE_RESPONSE, repr(e))

        logger.info(f"{self.name} returned {len(hostnames)} hostnames for {domain}")
        return ProviderResult.success(self.name, hostnames)


async def _get_text(session: aiohttp.ClientSession, url: str, timeout: float) -> str:
    async with session.get(url, timeout=aiohttp.ClientTimeout(total=timeout)) as response:
        if response.status != 200:
            raise ProviderStatusError(response.status)
        return await response.text()


async def _get_json(session: aiohttp.ClientSession, url: str, timeout: float) -> Any:
    async with session.get(url, timeout=aiohttp.ClientTimeout(total=timeout)) as response:
        if response.status != 200:
            raise ProviderStatusError(response.status)
        try:
            return await response.json(content_type=None)
        except ValueError as e:
            raise UnparseableResponseError(f"invalid JSON body - {str(e)}")


def _string_field(entry: Any, field: str) -> str:
    if not isinstance(entry, dict) or not isinstance(entry.get(field), str):
        raise UnparseableResponseError(f"entry without '{field}' field")
    return entry[field]


async def fetch_crtsh(domain: str, session: aiohttp.ClientSession, timeout: float) -> List[str]:
    """Certificate Transparency logs (crt.sh)"""
    url = f"https://crt.sh/?q=%25.{domain}&output=json"
    data = await _get_json(session, url, timeout)
    if not isinstance(data, list):
        raise UnparseableResponseError("expected a JSON array of certificates")

    hostnames = []
    for entry in data:
        # Multiple names in one entry are separated by newlines
        hostnames.extend(_string_field(entry, "name_value").split("\n"))
    return hostnames


async def fetch_hackertarget(domain: str, session: aiohttp.ClientSession, timeout: float) -> List[str]:
    """HackerTarget hostsearch (host,ip CSV lines)"""
    url = f"https://api.hackertarget.com/hostsearch/?q={domain}"
    text = (await _get_text(session, url, timeout)).strip()

    if "API count exceeded" in text:
        raise RateLimitedError("API count exceeded")
    if not text or text.startswith("No records found"):
        return []
    if text.startswith("error"):
        raise UnparseableResponseError(text.splitlines()[0])

    return [line.split(",", 1)[0] for line in text.splitlines() if line.strip()]


_THROTTLE_MARKERS = ("too many requests", "rate limit")


async def fetch_rapiddns(domain: str, session: aiohttp.ClientSession, timeout: float) -> List[str]:
    """RapidDNS HTML table scraping"""
    url = f"https://rapiddns.io/subdomain/{domain}?full=1"
    text = await _get_text(session, url, timeout)

    start = text.find("<table")
    if start == -1:
        lowered = text.lower()
        if any(marker in lowered for marker in _THROTTLE_MARKERS):
            raise RateLimitedError("throttled by rapiddns")
        raise UnparseableResponseError("no result table in page")
    end = text.rfind("</table>")
    table = text[start:end if end > start else len(text)]

    pattern = r"(?<![A-Za-z0-9_.-])(?:[A-Za-z0-9_-]+\.)+" + re.escape(domain) + r"(?![A-Za-z0-9-]|\.[A-Za-z0-9])"
    return re.findall(pattern, table, flags=re.IGNORECASE)


async def fetch_alienvault(domain: str, session: aiohttp.ClientSession, timeout: float) -> List[str]:
    """AlienVault OTX passive DNS"""
    url = f"https://otx.alienvault.com/api/v1/indicators/domain/{domain}/passive_dns"
    data = await _get_json(session, url, timeout)
    if not isinstance(data, dict) or not isinstance(data.get("passive_dns"), list):
        raise UnparseableResponseError("missing 'passive_dns' list")
    return [_string_field(entry, "hostname") for entry in data["passive_dns"]]


async def fetch_certspotter(domain: str, session: aiohttp.ClientSession, timeout: float) -> List[str]:
    """CertSpotter CT issuances"""
    url = f"https://api.certspotter.com/v1/issuances?domain={domain}&include_subdomains=true&expand=dns_names"
    data = await _get_json(session, url, timeout)
    if isinstance(data, dict):
        if data.get("code") == "rate_limited":
            raise RateLimitedError(data.get("message") or "rate limited")
        raise UnparseableResponseError(f"unexpected object: {data.get('code', 'no code')}")
    if not isinstance(data, list):
        raise UnparseableResponseError("expected a JSON array of issuances")

    hostnames = []
    for entry in data:
        dns_names = entry.get("dns_names") if isinstance(entry, dict) else None
        if not isinstance(dns_names, list):
            raise UnparseableResponseError("issuance without 'dns_names' list")
        hostnames.extend(name for name in dns_names if isinstance(name, str))
    return hostnames


async def fetch_anubis(domain: str, session: aiohttp.ClientSession, timeout: float) -> List[str]:
    """Anubis (JLDC) subdomain index"""
    data = await _get_json(session, f"https://jldc.me/anubis/subdomains/{domain}", timeout)
    if not isinstance(data, list):
        raise UnparseableResponseError("expected a JSON array of hostnames")
    return [item for item in data if isinstance(item, str)]


async def fetch_wayback(domain: str, session: aiohttp.ClientSession, timeout: float) -> List[str]:
    """Hostnames of archived URLs in the Wayback Machine CDX index"""
    url = f"https://web.archive.org/cdx/search/cdx?url=*.{domain}/*&output=json&fl=original&collapse=urlkey"
    data = await _get_json(session, url, timeout)
    if not isinstance(data, list):
        raise UnparseableResponseError("expected a JSON array of rows")

    hostnames = []
    # First row is the field header
    for row in data[1:]:
        if not isinstance(row, list) or not row or not isinstance(row[0], str):
            raise UnparseableResponseError("malformed CDX row")
        original = row[0] if "://" in row[0] else f"http://{row[0]}"
        try:
            hostname = urlparse(original).hostname
        except ValueError:
            continue
        if hostname:
            hostnames.append(hostname)
    return hostnames


async def _close_resolver(resolver: aiodns.DNSResolver) -> None:
    # close() appeared in aiodns 3.3 and became a coroutine later
    close = getattr(resolver, "close", None)
    if close is None:
        return
    result = close()
    if inspect.isawaitable(result):
        await result


async def fetch_dns_records(domain: str, session: aiohttp.ClientSession, timeout: float) -> List[str]:
    """DNS record enumeration (MX, NS, SOA, TXT/SPF)"""
    resolver = aiodns.DNSResolver(timeout=timeout)
    record_types = ("MX", "NS", "SOA", "TXT")
    try:
        answers = await asyncio.gather(
            *(resolver.query(domain, record_type) for record_type in record_types),
            return_exceptions=True,
        )
    finally:
        await _close_resolver(resolver)

    hostnames = []
    failed = 0
    for record_type, answer in zip(record_types, answers):
        if isinstance(answer, Exception):
            logger.debug(f"{record_type} record query failed: {answer}")
            failed += 1
            continue
        if record_type in ("MX", "NS"):
            hostnames.extend(record.host for record in answer)
        elif record_type == "SOA":
            hostnames.append(answer.nsname)
        else:
            for record in answer:
                txt = record.text
                if isinstance(txt, bytes):
                    txt = txt.decode("utf-8", "ignore")
                # SPF includes
                hostnames.extend(re.findall(r"include:([A-Za-z0-9._-]+)", txt))

    if failed == len(record_types):
        raise ProviderError(f"all DNS lookups failed for {domain}")
    return hostnames


async def fetch_certapi(base_url: str, domain: str, session: aiohttp.ClientSession, timeout: float) -> List[str]:
    """
    Optional CT source: CertAPI.

    Expects ``{"domain": ..., "subdomains": [...]}`` but also accepts a
    ``results`` list or a bare JSON array.
    """
    data = await _get_json(session, f"{base_url.rstrip('/')}/subdomains?domain={domain}", timeout)
    if isinstance(data, dict):
        raw_list = data.get("subdomains", data.get("results"))
    else:
        raw_list = data
    if not isinstance(raw_list, list):
        raise UnparseableResponseError("no subdomain list in response")
    return [item for item in raw_list if isinstance(item, str)]


PROVIDERS: Dict[str, Provider] = {
    provider.name: provider
    for provider in (
        Provider("crtsh", fetch_crtsh),
        Provider("hackertarget", fetch_hackertarget),
        Provider("rapiddns", fetch_rapiddns),
        Provider("alienvault", fetch_alienvault),
        Provider("certspotter", fetch_certspotter),
        Provider("anubis", fetch_anubis),
        Provider("wayback", fetch_wayback),
        Provider("dns", fetch_dns_records),
    )
}

BASIC_PROVIDERS = ("crtsh", "hackertarget", "rapiddns", "alienvault")
AGGRESSIVE_PROVIDERS = BASIC_PROVIDERS + ("certspotter", "anubis", "wayback", "dns")


def certapi_provider(base_url: str) -> Provider:
    return Provider("certapi", partial(fetch_certapi, base_url))


def build_providers(mode: str = "basic", names: Optional[Sequence[str]] = None,
                    certapi_base_url: str = "") -> List[Provider]:
    """
    Resolve the provider set for a scan.

    Args:
        mode (str): "basic" or "aggressive"; anything else falls back to basic
        names (Sequence[str]): Explicit provider names, overriding the mode
        certapi_base_url (str): Adds the CertAPI source when non-empty

    Returns:
        List[Provider]: Providers in registration order
    """
    if names:
        unknown = [name for name in names if name not in PROVIDERS]
        if unknown:
            raise ValueError(f"Unknown providers: {', '.join(unknown)}")
        selected = list(dict.fromkeys(names))
    else:
        mode = (mode or "basic").lower()
        selected = list(AGGRESSIVE_PROVIDERS if mode == "aggressive" else BASIC_PROVIDERS)

    providers = [PROVIDERS[name] for name in selected]
    if certapi_base_url:
        providers.append(certapi_provider(certapi_base_url))
    return providers
