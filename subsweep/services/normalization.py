"""
SubSweep - Open Source Subdomain Enumeration Tool
Author: ha-2
GitHub: https://github.com/ha-2
License: CC BY-NC 4.0
"""

import re
from typing import Optional

from subsweep.errors import InvalidDomainError

MAX_HOSTNAME_LENGTH = 253

_LABEL_RE = re.compile(r"^[a-z0-9]([a-z0-9-]{0,61}[a-z0-9])?$")
_TLD_RE = re.compile(r"^[a-z]{2,63}$")
_WILDCARD_RE = re.compile(r"(^|\.)(?:\*\.)+")


def _valid_labels(labels) -> bool:
    return all(_LABEL_RE.match(label) for label in labels)


def clean_domain(raw: str) -> str:
    """Trim, lowercase and strip any URL scheme or trailing slash/dot from user input"""
    domain = (raw or "").strip().lower()
    if domain.startswith("http://"):
        domain = domain[7:]
    elif domain.startswith("https://"):
        domain = domain[8:]
    return domain.rstrip("/").rstrip(".")


def is_valid_domain(raw: str) -> bool:
    """
    Check a user supplied domain against domain-name syntax.

    Args:
        raw (str): Domain as typed by the user

    Returns:
        bool: True if the cleaned domain has at least two valid labels
        and an alphabetic TLD of two or more characters
    """
    domain = clean_domain(raw)
    if not domain or len(domain) > MAX_HOSTNAME_LENGTH:
        return False
    labels = domain.split(".")
    if len(labels) < 2:
        return False
    return _valid_labels(labels) and bool(_TLD_RE.match(labels[-1]))


def validate_domain(raw: str) -> str:
    """Return the cleaned domain or raise InvalidDomainError"""
    if not is_valid_domain(raw):
        raise InvalidDomainError(raw)
    return clean_domain(raw)


def normalize_hostname(raw: str) -> Optional[str]:
    """
    Canonicalize one raw hostname emitted by a provider.

    Wildcard markers are removed, the name is lowercased and trimmed and a
    trailing dot is dropped. Candidates that are empty, dotless or not made
    of valid DNS labels yield None.
    """
    if not isinstance(raw, str):
        return None
    host = _WILDCARD_RE.sub(r"\1", raw.strip().lower())
    if host.endswith("."):
        host = host[:-1]
    if not host or "." not in host or len(host) > MAX_HOSTNAME_LENGTH:
        return None
    if not _valid_labels(host.split(".")):
        return None
    return host


def in_scope(hostname: str, domain: str) -> bool:
    """True if hostname is the domain itself or one of its subdomains"""
    return hostname == domain or hostname.endswith("." + domain)
