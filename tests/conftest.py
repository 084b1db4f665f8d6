"""Test configuration and fixtures for SubSweep."""

import asyncio
import json
from typing import Any, Callable, Dict, List, Optional, Sequence

import aiohttp
import pytest

from subsweep.config import Settings
from subsweep.services.providers import Provider


class FakeResponse:
    """Stand-in for an aiohttp response used as an async context manager."""

    def __init__(self, status: int = 200, body: Any = ""):
        self.status = status
        self.body = body if isinstance(body, str) else json.dumps(body)

    async def __aenter__(self) -> "FakeResponse":
        return self

    async def __aexit__(self, *exc_info) -> bool:
        return False

    async def text(self) -> str:
        return self.body

    async def json(self, content_type: Optional[str] = "application/json") -> Any:
        return json.loads(self.body)


class FakeSession:
    """Routes GET requests by URL prefix to canned responses or exceptions."""

    def __init__(self, routes: Dict[str, Any]):
        self.routes = routes
        self.calls: List[str] = []

    def get(self, url: str, **kwargs) -> FakeResponse:
        self.calls.append(url)
        for prefix, response in self.routes.items():
            if url.startswith(prefix):
                if isinstance(response, BaseException):
                    raise response
                return response
        raise aiohttp.ClientConnectionError(f"no route for {url}")


@pytest.fixture
def fake_session() -> Callable[..., FakeSession]:
    """Build a FakeSession from a prefix -> response mapping."""

    def _build(routes: Optional[Dict[str, Any]] = None) -> FakeSession:
        return FakeSession(routes or {})

    return _build


@pytest.fixture
def make_provider() -> Callable[..., Provider]:
    """Build a provider returning fixed hostnames after an optional delay.

    ``hang=True`` makes the provider wait forever, ``error`` is raised instead
    of returning, and ``calls`` (a list) receives the domain of every call.
    """

    def _build(
        name: str,
        hostnames: Sequence[str] = (),
        delay: float = 0.0,
        error: Optional[BaseException] = None,
        hang: bool = False,
        timeout: Optional[float] = None,
        calls: Optional[list] = None,
    ) -> Provider:
        async def fetch_hostnames(domain, session, budget):
            if calls is not None:
                calls.append(domain)
            if hang:
                await asyncio.Event().wait()
            if delay:
                await asyncio.sleep(delay)
            if error is not None:
                raise error
            return list(hostnames)

        return Provider(name, fetch_hostnames, timeout)

    return _build


@pytest.fixture
def settings() -> Settings:
    """Settings independent of the process environment."""
    return Settings(provider_timeout=1.0)
