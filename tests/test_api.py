"""Tests for the HTTP API."""

import pytest
from fastapi.testclient import TestClient

from subsweep import main
from subsweep.errors import AllProvidersFailedError, FailureReason
from subsweep.schemas import ProviderFailure, ScanResult
from subsweep.services import subdomain_enum


@pytest.fixture
def client() -> TestClient:
    return TestClient(main.app)


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


def test_scan_success(client, monkeypatch):
    seen = {}

    async def fake_scan(domain, mode=None, **kwargs):
        seen["args"] = (domain, mode)
        return ScanResult(
            domain="example.com",
            records=["a.example.com", "b.example.com"],
            count=2,
            failures=[ProviderFailure(provider="rapiddns", reason=FailureReason.RATE_LIMITED)],
            sources={"a.example.com": ["crtsh", "hackertarget"], "b.example.com": ["crtsh"]},
        )

    monkeypatch.setattr(main, "scan_domain", fake_scan)

    response = client.post("/scan", json={"domain": "example.com", "mode": "aggressive"})

    assert response.status_code == 200
    body = response.json()
    assert seen["args"] == ("example.com", "aggressive")
    assert body["domain"] == "example.com"
    assert body["total_subdomains"] == 2
    assert body["subdomains"] == [
        {"host": "a.example.com", "sources": ["crtsh", "hackertarget"]},
        {"host": "b.example.com", "sources": ["crtsh"]},
    ]
    assert body["failed_providers"] == [{"provider": "rapiddns", "reason": "rate_limited", "detail": ""}]


def test_scan_empty_result_is_success(client, monkeypatch):
    async def fake_scan(domain, mode=None, **kwargs):
        return ScanResult(domain="example.com", records=[], count=0)

    monkeypatch.setattr(main, "scan_domain", fake_scan)

    response = client.post("/scan", json={"domain": "example.com"})

    assert response.status_code == 200
    assert response.json()["total_subdomains"] == 0


def test_scan_invalid_domain_returns_400(client):
    response = client.post("/scan", json={"domain": "not a domain"})

    assert response.status_code == 400
    assert "valid domain" in response.json()["detail"]


def test_scan_missing_domain_returns_422(client):
    response = client.post("/scan", json={})
    assert response.status_code == 422


def test_scan_all_providers_failed_returns_502(client, monkeypatch):
    async def fake_scan(domain, mode=None, **kwargs):
        raise AllProvidersFailedError("example.com", [
            ProviderFailure(provider="crtsh", reason=FailureReason.TIMEOUT, detail="no response within 5.0s"),
            ProviderFailure(provider="hackertarget", reason=FailureReason.RATE_LIMITED),
        ])

    monkeypatch.setattr(main, "scan_domain", fake_scan)

    response = client.post("/scan", json={"domain": "example.com"})

    assert response.status_code == 502
    detail = response.json()["detail"]
    assert detail["message"] == "All sources unreachable"
    assert [f["reason"] for f in detail["failures"]] == ["timeout", "rate_limited"]


def test_cors_preflight(client):
    response = client.options(
        "/scan",
        headers={"Origin": "https://ui.test", "Access-Control-Request-Method": "POST"},
    )

    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "*"


def test_scan_without_mode_uses_configured_mode(client, monkeypatch, make_provider):
    seen = {}

    def fake_build_providers(mode, names, certapi_base_url):
        seen["mode"] = mode
        return [make_provider("a", ["x.example.com"])]

    monkeypatch.setattr(main, "settings", main.settings.model_copy(update={"mode": "aggressive", "providers": []}))
    monkeypatch.setattr(subdomain_enum, "build_providers", fake_build_providers)

    response = client.post("/scan", json={"domain": "example.com"})

    assert response.status_code == 200
    assert seen["mode"] == "aggressive"
    assert response.json()["total_subdomains"] == 1
