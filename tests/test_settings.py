"""Tests for environment-backed settings."""

from __future__ import annotations

import pytest

from weave_ops.settings import WeaveOpsSettings, get_settings


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "WEAVE_OPS_GATEWAY_HOST",
        "WEAVE_OPS_GATEWAY_PORT",
        "WEAVE_OPS_INSECURE",
        "ARWEAVE_WALLET",
        "WEAVE_OPS_REQUEST_TIMEOUT",
        "WEAVE_OPS_POLL_INTERVAL",
    ):
        monkeypatch.delenv(name, raising=False)


def test_defaults() -> None:
    settings = get_settings()
    assert settings.gateway_host == "arweave.net"
    assert settings.gateway_url == "https://arweave.net:443"
    assert settings.wallet_path is None
    assert settings.request_timeout == 30.0
    assert settings.poll_interval == 1.0


def test_environment_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("WEAVE_OPS_GATEWAY_HOST", "localhost")
    monkeypatch.setenv("WEAVE_OPS_INSECURE", "true")
    monkeypatch.setenv("ARWEAVE_WALLET", "/tmp/wallet.json")
    monkeypatch.setenv("WEAVE_OPS_POLL_INTERVAL", "0.25")

    settings = get_settings()
    assert settings.gateway_url == "http://localhost:80"
    assert settings.wallet_path == "/tmp/wallet.json"
    assert settings.poll_interval == 0.25


def test_explicit_port(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("WEAVE_OPS_GATEWAY_PORT", "1984")
    assert get_settings().gateway_url == "https://arweave.net:1984"


@pytest.mark.parametrize("raw", ["abc", "-1", "0"])
def test_malformed_durations_fall_back(monkeypatch: pytest.MonkeyPatch, raw: str) -> None:
    monkeypatch.setenv("WEAVE_OPS_REQUEST_TIMEOUT", raw)
    monkeypatch.setenv("WEAVE_OPS_POLL_INTERVAL", raw)
    settings = WeaveOpsSettings()
    assert settings.request_timeout == 30.0
    assert settings.poll_interval == 1.0


@pytest.mark.parametrize("raw", ["not-a-port", "70000"])
def test_malformed_port_is_ignored(monkeypatch: pytest.MonkeyPatch, raw: str) -> None:
    monkeypatch.setenv("WEAVE_OPS_GATEWAY_PORT", raw)
    assert get_settings().gateway_port is None
