"""Tests for the httpx-backed gateway client."""

from __future__ import annotations

import json

import httpx
import pytest

from weave_ops.errors import DecodeError, NetworkError
from weave_ops.network import HttpNetworkClient
from weave_ops.settings import WeaveOpsSettings
from weave_ops.transaction import Transaction, new_transaction
from weave_ops.wallet import Wallet

BASE = "https://gateway.test"


def _client(handler) -> HttpNetworkClient:
    return HttpNetworkClient(BASE, transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_tx_anchor_returns_stripped_body() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, text="AnchorValue_-\n")

    assert await _client(handler).tx_anchor() == "AnchorValue_-"
    assert seen[0].method == "GET"
    assert str(seen[0].url) == f"{BASE}/tx_anchor"


@pytest.mark.asyncio
async def test_get_price_uses_payload_length() -> None:
    paths: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        paths.append(request.url.path)
        return httpx.Response(200, text="123456")

    client = _client(handler)
    assert await client.get_price(b"x" * 42) == "123456"
    assert await client.get_price(b"", target="abc") == "123456"
    assert paths == ["/price/42", "/price/0/abc"]


@pytest.mark.asyncio
async def test_get_price_rejects_non_decimal_quote() -> None:
    client = _client(lambda request: httpx.Response(200, text="12.5"))
    with pytest.raises(NetworkError, match="non-decimal price"):
        await client.get_price(b"data")


@pytest.mark.asyncio
async def test_commit_posts_json_body() -> None:
    captured: dict[str, object] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["method"] = request.method
        captured["path"] = request.url.path
        captured["content_type"] = request.headers["content-type"]
        captured["body"] = request.content
        return httpx.Response(200, text="OK")

    body = b'{"id":""}'
    assert await _client(handler).commit(body) == "OK"
    assert captured == {
        "method": "POST",
        "path": "/tx",
        "content_type": "application/json",
        "body": body,
    }


@pytest.mark.asyncio
async def test_commit_rejection_raises_network_error() -> None:
    client = _client(lambda request: httpx.Response(400, text="Transaction verification failed."))
    with pytest.raises(NetworkError, match="status 400") as excinfo:
        await client.commit(b"{}")
    assert "verification failed" in str(excinfo.value)
    assert isinstance(excinfo.value.__cause__, httpx.HTTPStatusError)


@pytest.mark.asyncio
async def test_transport_failure_raises_network_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(NetworkError, match="connection refused"):
        await _client(handler).tx_anchor()


@pytest.mark.asyncio
@pytest.mark.parametrize("status", [202, 404])
async def test_get_transaction_not_ready(status: int) -> None:
    client = _client(lambda request: httpx.Response(status, text="Pending"))
    assert await client.get_transaction("abc") is None


@pytest.mark.asyncio
async def test_get_transaction_decodes_receipt(wallet: Wallet) -> None:
    signed = new_transaction("AAAA", wallet.owner, "0", "", b"hi", "10").sign(wallet)
    paths: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        paths.append(request.url.path)
        body = json.loads(signed.to_json())
        body["format"] = 1
        return httpx.Response(200, json=body)

    receipt = await _client(handler).get_transaction(signed.id)
    assert isinstance(receipt, Transaction)
    assert receipt == signed
    assert paths == [f"/tx/{signed.id}"]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(200, json={"data": "***"}),
        httpx.Response(200, text="<html>gateway error</html>"),
    ],
    ids=["bad-field", "not-json"],
)
async def test_get_transaction_malformed_receipt(response: httpx.Response) -> None:
    client = _client(lambda request: response)
    with pytest.raises(NetworkError, match="malformed transaction") as excinfo:
        await client.get_transaction("abc")
    assert isinstance(excinfo.value.__cause__, DecodeError)


@pytest.mark.asyncio
async def test_get_transaction_server_error() -> None:
    client = _client(lambda request: httpx.Response(500, text="oops"))
    with pytest.raises(NetworkError, match="status 500"):
        await client.get_transaction("abc")


def test_from_settings_builds_gateway_url() -> None:
    settings = WeaveOpsSettings(
        gateway_host="localhost", gateway_port=1984, insecure=True, request_timeout=5
    )
    client = HttpNetworkClient.from_settings(settings)
    assert client.base_url == "http://localhost:1984"
