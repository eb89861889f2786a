"""Pytest configuration and fixtures."""

from __future__ import annotations

import asyncio
import inspect
import json
import os
import sys
from typing import Any

import pytest

# Ensure src/ is on sys.path so tests run against the src layout
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
SRC = os.path.join(ROOT, "src")
if SRC not in sys.path:
    sys.path.insert(0, SRC)

from cryptography.hazmat.primitives.asymmetric import rsa  # noqa: E402

from weave_ops.encoding import b64url_encode, int_to_bytes  # noqa: E402
from weave_ops.wallet import Wallet  # noqa: E402


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line("markers", "asyncio: mark test as requiring an event loop")


def pytest_pyfunc_call(pyfuncitem: Any) -> bool | None:
    """Execute async test functions without requiring pytest-asyncio."""

    if inspect.iscoroutinefunction(pyfuncitem.obj):
        call_kwargs = {
            name: pyfuncitem.funcargs[name]
            for name in pyfuncitem._fixtureinfo.argnames  # type: ignore[attr-defined]
        }

        event_loop = asyncio.new_event_loop()
        try:
            event_loop.run_until_complete(pyfuncitem.obj(**call_kwargs))
        finally:
            event_loop.close()
        return True
    return None


def _b64_int(value: int) -> str:
    return b64url_encode(int_to_bytes(value))


def jwk_from_private_key(
    key: rsa.RSAPrivateKey, *, include_private: bool = True, include_crt: bool = True
) -> dict[str, str]:
    """Render a cryptography RSA key as a JWK mapping."""

    numbers = key.private_numbers()
    public = numbers.public_numbers
    document = {"kty": "RSA", "n": _b64_int(public.n), "e": _b64_int(public.e)}
    if include_private:
        document["d"] = _b64_int(numbers.d)
        if include_crt:
            document.update(
                {
                    "p": _b64_int(numbers.p),
                    "q": _b64_int(numbers.q),
                    "dp": _b64_int(numbers.dmp1),
                    "dq": _b64_int(numbers.dmq1),
                    "qi": _b64_int(numbers.iqmp),
                }
            )
    return document


@pytest.fixture(scope="session")
def rsa_key() -> rsa.RSAPrivateKey:
    """One RSA-2048 key shared by the whole session; generation is slow."""

    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def jwk_document(rsa_key: rsa.RSAPrivateKey) -> dict[str, str]:
    return jwk_from_private_key(rsa_key)


@pytest.fixture(scope="session")
def wallet(jwk_document: dict[str, str]) -> Wallet:
    return Wallet.from_jwk(json.dumps(jwk_document))


@pytest.fixture(scope="session")
def public_wallet(rsa_key: rsa.RSAPrivateKey) -> Wallet:
    return Wallet.from_jwk(jwk_from_private_key(rsa_key, include_private=False))


@pytest.fixture
def make_jwk() -> Any:
    """Expose :func:`jwk_from_private_key` to tests."""

    return jwk_from_private_key
