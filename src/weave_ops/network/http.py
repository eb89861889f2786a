"""HTTP gateway client built on :class:`httpx.AsyncClient`."""

from __future__ import annotations

import logging
from collections.abc import Collection

import httpx

from weave_ops.errors import DecodeError, NetworkError
from weave_ops.settings import WeaveOpsSettings, get_settings
from weave_ops.transaction import Transaction

__all__ = ["HttpNetworkClient"]

LOGGER = logging.getLogger(__name__)

# Receipt lookups answer 202 while the transaction is pending and 404 until
# the gateway has seen it at all.
_NOT_READY_STATUSES: frozenset[int] = frozenset({202, 404})


class HttpNetworkClient:
    """Talk to a gateway's ``/tx_anchor``, ``/price``, ``/tx`` endpoints."""

    def __init__(
        self,
        base_url: str = "https://arweave.net",
        *,
        timeout_seconds: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base = base_url.rstrip("/")
        self._timeout = timeout_seconds
        self._transport = transport

    @classmethod
    def from_settings(
        cls,
        settings: WeaveOpsSettings | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> HttpNetworkClient:
        """Build a client pointed at the configured gateway."""

        settings_obj = settings or get_settings()
        return cls(
            settings_obj.gateway_url,
            timeout_seconds=settings_obj.request_timeout,
            transport=transport,
        )

    @property
    def base_url(self) -> str:
        return self._base

    async def tx_anchor(self) -> str:
        """Return the anchor reference to embed in the next transaction."""

        response = await self._send("GET", "/tx_anchor")
        return response.text.strip()

    async def get_price(self, payload: bytes, target: str = "") -> str:
        """Return the reward quote for storing ``payload`` bytes.

        Raises:
            NetworkError: If the request fails or the quote is not a
                decimal string.
        """

        path = f"/price/{len(payload)}"
        if target:
            path = f"{path}/{target}"
        response = await self._send("GET", path)
        price = response.text.strip()
        if not (price.isascii() and price.isdigit()):
            raise NetworkError(f"gateway returned a non-decimal price {price!r}")
        return price

    async def commit(self, serialized: bytes) -> str:
        """POST a serialized transaction and return the acknowledgement body."""

        response = await self._send(
            "POST",
            "/tx",
            content=serialized,
            headers={"Content-Type": "application/json"},
        )
        return response.text

    async def get_transaction(self, tx_id: str) -> Transaction | None:
        """Fetch a transaction by base64url id.

        Returns:
            The decoded transaction, or ``None`` while the gateway reports it
            as pending or unknown.

        Raises:
            NetworkError: For transport failures, unexpected statuses and
                malformed transaction bodies.
        """

        response = await self._send(
            "GET", f"/tx/{tx_id}", accept_statuses=_NOT_READY_STATUSES
        )
        if response.status_code in _NOT_READY_STATUSES:
            LOGGER.debug(
                "Transaction not confirmed yet",
                extra={"tx_id": tx_id, "status_code": response.status_code},
            )
            return None
        try:
            return Transaction.from_json(response.content)
        except DecodeError as exc:
            LOGGER.warning(
                "Gateway returned a malformed transaction",
                extra={"tx_id": tx_id},
                exc_info=exc,
            )
            raise NetworkError(
                f"gateway returned a malformed transaction: {exc}"
            ) from exc

    async def _send(
        self,
        method: str,
        path: str,
        *,
        accept_statuses: Collection[int] = (),
        **kwargs: object,
    ) -> httpx.Response:
        url = f"{self._base}{path}"
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout, transport=self._transport
            ) as client:
                response = await client.request(method, url, **kwargs)  # type: ignore[arg-type]
                if response.status_code not in accept_statuses:
                    response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            LOGGER.warning(
                "Gateway HTTP error",
                extra={
                    "method": method,
                    "url": url,
                    "status_code": exc.response.status_code,
                },
                exc_info=exc,
            )
            raise NetworkError(
                f"{method} {url} failed with status {exc.response.status_code}: "
                f"{exc.response.text.strip()[:200]}"
            ) from exc
        except httpx.HTTPError as exc:
            LOGGER.warning(
                "Gateway transport error",
                extra={"method": method, "url": url},
                exc_info=exc,
            )
            raise NetworkError(f"{method} {url} failed: {exc}") from exc
        return response
