"""Protocol describing the gateway operations the uploader depends on."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from weave_ops.transaction import Transaction


class NetworkClient(Protocol):
    """Subset of the gateway API used to submit and confirm transactions.

    Every method is a coroutine so callers can cancel it. Failures are
    reported as :class:`~weave_ops.errors.NetworkError`.
    """

    async def tx_anchor(self) -> str:
        """Return the anchor reference for the next transaction."""

    async def get_price(self, payload: bytes, target: str = "") -> str:
        """Return the reward, as a decimal string, for storing ``payload``."""

    async def commit(self, serialized: bytes) -> str:
        """Submit a serialized transaction and return the gateway acknowledgement."""

    async def get_transaction(self, tx_id: str) -> Transaction | None:
        """Return the confirmed transaction, or ``None`` when not found yet."""
