"""Upload orchestration: build, sign, submit and confirm data transactions."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable, Iterator
from contextlib import contextmanager

import httpx

from weave_ops.errors import (
    EncodingError,
    MissingPrivateKeyError,
    NetworkError,
    NoWalletError,
    SigningError,
)
from weave_ops.network import HttpNetworkClient, NetworkClient
from weave_ops.settings import WeaveOpsSettings, get_settings
from weave_ops.transaction import Tag, Transaction, new_transaction
from weave_ops.wallet import DEFAULT_PSS, PssParameters, Wallet

__all__ = ["Uploader"]

LOGGER = logging.getLogger(__name__)


@contextmanager
def _network_step(description: str) -> Iterator[None]:
    """Re-raise collaborator failures as :class:`NetworkError` with context."""

    try:
        yield
    except (NetworkError, httpx.HTTPError, OSError) as exc:
        raise NetworkError(f"{description}: {exc}") from exc


class Uploader:
    """Turn raw payloads into committed, optionally confirmed, transactions.

    Each call is one sequential unit of work: anchor and price lookups, then
    signing, then commit. Concurrent calls share nothing but the read-only
    wallet.
    """

    def __init__(
        self,
        client: NetworkClient,
        wallet: Wallet | None = None,
        *,
        poll_interval: float = 1.0,
        pss: PssParameters = DEFAULT_PSS,
        logger: logging.Logger | None = None,
    ) -> None:
        self.client = client
        self.wallet = wallet
        self.poll_interval = poll_interval
        self.pss = pss
        self.logger = logger or LOGGER

    @classmethod
    def from_settings(
        cls,
        settings: WeaveOpsSettings | None = None,
        *,
        wallet: Wallet | None = None,
        client: NetworkClient | None = None,
    ) -> Uploader:
        """Build an uploader from environment settings.

        The wallet is loaded from ``settings.wallet_path`` unless one is
        passed explicitly.

        Raises:
            KeyFormatError: If the configured wallet file cannot be loaded.
        """

        settings_obj = settings or get_settings()
        if wallet is None and settings_obj.wallet_path:
            wallet = Wallet.from_file(settings_obj.wallet_path)
        return cls(
            client or HttpNetworkClient.from_settings(settings_obj),
            wallet,
            poll_interval=settings_obj.poll_interval,
        )

    async def upload(
        self, payload: bytes, *, tags: Iterable[Tag] = ()
    ) -> Transaction:
        """Sign and submit ``payload`` as a pure data transaction.

        The returned transaction carries its id immediately; that does not
        mean the network has confirmed it.

        Raises:
            NoWalletError: If no wallet with a private key is configured.
            NetworkError: If the anchor, price or commit call fails.
            SigningError: If the transaction cannot be signed.
        """

        wallet = self.wallet
        if wallet is None or not wallet.has_private_key:
            raise NoWalletError(
                "unable to upload content without a wallet holding a private key"
            )
        self.logger.debug(
            "Uploading content",
            extra={"wallet": wallet.address, "content_size": len(payload)},
        )

        with _network_step("unable to retrieve transaction anchor"):
            anchor = await self.client.tx_anchor()
        self.logger.debug("Retrieved transaction anchor", extra={"anchor": anchor})

        with _network_step("unable to retrieve price"):
            reward = await self.client.get_price(payload)
        self.logger.debug("Retrieved price for content", extra={"reward": reward})

        unsigned = new_transaction(anchor, wallet.owner, "0", "", payload, reward)
        extra_tags = tuple(tags)
        if extra_tags:
            unsigned = unsigned.with_tags(*extra_tags)

        try:
            signed = unsigned.sign(wallet, self.pss)
        except (EncodingError, MissingPrivateKeyError) as exc:
            raise SigningError(f"unable to sign transaction: {exc}") from exc

        with _network_step("unable to commit transaction"):
            await self.client.commit(signed.to_json())
        self.logger.debug(
            "Transaction committed",
            extra={"tx_id": signed.id, "wallet": wallet.address},
        )
        return signed

    async def upload_and_confirm(
        self,
        payload: bytes,
        *,
        tags: Iterable[Tag] = (),
        timeout: float | None = None,
    ) -> Transaction:
        """Upload ``payload`` and poll until the network returns a receipt.

        Polling repeats every ``poll_interval`` seconds with no retry cap;
        bound the total wait with ``timeout`` or by cancelling the task.

        Args:
            payload: Raw data bytes.
            tags: Optional tags attached before signing.
            timeout: Optional bound in seconds on the whole upload and poll.

        Returns:
            The receipt transaction reported by the network.

        Raises:
            TimeoutError: If ``timeout`` elapses before a receipt appears.
            asyncio.CancelledError: If the calling task is cancelled.
            NetworkError: On the first failed network call; polling stops.
        """

        async with asyncio.timeout(timeout):
            signed = await self.upload(payload, tags=tags)
            return await self._await_receipt(signed.id)

    async def _await_receipt(self, tx_id: str) -> Transaction:
        attempt = 0
        while True:
            attempt += 1
            with _network_step("unable to retrieve transaction"):
                receipt = await self.client.get_transaction(tx_id)
            if receipt is not None:
                self.logger.debug(
                    "Transaction confirmed",
                    extra={"tx_id": tx_id, "attempts": attempt},
                )
                return receipt
            await asyncio.sleep(self.poll_interval)
