"""Gateway access for transaction submission and confirmation."""

from __future__ import annotations

from weave_ops.network.base import NetworkClient
from weave_ops.network.http import HttpNetworkClient

__all__ = ["HttpNetworkClient", "NetworkClient"]
