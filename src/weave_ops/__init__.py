"""Weave Ops - signed content uploads to a permanent storage gateway."""

from __future__ import annotations

from importlib import import_module
from typing import Any, TYPE_CHECKING

__all__ = [
    "HttpNetworkClient",
    "NetworkClient",
    "Tag",
    "Transaction",
    "Uploader",
    "Wallet",
    "WeaveOpsSettings",
    "new_transaction",
]

if TYPE_CHECKING:
    from .network import HttpNetworkClient, NetworkClient
    from .settings import WeaveOpsSettings
    from .transaction import Tag, Transaction, new_transaction
    from .uploader import Uploader
    from .wallet import Wallet


def __getattr__(name: str) -> Any:
    """Lazily import submodules so ``import weave_ops`` stays cheap."""

    module_map = {
        "HttpNetworkClient": "network",
        "NetworkClient": "network",
        "Tag": "transaction",
        "Transaction": "transaction",
        "new_transaction": "transaction",
        "Uploader": "uploader",
        "Wallet": "wallet",
        "WeaveOpsSettings": "settings",
    }

    if name not in module_map:
        raise AttributeError(name)

    module = import_module(f".{module_map[name]}", __name__)
    return getattr(module, name)
