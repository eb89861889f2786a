"""Command-line utilities for weave_ops."""

from __future__ import annotations

import argparse
import asyncio
import logging
import logging.handlers
import sys
from pathlib import Path

from .errors import WeaveOpsError
from .logging_pipeline import configure_structured_logging, shutdown_listeners
from .settings import WeaveOpsSettings, get_settings
from .transaction import Tag
from .uploader import Uploader
from .wallet import Wallet


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="weave-ops",
        description="Sign and upload content to a permanent storage gateway.",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Emit debug logs as JSON on stderr.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    address = subparsers.add_parser("address", help="Print a wallet's address.")
    address.add_argument("wallet", help="Path to the JWK wallet file.")

    upload = subparsers.add_parser("upload", help="Upload a file.")
    upload.add_argument("wallet", help="Path to the JWK wallet file.")
    upload.add_argument("file", help="Path to the file to upload.")
    upload.add_argument(
        "--content-type",
        "-t",
        help="Value for a Content-Type tag attached to the transaction.",
    )
    upload.add_argument(
        "--confirm",
        action="store_true",
        help="Wait until the gateway reports the transaction.",
    )
    upload.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Maximum seconds to wait when --confirm is set.",
    )
    return parser


def _cmd_address(args: argparse.Namespace) -> int:
    wallet = Wallet.from_file(args.wallet)
    print(wallet.address)
    return 0


async def _upload(
    args: argparse.Namespace, settings: WeaveOpsSettings
) -> str:
    wallet = Wallet.from_file(args.wallet)
    uploader = Uploader.from_settings(settings, wallet=wallet)
    content = Path(args.file).read_bytes()
    tags = [Tag("Content-Type", args.content_type)] if args.content_type else []

    if args.confirm:
        tx = await uploader.upload_and_confirm(content, tags=tags, timeout=args.timeout)
    else:
        tx = await uploader.upload(content, tags=tags)
    return tx.id


def _cmd_upload(args: argparse.Namespace) -> int:
    settings = get_settings()
    tx_id = asyncio.run(_upload(args, settings))
    print(f"{settings.gateway_url}/{tx_id}")
    return 0


def main(argv: list[str] | None = None) -> int:
    """Run the weave-ops command line."""
    parser = _build_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit as exc:  # pragma: no cover - controlled via tests
        exit_code = int(exc.code) if isinstance(exc.code, int) else 1
        return 0 if exit_code == 0 else 1

    listeners: list[logging.handlers.QueueListener] = []
    if args.verbose:
        listeners.append(
            configure_structured_logging(
                logging.getLogger("weave_ops"), level=logging.DEBUG
            )
        )

    try:
        if args.command == "address":
            return _cmd_address(args)
        return _cmd_upload(args)
    except (WeaveOpsError, OSError) as exc:
        print(str(exc) or type(exc).__name__, file=sys.stderr)
        return 1
    finally:
        shutdown_listeners(listeners)


if __name__ == "__main__":
    raise SystemExit(main())
