#!/usr/bin/env python3
"""
Upload Example

This example demonstrates:
- Loading a JWK wallet and printing its address
- Tagging and uploading a file through the configured gateway
- Waiting for the gateway to report the transaction

Usage: ARWEAVE_WALLET=wallet.json python upload_file.py image.png image/png
"""

import asyncio
import sys
from pathlib import Path

from weave_ops.settings import get_settings
from weave_ops.transaction import Tag
from weave_ops.uploader import Uploader


async def upload(path: Path, content_type: str) -> None:
    settings = get_settings()
    uploader = Uploader.from_settings(settings)
    if uploader.wallet is None:
        print("Set ARWEAVE_WALLET to the path of a JWK wallet file")
        return

    print("Uploading from wallet:", uploader.wallet.address)
    tx = await uploader.upload_and_confirm(
        path.read_bytes(),
        tags=[Tag("Content-Type", content_type)],
        timeout=600,
    )
    print(f"Uploaded: {settings.gateway_url}/{tx.id}")


if __name__ == "__main__":
    if len(sys.argv) != 3:
        print(__doc__)
        raise SystemExit(1)
    asyncio.run(upload(Path(sys.argv[1]), sys.argv[2]))
