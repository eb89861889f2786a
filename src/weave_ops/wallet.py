"""RSA wallet key material, address derivation and RSA-PSS signing."""

from __future__ import annotations

import hashlib
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Final

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import padding, rsa, utils

from weave_ops.encoding import b64url_encode, int_to_bytes
from weave_ops.errors import (
    InvalidSignatureError,
    KeyFormatError,
    MissingPrivateKeyError,
    SigningError,
)
from weave_ops.jwk import parse_rsa_jwk

__all__ = ["DEFAULT_PSS", "OWNER_PUBLIC_EXPONENT", "PssParameters", "Wallet"]

LOGGER = logging.getLogger(__name__)

# Every account on the network uses this public exponent; only the modulus
# travels on the wire as the transaction owner.
OWNER_PUBLIC_EXPONENT: Final[int] = 65537


@dataclass(frozen=True, slots=True)
class PssParameters:
    """Immutable RSA-PSS configuration shared by signing and verification.

    The salt length defaults to the maximum the key size allows. Signatures
    made with a different salt length do not verify under this configuration.
    """

    salt_length: int | padding._MaxLength = padding.PSS.MAX_LENGTH

    def to_padding(self) -> padding.PSS:
        """Build the PSS padding object (MGF1 with SHA-256)."""

        return padding.PSS(
            mgf=padding.MGF1(hashes.SHA256()),
            salt_length=self.salt_length,
        )


DEFAULT_PSS: Final[PssParameters] = PssParameters()


class Wallet:
    """Read-only RSA key pair identifying an account on the network.

    Attributes:
        address: base64url SHA-256 digest of the modulus bytes.
        public_key: base64url modulus, the wire form of a transaction owner.
    """

    __slots__ = ("_public", "_private", "_owner", "address", "public_key")

    def __init__(
        self,
        public_key: rsa.RSAPublicKey,
        private_key: rsa.RSAPrivateKey | None = None,
    ) -> None:
        self._public = public_key
        self._private = private_key
        self._owner = public_key.public_numbers().n
        modulus = int_to_bytes(self._owner)
        self.address = b64url_encode(hashlib.sha256(modulus).digest())
        self.public_key = b64url_encode(modulus)

    @classmethod
    def from_jwk(cls, document: str | bytes | Mapping[str, object]) -> Wallet:
        """Load a wallet from a JSON Web Key document.

        Raises:
            KeyFormatError: If the document does not describe an RSA key.
        """

        jwk = parse_rsa_jwk(document)
        try:
            public = jwk.public_numbers().public_key()
            private = (
                jwk.private_numbers().private_key() if jwk.has_private_key else None
            )
        except ValueError as exc:
            raise KeyFormatError(f"inconsistent RSA key parameters: {exc}") from exc
        wallet = cls(public, private)
        LOGGER.debug(
            "Wallet loaded",
            extra={"wallet": wallet.address, "private": wallet.has_private_key},
        )
        return wallet

    @classmethod
    def from_file(cls, path: str | Path) -> Wallet:
        """Read and load a JWK wallet file.

        Raises:
            KeyFormatError: If the file cannot be read or parsed.
        """

        wallet_path = Path(path)
        try:
            content = wallet_path.read_bytes()
        except OSError as exc:
            raise KeyFormatError(
                f"unable to read wallet file {str(wallet_path)!r}: {exc}"
            ) from exc
        return cls.from_jwk(content)

    @classmethod
    def from_owner(cls, owner: int) -> Wallet:
        """Build a verify-only wallet from a transaction owner modulus."""

        try:
            public = rsa.RSAPublicNumbers(e=OWNER_PUBLIC_EXPONENT, n=owner).public_key()
        except ValueError as exc:
            raise KeyFormatError(f"invalid owner modulus: {exc}") from exc
        return cls(public)

    @property
    def owner(self) -> int:
        """Return the RSA public modulus."""

        return self._owner

    @property
    def has_private_key(self) -> bool:
        return self._private is not None

    def sign(self, digest: bytes, params: PssParameters = DEFAULT_PSS) -> bytes:
        """Sign a SHA-256 ``digest`` with RSA-PSS.

        Raises:
            MissingPrivateKeyError: If the wallet was loaded without ``d``.
            SigningError: If the cryptographic primitive fails.
        """

        if self._private is None:
            raise MissingPrivateKeyError(
                f"wallet {self.address} has no private key material"
            )
        try:
            return self._private.sign(
                digest, params.to_padding(), utils.Prehashed(hashes.SHA256())
            )
        except (ValueError, TypeError) as exc:
            raise SigningError(f"RSA-PSS signing failed: {exc}") from exc

    def verify(
        self, digest: bytes, signature: bytes, params: PssParameters = DEFAULT_PSS
    ) -> None:
        """Verify an RSA-PSS ``signature`` over a SHA-256 ``digest``.

        Raises:
            InvalidSignatureError: If the signature does not verify.
        """

        try:
            self._public.verify(
                signature, digest, params.to_padding(), utils.Prehashed(hashes.SHA256())
            )
        except (InvalidSignature, ValueError) as exc:
            raise InvalidSignatureError(
                f"signature does not verify for wallet {self.address}"
            ) from exc

    def __repr__(self) -> str:
        kind = "private" if self.has_private_key else "public"
        return f"Wallet(address={self.address!r}, key={kind})"
