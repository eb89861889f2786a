"""Exception hierarchy shared by the signing, encoding and upload layers."""

from __future__ import annotations

__all__ = [
    "DecodeError",
    "EncodingError",
    "InvalidSignatureError",
    "KeyFormatError",
    "MissingPrivateKeyError",
    "NetworkError",
    "NoWalletError",
    "SigningError",
    "WeaveOpsError",
]


class WeaveOpsError(Exception):
    """Base class for all errors raised by :mod:`weave_ops`."""


class KeyFormatError(WeaveOpsError, ValueError):
    """Raised when a JSON Web Key document cannot be turned into an RSA key."""


class MissingPrivateKeyError(WeaveOpsError):
    """Raised when signing is attempted with a public-only wallet."""


class SigningError(WeaveOpsError):
    """Raised when the RSA-PSS primitive fails to produce a signature."""


class InvalidSignatureError(SigningError):
    """Raised when a signature does not verify against the wallet public key."""


class EncodingError(WeaveOpsError, ValueError):
    """Raised when a field expected in base64url form cannot be decoded while formatting."""


class DecodeError(WeaveOpsError, ValueError):
    """Raised when a wire representation contains malformed base64url data."""


class NetworkError(WeaveOpsError):
    """Raised for transport or protocol failures talking to a gateway."""


class NoWalletError(WeaveOpsError):
    """Raised when an upload is attempted without private key material."""
