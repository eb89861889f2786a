"""Minimal RSA JSON Web Key decoder.

Only the RSA subset of RFC 7517/7518 is understood: the modulus ``n``, the
public exponent ``e`` and, when present, the private exponent ``d`` together
with the CRT parameters ``p``, ``q``, ``dp``, ``dq`` and ``qi``. Every value
is an unpadded base64url big-endian integer. Other members (``kid``, ``alg``,
``ext`` ...) are ignored.
"""

from __future__ import annotations

import json
from collections.abc import Mapping

from cryptography.hazmat.primitives.asymmetric import rsa
from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from weave_ops.encoding import b64url_decode, int_from_bytes
from weave_ops.errors import KeyFormatError

__all__ = ["RsaJwk", "parse_rsa_jwk"]

_PRIVATE_CRT_FIELDS = ("p", "q", "dp", "dq", "qi")


class RsaJwk(BaseModel):
    """Decoded RSA key parameters from a JSON Web Key document."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    kty: str = "RSA"
    n: int
    e: int
    d: int | None = None
    p: int | None = None
    q: int | None = None
    dp: int | None = None
    dq: int | None = None
    qi: int | None = None

    @field_validator("kty")
    @classmethod
    def _require_rsa(cls, value: str) -> str:
        if value != "RSA":
            raise ValueError(f"unsupported key type {value!r}, expected 'RSA'")
        return value

    @field_validator("n", "e", "d", "p", "q", "dp", "dq", "qi", mode="before")
    @classmethod
    def _decode_integer(cls, value: object) -> int | None:
        """Decode a base64url member into an unsigned integer."""

        if value is None:
            return None
        if not isinstance(value, str):
            raise ValueError("key parameters must be base64url strings")
        raw = b64url_decode(value)
        if not raw:
            raise ValueError("key parameters must not be empty")
        return int_from_bytes(raw)

    @property
    def has_private_key(self) -> bool:
        """Return whether the document carries the private exponent."""

        return self.d is not None

    def public_numbers(self) -> rsa.RSAPublicNumbers:
        """Return the public half as :class:`cryptography` numbers."""

        return rsa.RSAPublicNumbers(e=self.e, n=self.n)

    def private_numbers(self) -> rsa.RSAPrivateNumbers:
        """Return the private key numbers, deriving missing CRT parameters.

        Raises:
            KeyFormatError: If the document has no private exponent or the
                primes cannot be recovered from it.
        """

        if self.d is None:
            raise KeyFormatError("JWK document has no private exponent 'd'")

        p, q = self.p, self.q
        if p is None or q is None:
            try:
                p, q = rsa.rsa_recover_prime_factors(self.n, self.e, self.d)
            except ValueError as exc:
                raise KeyFormatError(
                    f"unable to recover RSA primes from key: {exc}"
                ) from exc

        dp = self.dp if self.dp is not None else rsa.rsa_crt_dmp1(self.d, p)
        dq = self.dq if self.dq is not None else rsa.rsa_crt_dmq1(self.d, q)
        qi = self.qi if self.qi is not None else rsa.rsa_crt_iqmp(p, q)
        return rsa.RSAPrivateNumbers(
            p=p,
            q=q,
            d=self.d,
            dmp1=dp,
            dmq1=dq,
            iqmp=qi,
            public_numbers=self.public_numbers(),
        )


def parse_rsa_jwk(document: str | bytes | Mapping[str, object]) -> RsaJwk:
    """Parse a JSON Web Key document into :class:`RsaJwk`.

    Args:
        document: Raw JSON text/bytes, or an already decoded mapping.

    Returns:
        The decoded key parameters.

    Raises:
        KeyFormatError: If the document is not JSON, not an object, or is
            missing the members needed to rebuild at least the public key.
    """

    if isinstance(document, (str, bytes, bytearray)):
        try:
            payload = json.loads(document)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise KeyFormatError(f"unable to parse JWK document: {exc}") from exc
    else:
        payload = document

    if not isinstance(payload, Mapping):
        raise KeyFormatError("JWK document must be a JSON object")

    try:
        return RsaJwk.model_validate(dict(payload))
    except ValidationError as exc:
        raise KeyFormatError(f"invalid RSA JWK document: {exc}") from exc
