"""Transaction model: canonical signing message, signing and wire codec.

Binary fields are kept as raw bytes in memory and only turned into unpadded
base64url text on the wire. ``anchor`` and ``target`` are the exception: the
gateway hands them out already encoded, so they stay as base64url strings and
are decoded when the signing message is assembled. Tags are held as plain
text and encoded field by field on the wire.
"""

from __future__ import annotations

import hashlib
import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field, replace

from pydantic import BaseModel, ConfigDict, ValidationError

from weave_ops.encoding import (
    b64url_decode,
    b64url_encode,
    int_from_bytes,
    int_to_bytes,
)
from weave_ops.errors import DecodeError, EncodingError, InvalidSignatureError
from weave_ops.wallet import DEFAULT_PSS, PssParameters, Wallet

__all__ = [
    "Tag",
    "TagJSON",
    "Transaction",
    "TransactionJSON",
    "new_transaction",
]

LOGGER = logging.getLogger(__name__)


class TagJSON(BaseModel):
    """Wire form of a tag; both members are base64url encoded."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    name: str
    value: str


class TransactionJSON(BaseModel):
    """Wire form of a transaction as exchanged with a gateway.

    Field order follows the gateway's JSON layout. Empty strings are written
    out explicitly; ``target`` in particular is never omitted.
    """

    model_config = ConfigDict(extra="ignore", frozen=True)

    id: str = ""
    last_tx: str = ""
    owner: str = ""
    tags: list[TagJSON] = []
    target: str = ""
    quantity: str = ""
    data: str = ""
    reward: str = ""
    signature: str = ""


@dataclass(frozen=True, slots=True)
class Tag:
    """Name/value metadata pair attached to a transaction."""

    name: str
    value: str

    def to_wire(self) -> TagJSON:
        return TagJSON(
            name=b64url_encode(self.name.encode("utf-8")),
            value=b64url_encode(self.value.encode("utf-8")),
        )

    @classmethod
    def from_wire(cls, wire: TagJSON, index: int = 0) -> Tag:
        """Decode a wire tag into plain text.

        Raises:
            DecodeError: If either member is not base64url encoded UTF-8.
        """

        decoded: dict[str, str] = {}
        for member in ("name", "value"):
            raw = getattr(wire, member)
            try:
                decoded[member] = b64url_decode(raw).decode("utf-8")
            except (ValueError, UnicodeDecodeError) as exc:
                raise DecodeError(
                    f"tag {index} has a malformed {member}: {exc}"
                ) from exc
        return cls(name=decoded["name"], value=decoded["value"])


@dataclass(frozen=True, slots=True)
class Transaction:
    """A single data/value transfer unit.

    Instances are immutable. :meth:`sign` returns a new signed instance and
    leaves the unsigned one untouched.

    Attributes:
        anchor: base64url anchor reference (``last_tx`` on the wire).
        owner: RSA public modulus of the signing wallet.
        target: base64url recipient address, ``""`` for no recipient.
        quantity: Decimal string amount transferred to ``target``.
        payload: Raw data bytes.
        reward: Decimal string fee.
        tags: Ordered plain-text tags.
        identifier: SHA-256 of ``signature``; empty while unsigned.
        signature: RSA-PSS signature; empty while unsigned.
    """

    anchor: str
    owner: int
    target: str
    quantity: str
    payload: bytes
    reward: str
    tags: tuple[Tag, ...] = field(default=())
    identifier: bytes = b""
    signature: bytes = b""

    def __post_init__(self) -> None:
        object.__setattr__(self, "tags", tuple(self.tags))
        if bool(self.identifier) != bool(self.signature):
            raise ValueError(
                "transaction identifier and signature must be set together"
            )

    @property
    def id(self) -> str:
        """Return the identifier as base64url text (``""`` while unsigned)."""

        return b64url_encode(self.identifier)

    @property
    def data(self) -> str:
        """Return the payload as base64url text."""

        return b64url_encode(self.payload)

    @property
    def is_signed(self) -> bool:
        return bool(self.signature)

    def with_tags(self, *tags: Tag) -> Transaction:
        """Return an unsigned copy with ``tags`` appended in order.

        Raises:
            ValueError: If the transaction is already signed.
        """

        if self.is_signed:
            raise ValueError("cannot add tags to a signed transaction")
        return replace(self, tags=self.tags + tuple(tags))

    def signing_message(self) -> bytes:
        """Return the exact byte sequence covered by the signature.

        The message is the concatenation of the owner modulus bytes, the
        decoded target, the payload, the quantity and reward strings, the
        decoded anchor, and every tag's name immediately followed by its
        value. No separators are inserted.

        Raises:
            EncodingError: If ``anchor`` or ``target`` is not base64url.
        """

        try:
            anchor = b64url_decode(self.anchor)
        except ValueError as exc:
            raise EncodingError(f"anchor is not valid base64url: {exc}") from exc
        try:
            target = b64url_decode(self.target)
        except ValueError as exc:
            raise EncodingError(f"target is not valid base64url: {exc}") from exc

        tag_data = "".join(tag.name + tag.value for tag in self.tags)
        return b"".join(
            (
                int_to_bytes(self.owner),
                target,
                self.payload,
                self.quantity.encode("utf-8"),
                self.reward.encode("utf-8"),
                anchor,
                tag_data.encode("utf-8"),
            )
        )

    def sign(self, wallet: Wallet, params: PssParameters = DEFAULT_PSS) -> Transaction:
        """Sign the transaction and return the signed copy.

        The fresh signature is verified against the wallet before it is
        accepted, and the identifier is derived as SHA-256 of the signature.

        Raises:
            EncodingError: If the signing message cannot be assembled.
            MissingPrivateKeyError: If ``wallet`` is public-only.
            SigningError: If signing or the self-verification fails.
        """

        digest = hashlib.sha256(self.signing_message()).digest()
        signature = wallet.sign(digest, params)
        wallet.verify(digest, signature, params)
        identifier = hashlib.sha256(signature).digest()
        LOGGER.debug(
            "Transaction signed",
            extra={"wallet": wallet.address, "tx_id": b64url_encode(identifier)},
        )
        return replace(self, identifier=identifier, signature=signature)

    def verify_signature(self, params: PssParameters = DEFAULT_PSS) -> None:
        """Check the signature and identifier against the transaction owner.

        Raises:
            InvalidSignatureError: If the transaction is unsigned, the
                identifier does not match the signature, or the signature does
                not verify for ``owner``.
        """

        if not self.is_signed:
            raise InvalidSignatureError("transaction is not signed")
        if hashlib.sha256(self.signature).digest() != self.identifier:
            raise InvalidSignatureError(
                f"identifier {self.id} does not match the signature"
            )
        digest = hashlib.sha256(self.signing_message()).digest()
        Wallet.from_owner(self.owner).verify(digest, self.signature, params)

    def to_wire(self) -> TransactionJSON:
        """Return the wire model with every binary field base64url encoded."""

        return TransactionJSON(
            id=b64url_encode(self.identifier),
            last_tx=self.anchor,
            owner=b64url_encode(int_to_bytes(self.owner)),
            tags=[tag.to_wire() for tag in self.tags],
            target=self.target,
            quantity=self.quantity,
            data=b64url_encode(self.payload),
            reward=self.reward,
            signature=b64url_encode(self.signature),
        )

    def to_json(self) -> bytes:
        """Serialize to the gateway JSON body."""

        return self.to_wire().model_dump_json().encode("utf-8")

    @classmethod
    def from_wire(cls, wire: TransactionJSON | Mapping[str, object]) -> Transaction:
        """Rebuild a transaction from its wire form.

        Raises:
            DecodeError: If a base64url field or tag is malformed, or the
                identifier/signature pair is inconsistent.
        """

        if not isinstance(wire, TransactionJSON):
            try:
                wire = TransactionJSON.model_validate(dict(wire))
            except ValidationError as exc:
                raise DecodeError(f"invalid transaction document: {exc}") from exc

        decoded: dict[str, bytes] = {}
        for member in ("id", "last_tx", "owner", "target", "data", "signature"):
            try:
                decoded[member] = b64url_decode(getattr(wire, member))
            except ValueError as exc:
                raise DecodeError(f"field {member!r} is malformed: {exc}") from exc

        tags = tuple(Tag.from_wire(tag, index) for index, tag in enumerate(wire.tags))
        try:
            return cls(
                anchor=wire.last_tx,
                owner=int_from_bytes(decoded["owner"]),
                target=wire.target,
                quantity=wire.quantity,
                payload=decoded["data"],
                reward=wire.reward,
                tags=tags,
                identifier=decoded["id"],
                signature=decoded["signature"],
            )
        except ValueError as exc:
            raise DecodeError(str(exc)) from exc

    @classmethod
    def from_json(cls, raw: str | bytes) -> Transaction:
        """Parse a gateway JSON body into a transaction.

        Raises:
            DecodeError: If the body is not a valid transaction document.
        """

        try:
            payload = json.loads(raw)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise DecodeError(f"transaction body is not JSON: {exc}") from exc
        if not isinstance(payload, dict):
            raise DecodeError("transaction body must be a JSON object")
        return cls.from_wire(payload)


def new_transaction(
    anchor: str,
    owner: int,
    quantity: str,
    target: str,
    payload: bytes,
    reward: str,
) -> Transaction:
    """Build an unsigned transaction with no tags.

    ``quantity`` and ``reward`` are passed through untouched; they are opaque
    decimal strings supplied by the caller or the gateway.
    """

    return Transaction(
        anchor=anchor,
        owner=owner,
        target=target,
        quantity=quantity,
        payload=bytes(payload),
        reward=reward,
    )
