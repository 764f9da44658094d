"""
Output records exchanged between ``send`` and ``receive``.
"""

from __future__ import annotations

from dataclasses import dataclass

from ringct.curve import Point, Scalar
from ringct.encoding import Reader, Writer
from ringct.errors import EncodingError
from ringct.pedersen import Commitment
from ringct.types import EnoteKeys, ViewTag

Coordinates = tuple[int, int]
"""Subaddress index as (major, minor)."""


@dataclass(frozen=True)
class Output:
    """
    Everything a receiver needs to recognize and open an output.

    Attributes:
        public_key: One-time owner key P.
        transaction_key: R = r·G (or r·D for a subaddress).
        view_tag: One-byte scan hint.
        encrypted_amount: 8-byte masked amount.
        commitment: C = mask·G + amount·H.
    """
    public_key: Point
    transaction_key: Point
    view_tag: ViewTag
    encrypted_amount: bytes
    commitment: Commitment

    def to_bytes(self) -> bytes:
        w = Writer().point(self.public_key).point(self.transaction_key)
        w.u8(self.view_tag).raw(self.encrypted_amount).point(self.commitment.point)
        return w.getvalue()

    @classmethod
    def from_bytes(cls, data: bytes) -> Output:
        r = Reader(data)
        out = cls(r.point(), r.point(), r.u8(), r.raw(8), Commitment(r.point()))
        r.finish()
        if out.public_key.is_identity() or out.transaction_key.is_identity():
            raise EncodingError("Output keys must not be the identity")
        return out


@dataclass
class OwnedKey:
    """What a key set learns when it recognizes an output's spend key."""
    private_key: Scalar | None
    coordinates: Coordinates | None = None


@dataclass
class ReceivedOutput:
    """
    An output recognized and opened by ``receive``.

    Attributes:
        index: Position in the scanned list.
        output: The output itself.
        value: Decrypted amount.
        blinding: Commitment blinding.
        private_key: One-time private key, None for view-only keys.
        coordinates: Subaddress index, None for a primary address.
    """
    index: int
    output: Output
    value: int
    blinding: Scalar
    private_key: Scalar | None
    coordinates: Coordinates | None = None

    def enote_keys(self) -> EnoteKeys:
        """Secrets needed to spend this output in a ring signature."""
        if self.private_key is None:
            raise ValueError("View-only keys cannot spend")
        return EnoteKeys(self.private_key, self.value, self.blinding)
