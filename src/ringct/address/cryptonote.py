"""
CryptoNote key pairs: a view key to scan, a spend key to spend.

    private (a, b)  ->  public (A = a·G, B = b·G)

Anyone holding only ``a`` and B (CryptoNotePrivateView) can recognize and
open incoming outputs but cannot derive their one-time private keys.
"""

from __future__ import annotations

from dataclasses import dataclass

from ringct.address.ecdh import derive_private_key
from ringct.address.output import OwnedKey
from ringct.curve import Point, Scalar
from ringct.encoding import Reader, Writer
from ringct.generators import G
from ringct.hashes import CRYPTONOTE_SPEND, CRYPTONOTE_VIEW, h_scalar
from ringct.rng import RandomSource, random_scalar


@dataclass(frozen=True)
class CryptoNotePublic:
    """A primary address (A, B)."""
    view: Point
    spend: Point

    is_subaddress = False

    def to_bytes(self) -> bytes:
        return Writer().point(self.view).point(self.spend).getvalue()

    @classmethod
    def from_bytes(cls, data: bytes) -> CryptoNotePublic:
        r = Reader(data)
        address = cls(r.point(), r.point())
        r.finish()
        return address


class CryptoNotePrivateView:
    """View-only wallet keys: private view key a and public spend key B."""

    def __init__(self, view: Scalar, spend: Point) -> None:
        self.view = view
        self.spend = spend

    @property
    def view_private(self) -> Scalar:
        return self.view

    def to_public(self) -> CryptoNotePublic:
        return CryptoNotePublic(G * self.view, self.spend)

    def recognize(self, base_spend: Point, shared_secret: Scalar) -> OwnedKey | None:
        if base_spend != self.spend:
            return None
        return OwnedKey(private_key=None)

    def zeroize(self) -> None:
        self.view.zeroize()


class CryptoNotePrivate:
    """Full wallet keys: private view key a and private spend key b."""

    def __init__(self, view: Scalar, spend: Scalar) -> None:
        if view.is_zero() or spend.is_zero():
            raise ValueError("Private keys must be non-zero")
        self.view = view
        self.spend = spend
        self._spend_public = G * spend

    @classmethod
    def generate(cls, rng: RandomSource | None = None) -> CryptoNotePrivate:
        return cls(random_scalar(rng), random_scalar(rng))

    @classmethod
    def from_seed(cls, seed: bytes) -> CryptoNotePrivate:
        """Deterministically derive both keys from one seed."""
        return cls(h_scalar(CRYPTONOTE_VIEW, seed), h_scalar(CRYPTONOTE_SPEND, seed))

    @property
    def view_private(self) -> Scalar:
        return self.view

    def to_public(self) -> CryptoNotePublic:
        return CryptoNotePublic(G * self.view, self._spend_public)

    def to_view_only(self) -> CryptoNotePrivateView:
        return CryptoNotePrivateView(self.view.copy(), self._spend_public)

    def recognize(self, base_spend: Point, shared_secret: Scalar) -> OwnedKey | None:
        if base_spend != self._spend_public:
            return None
        return OwnedKey(private_key=derive_private_key(self.spend, shared_secret))

    def zeroize(self) -> None:
        self.view.zeroize()
        self.spend.zeroize()
