"""
Enotes, enote secrets, rings and key images.

An enote is a spendable output: an owner public key P = x·G plus a
commitment C = b·G + v·H. A ring is the ordered list of enotes a spender
hides among.

Key image:
    I = x·Hp(P),  Hp(P) = h_point(KEY_IMAGE, encode(P))

    Deterministic per private key, so two spends of the same enote share I.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass

from ringct.curve import Point, Scalar
from ringct.encoding import Reader, Writer
from ringct.generators import G
from ringct.hashes import KEY_IMAGE, h_point
from ringct.pedersen import Commitment, commit

ViewTag = int
"""One-byte scan hint in [0, 255]."""


def key_image_generator(public_key: Point) -> Point:
    """Hp(P): the base point a key image is taken over."""
    return h_point(KEY_IMAGE, public_key.to_bytes())


def key_image(private_key: Scalar) -> Point:
    """I = x·Hp(x·G)."""
    return key_image_generator(G * private_key) * private_key


# ==============================================================================
# Enote
# ==============================================================================


@dataclass(frozen=True)
class Enote:
    """
    A public (owner, commitment) pair as it appears in a ring.

    Attributes:
        owner: One-time public key P.
        commitment: Amount commitment C.
    """
    owner: Point
    commitment: Commitment

    def to_bytes(self) -> bytes:
        return self.owner.to_bytes() + self.commitment.to_bytes()

    @classmethod
    def from_bytes(cls, data: bytes) -> Enote:
        reader = Reader(data)
        enote = cls.read(reader)
        reader.finish()
        return enote

    @classmethod
    def read(cls, reader: Reader) -> Enote:
        return cls(reader.point(), Commitment(reader.point()))


@dataclass
class EnoteKeys:
    """
    The secrets that open an enote.

    Attributes:
        owner: Private key x with P = x·G.
        value: Committed amount.
        blinding: Commitment blinding b.
    """
    owner: Scalar
    value: int
    blinding: Scalar

    def to_enote(self) -> Enote:
        return Enote(G * self.owner, commit(self.value, self.blinding))

    def key_image(self) -> Point:
        return key_image(self.owner)

    def zeroize(self) -> None:
        self.owner.zeroize()
        self.blinding.zeroize()
        self.value = 0


# ==============================================================================
# Ring
# ==============================================================================


class Ring:
    """
    An ordered list of enotes.

    Canonical order is ascending by encoding with duplicates removed; see
    ``sort`` and ``is_sorted``.
    """

    def __init__(self, enotes: Iterable[Enote] = ()) -> None:
        self._enotes: list[Enote] = list(enotes)

    def push(self, enote: Enote) -> None:
        self._enotes.append(enote)

    def insert(self, index: int, enote: Enote) -> None:
        self._enotes.insert(index, enote)

    def sort(self) -> None:
        """Sort by (owner || commitment) encoding and drop duplicates."""
        unique = {e.to_bytes(): e for e in self._enotes}
        self._enotes = [unique[k] for k in sorted(unique)]

    def is_sorted(self) -> bool:
        """True if strictly ascending by encoding (which also rules out duplicates)."""
        keys = [e.to_bytes() for e in self._enotes]
        return all(a < b for a, b in zip(keys, keys[1:]))

    def index(self, enote: Enote) -> int:
        return self._enotes.index(enote)

    @property
    def owners(self) -> list[Point]:
        return [e.owner for e in self._enotes]

    @property
    def commitments(self) -> list[Commitment]:
        return [e.commitment for e in self._enotes]

    def __len__(self) -> int:
        return len(self._enotes)

    def __getitem__(self, index: int) -> Enote:
        return self._enotes[index]

    def __iter__(self) -> Iterator[Enote]:
        return iter(self._enotes)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Ring):
            return NotImplemented
        return self._enotes == other._enotes

    def __repr__(self) -> str:
        return f"Ring(size={len(self._enotes)})"

    def to_bytes(self) -> bytes:
        w = Writer().u32(len(self._enotes))
        for e in self._enotes:
            w.raw(e.to_bytes())
        return w.getvalue()

    @classmethod
    def from_bytes(cls, data: bytes) -> Ring:
        reader = Reader(data)
        ring = cls(Enote.read(reader) for _ in range(reader.count()))
        reader.finish()
        return ring


