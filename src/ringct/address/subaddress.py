"""
Subaddresses: many unlinkable receiving addresses from one key pair.

Mathematical foundation:
    Master keys (a, b), B = b·G. For index (x, y):
        m = Hs(a || x || y)
        D = B + m·G                 subaddress spend key
        C = a·D                     subaddress view key
        d = b + m                   subaddress private spend key

    Sending to (C, D) uses R = r·D and shared secret Hs(r·C). The receiver
    computes Hs(a·R) = Hs(a·r·D) = Hs(r·C), strips s·G from the one-time key
    to get D back, and looks D up in a table of the indices it handed out.

    Without ``a`` the points D for different indices are independent
    hash-derived offsets of B, so outside observers cannot link them.
"""

from __future__ import annotations

import logging
import struct
from dataclasses import dataclass

from ringct.address.output import Coordinates, OwnedKey
from ringct.curve import Point, Scalar
from ringct.encoding import Reader, Writer
from ringct.errors import SubaddressError
from ringct.generators import G
from ringct.hashes import SUBADDRESS, h_scalar

logger = logging.getLogger("ringct.address")

MAX_INDEX = 2**32 - 1


def subaddress_scalar(view_private: Scalar, major: int, minor: int) -> Scalar:
    """m = Hs(a || major || minor)."""
    if not (0 <= major <= MAX_INDEX and 0 <= minor <= MAX_INDEX):
        raise ValueError(f"Subaddress index out of range: ({major}, {minor})")
    return h_scalar(SUBADDRESS, view_private.to_bytes(), struct.pack(">II", major, minor))


@dataclass(frozen=True)
class SubaddressPublic:
    """A subaddress (C, D)."""
    view: Point
    spend: Point

    is_subaddress = True

    def to_bytes(self) -> bytes:
        return Writer().point(self.view).point(self.spend).getvalue()

    @classmethod
    def from_bytes(cls, data: bytes) -> SubaddressPublic:
        r = Reader(data)
        address = cls(r.point(), r.point())
        r.finish()
        return address


class _SubaddressTable:
    """Lookup table from subaddress spend key D to its coordinates."""

    view: Scalar
    spend_public: Point

    def _init_table(self) -> None:
        self._table: dict[bytes, Coordinates] = {}
        self._coordinates: set[Coordinates] = set()

    def spend_key_at(self, major: int, minor: int) -> Point:
        return self.spend_public + G * subaddress_scalar(self.view, major, minor)

    def get_subaddress(self, major: int, minor: int) -> SubaddressPublic:
        """
        The subaddress (C, D) at a registered index.

        Only registered indices are handed out, so every address given away
        is one that ``receive`` recognizes.

        Raises:
            SubaddressError: If the table is empty or (major, minor) was never
                registered with ``init`` / ``init_coordinates``.
        """
        self.check_initialized()
        if (major, minor) not in self._coordinates:
            raise SubaddressError(f"Coordinates ({major}, {minor}) are not initialized")
        D = self.spend_key_at(major, minor)
        return SubaddressPublic(view=D * self.view, spend=D)

    def init_coordinates(self, major: int, minor: int) -> None:
        """Register one index so outputs sent to it are recognized."""
        self._table[self.spend_key_at(major, minor).to_bytes()] = (major, minor)
        self._coordinates.add((major, minor))

    def init(self, majors: int, minors: int) -> None:
        """Register every index in [0, majors) × [0, minors)."""
        for x in range(majors):
            for y in range(minors):
                self.init_coordinates(x, y)
        logger.debug(f"Subaddress table holds {len(self._table)} entries")

    def export_coordinates(self) -> list[Coordinates]:
        return sorted(self._coordinates)

    def import_coordinates(self, coordinates: list[Coordinates]) -> None:
        for major, minor in coordinates:
            self.init_coordinates(major, minor)

    @property
    def is_initialized(self) -> bool:
        return bool(self._table)

    def check_initialized(self) -> None:
        """Raises SubaddressError if no index has been registered yet."""
        if not self._table:
            raise SubaddressError("Subaddress table is not initialized")

    def _lookup(self, spend_key: Point) -> Coordinates | None:
        self.check_initialized()
        return self._table.get(spend_key.to_bytes())

    def recover_coordinates(self, one_time_key: Point, shared_secret: Scalar) -> Coordinates:
        """
        Find which subaddress received an output: look up P − s·G.

        Raises:
            SubaddressError: If the table is empty or the key is unknown.
        """
        coordinates = self._lookup(one_time_key - G * shared_secret)
        if coordinates is None:
            raise SubaddressError("Spend key not found in subaddress table")
        return coordinates


class MasterPrivateView(_SubaddressTable):
    """View-only master keys: private view key a and public spend key B."""

    def __init__(self, view: Scalar, spend: Point) -> None:
        self.view = view
        self.spend_public = spend
        self._init_table()

    @property
    def view_private(self) -> Scalar:
        return self.view

    def recognize(self, base_spend: Point, shared_secret: Scalar) -> OwnedKey | None:
        coordinates = self._lookup(base_spend)
        if coordinates is None:
            return None
        return OwnedKey(private_key=None, coordinates=coordinates)

    def zeroize(self) -> None:
        self.view.zeroize()


class MasterPrivateKeys(_SubaddressTable):
    """Full master keys: private view key a and private spend key b."""

    def __init__(self, view: Scalar, spend: Scalar) -> None:
        if view.is_zero() or spend.is_zero():
            raise ValueError("Private keys must be non-zero")
        self.view = view
        self.spend = spend
        self.spend_public = G * spend
        self._init_table()

    @property
    def view_private(self) -> Scalar:
        return self.view

    def to_view_only(self) -> MasterPrivateView:
        view_only = MasterPrivateView(self.view.copy(), self.spend_public)
        view_only.import_coordinates(self.export_coordinates())
        return view_only

    def subaddress_spend_private(self, major: int, minor: int) -> Scalar:
        """d = b + m."""
        return self.spend + subaddress_scalar(self.view, major, minor)

    def recognize(self, base_spend: Point, shared_secret: Scalar) -> OwnedKey | None:
        coordinates = self._lookup(base_spend)
        if coordinates is None:
            return None
        private_key = self.subaddress_spend_private(*coordinates) + shared_secret
        return OwnedKey(private_key=private_key, coordinates=coordinates)

    def zeroize(self) -> None:
        self.view.zeroize()
        self.spend.zeroize()
