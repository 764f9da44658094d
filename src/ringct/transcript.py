"""
Fiat–Shamir transcript.

A running Blake2b state that absorbs labelled, length-prefixed messages and
squeezes challenge scalars. Each challenge is fed back into the state, so
successive challenges depend on every earlier one.

Typical use:
    tr = Transcript(MLSAG_TRANSCRIPT)
    tr.append_message(b"msg", message)
    tr.append_point(b"I", key_image)
    c = tr.challenge_scalar(b"c")
"""

from __future__ import annotations

import hashlib
import struct

from ringct.curve import SECP256K1_N, Point, Scalar


class Transcript:
    """Domain-separated Fiat–Shamir transcript."""

    def __init__(self, domain: bytes) -> None:
        self._state = hashlib.blake2b(digest_size=64)
        self._absorb(b"domain", domain)

    def _absorb(self, label: bytes, data: bytes) -> None:
        self._state.update(struct.pack(">I", len(label)))
        self._state.update(label)
        self._state.update(struct.pack(">Q", len(data)))
        self._state.update(data)

    def append_message(self, label: bytes, data: bytes) -> None:
        self._absorb(label, bytes(data))

    def append_u64(self, label: bytes, value: int) -> None:
        self._absorb(label, struct.pack(">Q", value))

    def append_point(self, label: bytes, point: Point) -> None:
        self._absorb(label, point.to_bytes())

    def append_points(self, label: bytes, points: list[Point]) -> None:
        self.append_u64(label + b".len", len(points))
        for point in points:
            self._absorb(label, point.to_bytes())

    def append_scalar(self, label: bytes, scalar: Scalar) -> None:
        self._absorb(label, scalar.to_bytes())

    def challenge_scalar(self, label: bytes) -> Scalar:
        """
        Squeeze a non-zero challenge scalar.

        A zero output (probability ~2^-256) is rejected by re-squeezing with
        the state advanced, so callers may invert challenges freely.
        """
        while True:
            self._absorb(b"challenge", label)
            digest = self._state.copy().digest()
            self._absorb(b"feedback", digest)
            value = int.from_bytes(digest, "big") % SECP256K1_N
            if value:
                return Scalar(value)

    def copy(self) -> Transcript:
        clone = Transcript.__new__(Transcript)
        clone._state = self._state.copy()
        return clone
