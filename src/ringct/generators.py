"""
Fixed generators shared by every engine.

Provides:
- G: the secp256k1 base point (blinding generator, public-key base)
- H: the NUMS value generator H = hash_to_point(PEDERSEN_H || G)
- GeneratorSet: the Bulletproofs+ vectors Gi, Hi, grown on demand

Architecture:
    Each vector element is derived independently from its label and index:
        Gi[i] = h_point(GENERATOR_VECTOR, label || "G" || i)
        Hi[i] = h_point(GENERATOR_VECTOR, label || "H" || i)

    so a set can be extended to any length without changing the elements
    already handed out. Sets only ever grow, under a lock; the lists returned
    to callers are never mutated afterwards. DEFAULT_GENERATORS is the
    process-wide instance; every consumer accepts an explicit set instead.

References:
    [BBB+18] B. Bünz et al., "Bulletproofs", IEEE S&P 2018, §4.3
             (independent generator vectors).
"""

from __future__ import annotations

import struct
import threading
from functools import lru_cache

from ringct import curve
from ringct.curve import Point, as_generator
from ringct.hashes import GENERATOR_VECTOR, PEDERSEN_H, h_point

# ==============================================================================
# Commitment generators
# ==============================================================================

G: Point = curve.G
"""Blinding generator and key base."""

H: Point = as_generator(h_point(PEDERSEN_H, curve.G.to_bytes()))
"""Value generator with no known discrete log relative to G."""


# ==============================================================================
# Vector generators
# ==============================================================================


@lru_cache(maxsize=None)
def _vector_point(label: bytes, kind: bytes, index: int) -> Point:
    return h_point(GENERATOR_VECTOR, label, kind, struct.pack(">I", index))


class GeneratorSet:
    """
    Lazily extended Bulletproofs+ generator vectors.

    Args:
        label: Distinguishes independent generator families.
    """

    def __init__(self, label: bytes = b"default") -> None:
        self.label = label
        self._gi: list[Point] = []
        self._hi: list[Point] = []
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._gi)

    def vectors(self, n: int) -> tuple[list[Point], list[Point]]:
        """Return the first ``n`` elements of Gi and Hi, deriving any missing ones."""
        if n < 0:
            raise ValueError(f"Generator count must be non-negative, got {n}")
        if len(self._gi) < n:
            with self._lock:
                # Rebuild then swap, so readers never see a half-grown list.
                gi = list(self._gi)
                hi = list(self._hi)
                for i in range(len(gi), n):
                    gi.append(_vector_point(self.label, b"G", i))
                    hi.append(_vector_point(self.label, b"H", i))
                if len(gi) > len(self._gi):
                    self._gi, self._hi = gi, hi
        return self._gi[:n], self._hi[:n]


DEFAULT_GENERATORS = GeneratorSet()
