"""
Helpers shared by MLSAG and CLSAG.
"""

from __future__ import annotations

from ringct.config import RingCTConfig
from ringct.curve import Point
from ringct.errors import SigningError
from ringct.pedersen import Commitment
from ringct.types import Ring, key_image, key_image_generator

__all__ = [
    "check_signing_ring",
    "key_image",
    "key_image_generator",
    "rows_sorted",
    "shift_commitments",
]


def shift_commitments(ring: Ring, pseudo_out: Commitment) -> list[Point]:
    """C_i − C' for every ring member: commitments to zero exactly where values match."""
    return [(e.commitment - pseudo_out).point for e in ring]


def rows_sorted(rows: list[list[Point]]) -> bool:
    """True if rows are strictly ascending by their concatenated encodings."""
    keys = [b"".join(p.to_bytes() for p in row) for row in rows]
    return all(a < b for a, b in zip(keys, keys[1:]))


def check_signing_ring(size: int, secret_index: int, sorted_ok: bool, config: RingCTConfig) -> None:
    """
    Validate ring shape before signing.

    Raises:
        ValueError: If the ring is empty.
        SigningError: If the index is out of bounds, the ring is below the
            configured minimum, or unsorted when sorting is required.
    """
    if size == 0:
        raise ValueError("Cannot sign with an empty ring")
    if not isinstance(secret_index, int) or not 0 <= secret_index < size:
        raise SigningError(f"Secret index {secret_index} out of bounds for ring of size {size}")
    if size < config.min_ring_size:
        raise SigningError(f"Ring size {size} below minimum {config.min_ring_size}")
    if config.require_sorted_rings and not sorted_ok:
        raise SigningError("Ring is not in canonical order")
