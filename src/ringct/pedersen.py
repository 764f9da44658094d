"""
Pedersen commitments over secp256k1.

Provides:
- Commitment: immutable commitment point with homomorphic + and -
- commit / commit_random / add / verify_opening
- sum_commitments / is_balanced: value conservation with an explicit fee

Mathematical foundation:
    C = b·G + v·H
    where G is the secp256k1 base point and H = hash_to_point(G) is a NUMS
    point with unknown discrete log w.r.t. G.

    - Hiding: reveals nothing about v without b
    - Binding: cannot open to a different (v', b') pair
    - Homomorphic: C(v1, b1) + C(v2, b2) = C(v1 + v2, b1 + b2)

    A commitment to zero is the public key b·G, which is what lets a ring
    signature prove knowledge of C_in − C_out's blinding difference.

References:
    [Ped91] T.P. Pedersen, "Non-Interactive and Information-Theoretic Secure
            Verifiable Secret Sharing", CRYPTO '91, §3.
    [Max15] G. Maxwell, "Confidential Transactions", 2015.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from ringct.curve import Point, Scalar
from ringct.generators import G, H
from ringct.rng import RandomSource, random_scalar

MAX_VALUE = 2**64 - 1
"""Largest committable value (64-bit unsigned)."""


def _check_value(value: int) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"value must be an int, got {type(value).__name__}")
    if value < 0 or value > MAX_VALUE:
        raise ValueError(f"value must be in [0, 2^64), got {value}")


# ==============================================================================
# Commitment
# ==============================================================================


@dataclass(frozen=True)
class Commitment:
    """
    A Pedersen commitment C = b·G + v·H.

    Attributes:
        point: The commitment group element.
    """
    point: Point

    @classmethod
    def zero(cls) -> Commitment:
        """Commitment to value 0 with blinding 0 (the identity)."""
        return cls(Point.identity())

    def __add__(self, other: Commitment) -> Commitment:
        if not isinstance(other, Commitment):
            return NotImplemented
        return Commitment(self.point + other.point)

    def __sub__(self, other: Commitment) -> Commitment:
        if not isinstance(other, Commitment):
            return NotImplemented
        return Commitment(self.point - other.point)

    def to_bytes(self) -> bytes:
        return self.point.to_bytes()

    @classmethod
    def from_bytes(cls, data: bytes) -> Commitment:
        """Raises EncodingError on malformed bytes."""
        return cls(Point.from_bytes(data))

    def hex(self) -> str:
        return self.point.hex()

    @classmethod
    def from_hex(cls, hex_str: str) -> Commitment:
        return cls(Point.from_hex(hex_str))


# ==============================================================================
# Operations
# ==============================================================================


def commit(value: int, blinding: Scalar) -> Commitment:
    """
    Create a Pedersen Commitment C = b·G + v·H.

    Args:
        value: The committed value, in [0, 2^64).
        blinding: The blinding factor b.

    Returns:
        The commitment.

    Raises:
        ValueError: If value is out of range.
    """
    _check_value(value)
    return Commitment(G * blinding + H * value)


def commit_random(value: int, rng: RandomSource | None = None) -> tuple[Commitment, Scalar]:
    """Commit to ``value`` under a fresh uniformly random blinding factor."""
    blinding = random_scalar(rng)
    return commit(value, blinding), blinding


def add(c1: Commitment, c2: Commitment) -> Commitment:
    """Homomorphic sum: commitment to (v1 + v2, b1 + b2)."""
    return c1 + c2


def verify_opening(commitment: Commitment, value: int, blinding: Scalar) -> bool:
    """
    Check that ``commitment`` opens to (value, blinding).

    Returns:
        True if C == b·G + v·H, False otherwise (including out-of-range values).
    """
    try:
        return commitment == commit(value, blinding)
    except (TypeError, ValueError):
        return False


def sum_commitments(commitments: Iterable[Commitment]) -> Commitment:
    total = Commitment.zero()
    for c in commitments:
        total = total + c
    return total


def is_balanced(
    inputs: Iterable[Commitment],
    outputs: Iterable[Commitment],
    fee: int = 0,
) -> bool:
    """
    Value conservation check: Σ inputs == Σ outputs + fee·H.

    Holds exactly when input and output values balance (with the public fee)
    and the input blindings sum to the output blindings.
    """
    _check_value(fee)
    fee_commitment = Commitment(H * fee)
    return sum_commitments(inputs) == sum_commitments(outputs) + fee_commitment
