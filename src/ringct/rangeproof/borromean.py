"""
Borromean rangeproofs (legacy).

Each value is split into bits. Bit i gets its own commitment
C_i = r_i·G + b_i·2^i·H with Σ r_i = b, and a two-member ring
[C_i, C_i − 2^i·H]: whichever member is a pure multiple of G reveals that
b_i ∈ {0, 1} without revealing which. All the per-bit rings are closed by a
single Borromean ring signature sharing one challenge e_0.

Mathematical foundation:
    Σ C_i = (Σ r_i)·G + (Σ b_i·2^i)·H = b·G + v·H = C

    Ring i, member j, with P_{i,j} the public key and s_{i,j} the response:
        R_{i,j} = s_{i,j}·G − e_{i,j}·P_{i,j}
        e_{i,0}   = Hs(m, e_0, i, 0)
        e_{i,j+1} = Hs(m, R_{i,j}, i, j+1)
        e_0       = Hs(m, R_{0,last}, ..., R_{n-1,last})

Proof size is linear in the bit count. Kept for compatibility with data
produced by older systems; new code should use Bulletproofs+.

References:
    [MP15]  G. Maxwell, A. Poelstra, "Borromean Ring Signatures", 2015.
    [Noe15] S. Noether, "Ring Confidential Transactions", MRL-0005, §5.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass

from ringct.curve import Point, Scalar
from ringct.encoding import Reader, Writer
from ringct.errors import ProofError
from ringct.generators import G, H
from ringct.hashes import BORROMEAN_TRANSCRIPT, h_bytes, h_scalar
from ringct.pedersen import Commitment, sum_commitments
from ringct.rng import RandomSource, random_scalar
from ringct.zeroize import Zeroizing


# ==============================================================================
# Borromean ring signature
# ==============================================================================


@dataclass(frozen=True)
class BorromeanSignature:
    """
    Attributes:
        e0: Shared closing challenge.
        s: One response per ring member, ``len(rings) × 2``.
    """
    e0: Scalar
    s: list[list[Scalar]]


def _challenge(message: bytes, seed: bytes, ring: int, member: int) -> Scalar:
    return h_scalar(BORROMEAN_TRANSCRIPT, message, seed, struct.pack(">II", ring, member))


def _close(message: bytes, last_points: list[Point]) -> Scalar:
    return h_scalar(BORROMEAN_TRANSCRIPT, message, *(p.to_bytes() for p in last_points))


def _sign(
    rings: list[list[Point]],
    indices: list[int],
    keys: list[Scalar],
    message: bytes,
    rng: RandomSource | None,
) -> BorromeanSignature:
    n = len(rings)
    s: list[list[Scalar | None]] = [[None] * len(ring) for ring in rings]
    last: list[Point] = []

    with Zeroizing() as secrets_:
        nonces = [secrets_.track(random_scalar(rng)) for _ in range(n)]

        # Walk from each secret index to the end of its ring.
        for i, ring in enumerate(rings):
            j = indices[i]
            R = G * nonces[i]
            for k in range(j + 1, len(ring)):
                e = _challenge(message, R.to_bytes(), i, k)
                s[i][k] = random_scalar(rng)
                R = G * s[i][k] - ring[k] * e
            last.append(R)

        e0 = _close(message, last)

        # Restart each ring from e0 and close it at the secret index.
        for i, ring in enumerate(rings):
            j = indices[i]
            e = _challenge(message, e0.to_bytes(), i, 0)
            for k in range(j):
                s[i][k] = random_scalar(rng)
                R = G * s[i][k] - ring[k] * e
                e = _challenge(message, R.to_bytes(), i, k + 1)
            s[i][j] = nonces[i] + keys[i] * e

    return BorromeanSignature(e0, s)  # type: ignore[arg-type]


def _verify(rings: list[list[Point]], sig: BorromeanSignature, message: bytes) -> bool:
    if len(sig.s) != len(rings):
        return False
    last: list[Point] = []
    for i, ring in enumerate(rings):
        if len(sig.s[i]) != len(ring):
            return False
        e = _challenge(message, sig.e0.to_bytes(), i, 0)
        R = Point.identity()
        for k, member in enumerate(ring):
            R = G * sig.s[i][k] - member * e
            if k + 1 < len(ring):
                e = _challenge(message, R.to_bytes(), i, k + 1)
        last.append(R)
    return _close(message, last) == sig.e0


# ==============================================================================
# Per-value rangeproof
# ==============================================================================


@dataclass(frozen=True)
class BorromeanRangeProof:
    """
    Rangeproof for a single commitment.

    Attributes:
        bit_commitments: C_i for each bit, summing to the proven commitment.
        signature: Borromean signature over the per-bit rings.
    """
    bit_commitments: list[Point]
    signature: BorromeanSignature

    def write(self, w: Writer) -> None:
        w.points(self.bit_commitments)
        w.scalar(self.signature.e0)
        w.u32(len(self.signature.s))
        for row in self.signature.s:
            w.scalars(row)

    @classmethod
    def read(cls, r: Reader) -> BorromeanRangeProof:
        bit_commitments = r.points()
        e0 = r.scalar()
        s = [r.scalars() for _ in range(r.count())]
        return cls(bit_commitments, BorromeanSignature(e0, s))


def _rings(bit_commitments: list[Point]) -> list[list[Point]]:
    return [[C_i, C_i - H * (1 << i)] for i, C_i in enumerate(bit_commitments)]


def _message(commitment: Commitment, rings: list[list[Point]]) -> bytes:
    keys = b"".join(p.to_bytes() for ring in rings for p in ring)
    return h_bytes(BORROMEAN_TRANSCRIPT, keys, commitment.to_bytes())


def prove_single(
    value: int,
    blinding: Scalar,
    bit_range: int,
    rng: RandomSource | None = None,
) -> BorromeanRangeProof:
    """Prove one commitment b·G + v·H is in [0, 2^bit_range)."""
    if not 0 <= value < (1 << bit_range):
        raise ProofError()

    with Zeroizing() as secrets_:
        bit_blindings = [secrets_.track(random_scalar(rng)) for _ in range(bit_range - 1)]
        remainder = blinding.copy()
        for r_i in bit_blindings:
            remainder = remainder - r_i
        bit_blindings.append(secrets_.track(remainder))

        bits = [(value >> i) & 1 for i in range(bit_range)]
        bit_commitments = [
            G * bit_blindings[i] + H * (bits[i] << i) for i in range(bit_range)
        ]
        rings = _rings(bit_commitments)
        commitment = Commitment(G * blinding + H * value)
        signature = _sign(rings, bits, bit_blindings, _message(commitment, rings), rng)

    return BorromeanRangeProof(bit_commitments, signature)


def linear_terms(
    proof: BorromeanRangeProof, commitment: Commitment, weight: Scalar
) -> list[tuple[Scalar, Point]]:
    """Weighted terms of Σ C_i − C = 0."""
    terms = [(weight, C_i) for C_i in proof.bit_commitments]
    terms.append((-weight, commitment.point))
    return terms


def chain_valid(proof: BorromeanRangeProof, commitment: Commitment, bit_range: int) -> bool:
    """Check the shape and the Borromean challenge chain (the non-linear part)."""
    if len(proof.bit_commitments) != bit_range:
        return False
    rings = _rings(proof.bit_commitments)
    return _verify(rings, proof.signature, _message(commitment, rings))


def verify_single(proof: BorromeanRangeProof, commitment: Commitment, bit_range: int) -> bool:
    if not chain_valid(proof, commitment, bit_range):
        return False
    return sum_commitments(Commitment(C) for C in proof.bit_commitments) == commitment


# ==============================================================================
# Multi-value proof
# ==============================================================================


@dataclass(frozen=True)
class BorromeanProof:
    """One BorromeanRangeProof per committed value, in commitment order."""
    proofs: list[BorromeanRangeProof]

    def write(self, w: Writer) -> None:
        w.u32(len(self.proofs))
        for p in self.proofs:
            p.write(w)

    @classmethod
    def read(cls, r: Reader) -> BorromeanProof:
        return cls([BorromeanRangeProof.read(r) for _ in range(r.count())])


def prove(
    values: list[int],
    blindings: list[Scalar],
    bit_range: int,
    rng: RandomSource | None = None,
) -> BorromeanProof:
    return BorromeanProof([
        prove_single(v, b, bit_range, rng) for v, b in zip(values, blindings)
    ])


def verify(proof: BorromeanProof, commitments: list[Commitment], bit_range: int) -> None:
    """Raises ProofError unless every sub-proof verifies against its commitment."""
    if len(proof.proofs) != len(commitments):
        raise ProofError()
    for sub, commitment in zip(proof.proofs, commitments):
        if not verify_single(sub, commitment, bit_range):
            raise ProofError()
