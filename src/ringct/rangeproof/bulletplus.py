"""
Bulletproofs+ rangeproofs: protocol glue around ``ringct.bpplus``.

This module decides everything the engine leaves open:

- Generator selection: Gi, Hi are the first bit_range·M elements of a
  deterministic GeneratorSet, where M is the commitment count rounded up to a
  power of two.
- Padding: the commitment list is extended to M with identity commitments
  (value 0, blinding 0).
- Binding: the transcript absorbs the commitments in order, plus the declared
  commitment count and bit range, so reordering or resizing the list breaks
  verification.
- Malleability: the proof carries its commitment count; verification rejects
  a proof whose count or round count does not match what the verifier was
  handed.
- Aggregation limit: at most ``config.max_aggregation_size`` values per proof.
- Batching: proofs are verified in groups of ``config.max_batch_group_size``,
  one weighted multi-exponentiation per group.
"""

from __future__ import annotations

import logging
import struct
from dataclasses import dataclass

from ringct import bpplus
from ringct.config import RingCTConfig, resolve
from ringct.curve import Point, Scalar, multiexp
from ringct.encoding import Reader, Writer
from ringct.errors import ProofError
from ringct.generators import DEFAULT_GENERATORS, G, H, GeneratorSet
from ringct.pedersen import Commitment, commit
from ringct.rng import RandomSource, random_scalar

logger = logging.getLogger("ringct.rangeproof")


def _padded_size(count: int) -> int:
    m = 1
    while m < count:
        m *= 2
    return m


# ==============================================================================
# Proof type
# ==============================================================================


@dataclass(frozen=True)
class BulletproofsPlusProof:
    """
    An aggregated Bulletproofs+ rangeproof.

    Attributes:
        commitment_count: Number of real (unpadded) commitments proven.
        proof: The engine proof.
    """
    commitment_count: int
    proof: bpplus.BulletproofPlus

    def write(self, w: Writer) -> None:
        w.u32(self.commitment_count)
        self.proof.write(w)

    @classmethod
    def read(cls, r: Reader) -> BulletproofsPlusProof:
        return cls(r.count(), bpplus.BulletproofPlus.read(r))


def _statement(
    commitments: list[Point],
    bit_range: int,
    generators: GeneratorSet,
) -> bpplus.RangeStatement:
    count = len(commitments)
    m = _padded_size(count)
    gi, hi = generators.vectors(bit_range * m)
    params = bpplus.RangeParameters(H=H, G=G, N=bit_range, Gi=gi, Hi=hi)
    padded = list(commitments) + [Point.identity()] * (m - count)
    context = struct.pack(">II", count, bit_range)
    return bpplus.RangeStatement(params, padded, context)


# ==============================================================================
# Prove
# ==============================================================================


def prove(
    values: list[int],
    blindings: list[Scalar],
    rng: RandomSource | None = None,
    config: RingCTConfig | None = None,
    generators: GeneratorSet | None = None,
) -> BulletproofsPlusProof:
    """
    Prove that every value lies in [0, 2^bit_range).

    The proof verifies against ``[commit(v, b) for v, b in zip(values, blindings)]``
    in exactly that order.

    Raises:
        ProofError: On empty input, length mismatch, an out-of-range value or
            more values than the aggregation limit.
    """
    config = resolve(config)
    generators = generators or DEFAULT_GENERATORS
    if not values or len(values) != len(blindings):
        raise ProofError()
    if len(values) > config.max_aggregation_size:
        raise ProofError()
    if any(not 0 <= v <= config.max_value for v in values):
        raise ProofError()

    commitments = [commit(v, b).point for v, b in zip(values, blindings)]
    statement = _statement(commitments, config.bit_range, generators)
    openings = [bpplus.CommitmentOpening(v, b) for v, b in zip(values, blindings)]
    openings += [bpplus.CommitmentOpening(0, Scalar(0))] * (statement.M - len(values))

    try:
        proof = bpplus.prove(statement, bpplus.RangeWitness(openings), rng)
    except ValueError as e:
        raise ProofError() from e
    logger.debug(f"Bulletproofs+ proof over {len(values)} values ({proof.rounds} rounds)")
    return BulletproofsPlusProof(len(values), proof)


# ==============================================================================
# Verify
# ==============================================================================


def verification_terms(
    proof: BulletproofsPlusProof,
    commitments: list[Commitment],
    weight: Scalar,
    config: RingCTConfig | None = None,
    generators: GeneratorSet | None = None,
) -> list[tuple[Scalar, Point]]:
    """
    Weighted verification terms, for folding into a larger batch.

    Raises:
        ProofError: If the proof does not fit the supplied commitments.
    """
    config = resolve(config)
    generators = generators or DEFAULT_GENERATORS
    count = len(commitments)
    if count == 0 or proof.commitment_count != count or count > config.max_aggregation_size:
        raise ProofError()
    statement = _statement([c.point for c in commitments], config.bit_range, generators)
    try:
        return bpplus.verification_terms(statement, proof.proof, weight)
    except ValueError as e:
        raise ProofError() from e


def verify(
    proof: BulletproofsPlusProof,
    commitments: list[Commitment],
    config: RingCTConfig | None = None,
    generators: GeneratorSet | None = None,
) -> None:
    """Raises ProofError unless ``proof`` covers exactly ``commitments``, in order."""
    terms = verification_terms(proof, commitments, Scalar(1), config, generators)
    if not multiexp(terms).is_identity():
        raise ProofError()


def batch_verify(
    proofs: list[BulletproofsPlusProof],
    commitment_sets: list[list[Commitment]],
    rng: RandomSource | None = None,
    config: RingCTConfig | None = None,
    generators: GeneratorSet | None = None,
) -> None:
    """
    Verify many proofs with one multi-exponentiation per group.

    Each proof's equation is scaled by a fresh random weight before the sum,
    so an invalid proof cannot cancel against a valid one.

    Raises:
        ProofError: If any proof is invalid.
    """
    config = resolve(config)
    if len(proofs) != len(commitment_sets):
        raise ProofError()
    group = config.max_batch_group_size
    for start in range(0, len(proofs), group):
        terms: list[tuple[Scalar, Point]] = []
        for proof, commitments in zip(proofs[start:start + group], commitment_sets[start:start + group]):
            terms.extend(verification_terms(proof, commitments, random_scalar(rng), config, generators))
        if not multiexp(terms).is_identity():
            raise ProofError()
        logger.debug(f"Verified Bulletproofs+ group of {min(group, len(proofs) - start)}")
