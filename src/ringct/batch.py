"""
Batch verification of rangeproofs and ring signatures.

Every item's linear verification equation is scaled by a fresh random
weight and all of them are summed into one multi-exponentiation:

    Σ_k w_k · (equation_k) == identity

A single invalid equation survives the sum with overwhelming probability,
because the weights are drawn after the proofs are fixed and the prover
cannot predict them. Reusing or predicting weights would let a forged
proof cancel against a valid one.

What folds into the sum:
    Bulletproofs+       the full verification equation of each proof
    Borromean           Σ C_i − C per value; the challenge chain is checked
                        per item since it is a hash chain
    MLSAG / CLSAG       nothing; the challenge chain is a hash chain, so
                        each signature is verified on its own

A failed aggregate check cannot say which item is bad. Pass
``individual_fallback=True`` to re-verify items one at a time and attach
the per-item verdicts to the raised BatchError.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Union

from ringct import rangeproof, signature
from ringct.config import RingCTConfig, resolve
from ringct.curve import Point, Scalar, multiexp
from ringct.errors import BatchError, ProofError, VerificationError
from ringct.pedersen import Commitment
from ringct.rangeproof import RangeProof, RangeProofKind, borromean, bulletplus
from ringct.rangeproof.borromean import BorromeanProof
from ringct.rangeproof.bulletplus import BulletproofsPlusProof
from ringct.rng import RandomSource, random_scalar
from ringct.signature import RingSignature
from ringct.types import Ring

logger = logging.getLogger("ringct.batch")


@dataclass(frozen=True)
class RangeProofCheck:
    """A rangeproof and the commitments it must cover, in order."""
    proof: RangeProof
    commitments: list[Commitment]


@dataclass(frozen=True)
class SignatureCheck:
    """A ring signature with the ring, pseudo-output and message it signs."""
    signature: RingSignature
    ring: Ring
    pseudo_out: Commitment
    message: bytes


BatchItem = Union[RangeProofCheck, SignatureCheck]


def _range_terms(
    item: RangeProofCheck,
    rng: RandomSource | None,
    config: RingCTConfig,
) -> list[tuple[Scalar, Point]]:
    proof = item.proof
    if proof.kind == RangeProofKind.BULLETPROOFS_PLUS and isinstance(proof.payload, BulletproofsPlusProof):
        return bulletplus.verification_terms(proof.payload, item.commitments, random_scalar(rng), config)

    if proof.kind == RangeProofKind.BORROMEAN and isinstance(proof.payload, BorromeanProof):
        if len(proof.payload.proofs) != len(item.commitments):
            raise ProofError()
        terms = []
        for sub, commitment in zip(proof.payload.proofs, item.commitments):
            if not borromean.chain_valid(sub, commitment, config.bit_range):
                raise ProofError()
            terms.extend(borromean.linear_terms(sub, commitment, random_scalar(rng)))
        return terms

    raise ProofError()


def _verify_group(
    items: list[BatchItem],
    rng: RandomSource | None,
    config: RingCTConfig,
) -> bool:
    terms: list[tuple[Scalar, Point]] = []
    try:
        for item in items:
            if isinstance(item, RangeProofCheck):
                terms.extend(_range_terms(item, rng, config))
            elif isinstance(item, SignatureCheck):
                signature.verify(item.signature, item.ring, item.pseudo_out, item.message, config)
            else:
                raise TypeError(f"Unsupported batch item: {type(item).__name__}")
    except VerificationError:
        return False
    return multiexp(terms).is_identity()


def verify_individually(
    items: list[BatchItem],
    config: RingCTConfig | None = None,
) -> list[bool]:
    """
    Verify each item on its own.

    Returns:
        One verdict per item, in order.
    """
    config = resolve(config)
    results = []
    for item in items:
        try:
            if isinstance(item, RangeProofCheck):
                rangeproof.verify(item.proof, item.commitments, config)
            elif isinstance(item, SignatureCheck):
                signature.verify(item.signature, item.ring, item.pseudo_out, item.message, config)
            else:
                raise TypeError(f"Unsupported batch item: {type(item).__name__}")
            results.append(True)
        except VerificationError:
            results.append(False)
    return results


def batch_verify(
    items: list[BatchItem],
    rng: RandomSource | None = None,
    individual_fallback: bool = False,
    config: RingCTConfig | None = None,
) -> None:
    """
    Verify all items with one weighted multi-exponentiation per group.

    Items are processed in groups of ``config.max_batch_group_size``.

    Args:
        items: Rangeproof and signature checks, in any mix.
        rng: Source of the random weights. Must be unpredictable to whoever
            produced the proofs.
        individual_fallback: On failure, re-verify every item and attach
            the verdicts to the error.
        config: Protocol limits.

    Raises:
        BatchError: If any item is invalid. ``results`` holds per-item
            verdicts when ``individual_fallback`` is set, otherwise None.
        TypeError: If an item is neither a RangeProofCheck nor a SignatureCheck.
    """
    config = resolve(config)
    group = config.max_batch_group_size
    for start in range(0, len(items), group):
        if not _verify_group(items[start:start + group], rng, config):
            logger.warning(f"Batch verification failed in group starting at item {start}")
            results = verify_individually(items, config) if individual_fallback else None
            raise BatchError(results)
    logger.debug(f"Batch verified {len(items)} items")


__all__ = [
    "BatchItem",
    "RangeProofCheck",
    "SignatureCheck",
    "batch_verify",
    "verify_individually",
]
