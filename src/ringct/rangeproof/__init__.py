"""
ringct.rangeproof — prove committed values lie in [0, 2^bit_range).

Two interchangeable backends behind one contract:

    proof = prove(values, blindings, kind=RangeProofKind.BULLETPROOFS_PLUS)
    verify(proof, [commit(v, b) for v, b in zip(values, blindings)])

RangeProof is a tagged variant: ``kind`` selects the backend and
``payload`` holds the backend's proof object.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Union

from ringct.config import DEFAULT_CONFIG, RingCTConfig, resolve
from ringct.curve import Scalar
from ringct.encoding import Reader, Writer
from ringct.errors import BatchError, EncodingError, ProofError
from ringct.generators import GeneratorSet
from ringct.pedersen import Commitment
from ringct.rangeproof import borromean, bulletplus
from ringct.rangeproof.borromean import BorromeanProof
from ringct.rangeproof.bulletplus import BulletproofsPlusProof
from ringct.rng import RandomSource

BIT_RANGE = DEFAULT_CONFIG.bit_range
"""Default number of bits proven (64)."""

MAX_VALUE = DEFAULT_CONFIG.max_value
"""Default largest provable value (2^64 - 1)."""


class RangeProofKind(enum.IntEnum):
    BORROMEAN = 1
    BULLETPROOFS_PLUS = 2


@dataclass(frozen=True)
class RangeProof:
    """
    Attributes:
        kind: Backend that produced the proof.
        payload: BorromeanProof or BulletproofsPlusProof.
    """
    kind: RangeProofKind
    payload: Union[BorromeanProof, BulletproofsPlusProof]

    def to_bytes(self) -> bytes:
        w = Writer().u8(self.kind)
        self.payload.write(w)
        return w.getvalue()

    @classmethod
    def from_bytes(cls, data: bytes) -> RangeProof:
        """Raises EncodingError on unknown kind or malformed payload."""
        r = Reader(data)
        tag = r.u8()
        if tag == RangeProofKind.BORROMEAN:
            proof = cls(RangeProofKind.BORROMEAN, BorromeanProof.read(r))
        elif tag == RangeProofKind.BULLETPROOFS_PLUS:
            proof = cls(RangeProofKind.BULLETPROOFS_PLUS, BulletproofsPlusProof.read(r))
        else:
            raise EncodingError(f"Unknown rangeproof kind: {tag}")
        r.finish()
        return proof


def prove(
    values: list[int],
    blindings: list[Scalar],
    kind: RangeProofKind = RangeProofKind.BULLETPROOFS_PLUS,
    rng: RandomSource | None = None,
    config: RingCTConfig | None = None,
    generators: GeneratorSet | None = None,
) -> RangeProof:
    """
    Prove every value in ``values`` is in range.

    Raises:
        ProofError: On empty input, length mismatch, an out-of-range value,
            or (Bulletproofs+) too many values for one proof.
    """
    config = resolve(config)
    if kind == RangeProofKind.BORROMEAN:
        if not values or len(values) != len(blindings):
            raise ProofError()
        if any(not 0 <= v <= config.max_value for v in values):
            raise ProofError()
        return RangeProof(kind, borromean.prove(values, blindings, config.bit_range, rng))
    if kind == RangeProofKind.BULLETPROOFS_PLUS:
        return RangeProof(kind, bulletplus.prove(values, blindings, rng, config, generators))
    raise ValueError(f"Unknown rangeproof kind: {kind!r}")


def verify(
    proof: RangeProof,
    commitments: list[Commitment],
    config: RingCTConfig | None = None,
    generators: GeneratorSet | None = None,
) -> None:
    """Raises ProofError unless ``proof`` is valid for ``commitments`` in order."""
    config = resolve(config)
    if proof.kind == RangeProofKind.BORROMEAN and isinstance(proof.payload, BorromeanProof):
        borromean.verify(proof.payload, commitments, config.bit_range)
    elif proof.kind == RangeProofKind.BULLETPROOFS_PLUS and isinstance(proof.payload, BulletproofsPlusProof):
        bulletplus.verify(proof.payload, commitments, config, generators)
    else:
        raise ProofError()


def batch_verify(
    proofs: list[RangeProof],
    commitment_sets: list[list[Commitment]],
    rng: RandomSource | None = None,
    config: RingCTConfig | None = None,
) -> None:
    """
    Verify many rangeproofs at once through the batch verifier.

    Raises:
        ProofError: If any proof is invalid.
    """
    from ringct.batch import RangeProofCheck, batch_verify as _batch_verify

    if len(proofs) != len(commitment_sets):
        raise ProofError()
    items = [RangeProofCheck(p, cs) for p, cs in zip(proofs, commitment_sets)]
    try:
        _batch_verify(items, rng=rng, config=config)
    except BatchError as e:
        raise ProofError() from e


__all__ = [
    "BIT_RANGE",
    "MAX_VALUE",
    "RangeProof",
    "RangeProofKind",
    "batch_verify",
    "prove",
    "verify",
]
