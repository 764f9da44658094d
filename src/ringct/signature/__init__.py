"""
ringct.signature — linkable ring signatures for RingCT spends.

Two schemes behind one contract:

    pseudo_out, sig = sign(RingSignatureKind.CLSAG, ring, pi, keys, msg, pseudo_blinding)
    verify(sig, ring, pseudo_out, msg)

RingSignature is a tagged variant: ``kind`` selects the scheme and
``payload`` holds the scheme's signature. MLSAG over an arbitrary key
matrix is available directly from ``ringct.signature.mlsag``.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Union

from ringct.config import RingCTConfig
from ringct.curve import Point, Scalar
from ringct.encoding import Reader, Writer
from ringct.errors import EncodingError, SignatureError
from ringct.pedersen import Commitment
from ringct.rng import RandomSource
from ringct.signature import clsag, mlsag
from ringct.signature.clsag import CLSAGSignature
from ringct.signature.mlsag import MLSAGSignature
from ringct.types import EnoteKeys, Ring, key_image


class RingSignatureKind(enum.IntEnum):
    MLSAG = 1
    CLSAG = 2


@dataclass(frozen=True)
class RingSignature:
    """
    Attributes:
        kind: Scheme that produced the signature.
        payload: MLSAGSignature or CLSAGSignature.
    """
    kind: RingSignatureKind
    payload: Union[MLSAGSignature, CLSAGSignature]

    @property
    def key_image(self) -> Point:
        """The linking tag: the owner-key column's image."""
        if isinstance(self.payload, CLSAGSignature):
            return self.payload.key_image
        return self.payload.key_images[0]

    def to_bytes(self) -> bytes:
        w = Writer().u8(self.kind)
        self.payload.write(w)
        return w.getvalue()

    @classmethod
    def from_bytes(cls, data: bytes) -> RingSignature:
        """Raises EncodingError on unknown kind or malformed payload."""
        r = Reader(data)
        tag = r.u8()
        if tag == RingSignatureKind.MLSAG:
            sig = cls(RingSignatureKind.MLSAG, MLSAGSignature.read(r))
        elif tag == RingSignatureKind.CLSAG:
            sig = cls(RingSignatureKind.CLSAG, CLSAGSignature.read(r))
        else:
            raise EncodingError(f"Unknown ring signature kind: {tag}")
        r.finish()
        return sig


def sign(
    kind: RingSignatureKind,
    ring: Ring,
    secret_index: int,
    keys: EnoteKeys,
    message: bytes,
    pseudo_out_blinding: Scalar,
    rng: RandomSource | None = None,
    config: RingCTConfig | None = None,
) -> tuple[Commitment, RingSignature]:
    """
    Sign an enote spend with the chosen scheme.

    Returns:
        (pseudo_out, signature)
    """
    if kind == RingSignatureKind.CLSAG:
        pseudo_out, payload = clsag.sign(ring, secret_index, keys, message, pseudo_out_blinding, rng, config)
    elif kind == RingSignatureKind.MLSAG:
        pseudo_out, payload = mlsag.sign_enote(ring, secret_index, keys, message, pseudo_out_blinding, rng, config)
    else:
        raise ValueError(f"Unknown ring signature kind: {kind!r}")
    return pseudo_out, RingSignature(kind, payload)


def verify(
    signature: RingSignature,
    ring: Ring,
    pseudo_out: Commitment,
    message: bytes,
    config: RingCTConfig | None = None,
) -> None:
    """Raises SignatureError unless ``signature`` is a valid spend from ``ring``."""
    if signature.kind == RingSignatureKind.CLSAG and isinstance(signature.payload, CLSAGSignature):
        clsag.verify(signature.payload, ring, pseudo_out, message, config)
    elif signature.kind == RingSignatureKind.MLSAG and isinstance(signature.payload, MLSAGSignature):
        mlsag.verify_enote(signature.payload, ring, pseudo_out, message, config)
    else:
        raise SignatureError()


__all__ = [
    "RingSignature",
    "RingSignatureKind",
    "key_image",
    "sign",
    "verify",
]
