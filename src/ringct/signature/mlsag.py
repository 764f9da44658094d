"""
MLSAG: Multilayered Linkable Spontaneous Anonymous Group signatures.

Signs over an n × m matrix of public keys. The signer knows all m private
keys of one row π and proves it without revealing π. Every column carries a
key image, so reusing any of the row's keys links two signatures.

Mathematical foundation:
    For row i, column j, with Hp(P) the key-image base:
        L_{i,j} = s_{i,j}·G     + c_i·P_{i,j}
        R_{i,j} = s_{i,j}·Hp(P_{i,j}) + c_i·I_j
        c_{i+1} = Hs(transcript, L_{i,*}, R_{i,*})

    At the secret row the signer starts from nonces α_j
    (L = α_j·G, R = α_j·Hp(P_{π,j})) and closes the ring with
        s_{π,j} = α_j − c_π·x_j

    Verification walks all n rows from c_0 and accepts iff it lands back on c_0.

For RingCT spends ``sign_enote`` uses the two-column matrix
[P_i, C_i − C'], where C' is a fresh pseudo-output commitment to the same
value, so the second column proves C_π and C' hide equal amounts.

References:
    [Noe15] S. Noether, "Ring Confidential Transactions", MRL-0005, §2.
    [LWW04] J. Liu, V. Wei, D. Wong, "Linkable Spontaneous Anonymous Group
            Signature for Ad Hoc Groups", ACISP 2004.
"""

from __future__ import annotations

from dataclasses import dataclass

from ringct.config import RingCTConfig, resolve
from ringct.curve import Point, Scalar, multiexp
from ringct.encoding import Reader, Writer
from ringct.errors import SignatureError, SigningError
from ringct.generators import G
from ringct.hashes import MLSAG_TRANSCRIPT
from ringct.pedersen import Commitment, commit
from ringct.rng import RandomSource, random_scalar
from ringct.signature.utils import (
    check_signing_ring,
    key_image_generator,
    rows_sorted,
    shift_commitments,
)
from ringct.transcript import Transcript
from ringct.types import EnoteKeys, Ring
from ringct.zeroize import Zeroizing


@dataclass(frozen=True)
class MLSAGSignature:
    """
    Attributes:
        c0: Challenge at row 0.
        responses: n × m response matrix.
        key_images: One key image per column.
    """
    c0: Scalar
    responses: list[list[Scalar]]
    key_images: list[Point]

    def write(self, w: Writer) -> None:
        w.scalar(self.c0)
        w.u32(len(self.responses))
        for row in self.responses:
            w.scalars(row)
        w.points(self.key_images)

    @classmethod
    def read(cls, r: Reader) -> MLSAGSignature:
        c0 = r.scalar()
        responses = [r.scalars() for _ in range(r.count())]
        return cls(c0, responses, r.points())


def _transcript(key_matrix: list[list[Point]], key_images: list[Point], message: bytes) -> Transcript:
    tr = Transcript(MLSAG_TRANSCRIPT)
    tr.append_message(b"message", message)
    tr.append_u64(b"rows", len(key_matrix))
    tr.append_u64(b"cols", len(key_images))
    for row in key_matrix:
        tr.append_points(b"row", row)
    tr.append_points(b"key_images", key_images)
    return tr


def _round(base: Transcript, L: list[Point], R: list[Point]) -> Scalar:
    tr = base.copy()
    tr.append_points(b"L", L)
    tr.append_points(b"R", R)
    return tr.challenge_scalar(b"c")


# ==============================================================================
# Generic matrix signing
# ==============================================================================


def _sign(
    key_matrix: list[list[Point]],
    secret_index: int,
    secret_keys: list[Scalar],
    message: bytes,
    rng: RandomSource | None,
    config: RingCTConfig,
    sorted_ok: bool,
) -> MLSAGSignature:
    n = len(key_matrix)
    m = len(secret_keys)
    check_signing_ring(n, secret_index, sorted_ok, config)
    if m == 0 or any(len(row) != m for row in key_matrix):
        raise ValueError("Every ring row must have one key per secret key")
    pi = secret_index
    for j, x in enumerate(secret_keys):
        if x.is_zero() or G * x != key_matrix[pi][j]:
            raise SigningError(f"Secret key {j} does not match ring row {pi}")

    hp_pi = [key_image_generator(P) for P in key_matrix[pi]]
    images = [hp_pi[j] * secret_keys[j] for j in range(m)]
    base = _transcript(key_matrix, images, message)

    c: list[Scalar | None] = [None] * n
    s: list[list[Scalar] | None] = [None] * n

    with Zeroizing() as secrets_:
        alpha = [secrets_.track(random_scalar(rng)) for _ in range(m)]
        i = (pi + 1) % n
        c[i] = _round(base, [G * a for a in alpha], [hp_pi[j] * alpha[j] for j in range(m)])

        while i != pi:
            row = [random_scalar(rng) for _ in range(m)]
            s[i] = row
            ci = c[i]
            L = [multiexp([(row[j], G), (ci, key_matrix[i][j])]) for j in range(m)]
            R = [
                multiexp([(row[j], key_image_generator(key_matrix[i][j])), (ci, images[j])])
                for j in range(m)
            ]
            i = (i + 1) % n
            c[i] = _round(base, L, R)

        s[pi] = [alpha[j] - c[pi] * secret_keys[j] for j in range(m)]

    return MLSAGSignature(c[0], s, images)  # type: ignore[arg-type]


def _verify(
    signature: MLSAGSignature,
    key_matrix: list[list[Point]],
    message: bytes,
    config: RingCTConfig,
    sorted_ok: bool,
) -> bool:
    n = len(key_matrix)
    m = len(signature.key_images)
    if n == 0 or n < config.min_ring_size or m == 0:
        return False
    if len(signature.responses) != n:
        return False
    if any(len(row) != m for row in signature.responses) or any(len(row) != m for row in key_matrix):
        return False
    if any(image.is_identity() for image in signature.key_images):
        return False
    if config.require_sorted_rings and not sorted_ok:
        return False

    base = _transcript(key_matrix, signature.key_images, message)
    c = signature.c0
    for i in range(n):
        s = signature.responses[i]
        L = [multiexp([(s[j], G), (c, key_matrix[i][j])]) for j in range(m)]
        R = [
            multiexp([(s[j], key_image_generator(key_matrix[i][j])), (c, signature.key_images[j])])
            for j in range(m)
        ]
        c = _round(base, L, R)
    return c == signature.c0


def sign(
    key_matrix: list[list[Point]],
    secret_index: int,
    secret_keys: list[Scalar],
    message: bytes,
    rng: RandomSource | None = None,
    config: RingCTConfig | None = None,
) -> MLSAGSignature:
    """
    Sign ``message`` over an n × m key matrix.

    Args:
        key_matrix: Ring rows, each holding m public keys.
        secret_index: The signer's row π.
        secret_keys: The m private keys of row π.
        message: Bytes to sign.

    Raises:
        ValueError: On an empty ring or ragged matrix.
        SigningError: If π is out of bounds or a key does not match row π.
    """
    config = resolve(config)
    return _sign(key_matrix, secret_index, secret_keys, message, rng, config, rows_sorted(key_matrix))


def verify(
    signature: MLSAGSignature,
    key_matrix: list[list[Point]],
    message: bytes,
    config: RingCTConfig | None = None,
) -> None:
    """Raises SignatureError unless the signature is valid for this matrix and message."""
    config = resolve(config)
    try:
        ok = _verify(signature, key_matrix, message, config, rows_sorted(key_matrix))
    except (ArithmeticError, TypeError, ValueError):
        ok = False
    if not ok:
        raise SignatureError()


# ==============================================================================
# RingCT enote spends
# ==============================================================================


def _enote_matrix(ring: Ring, pseudo_out: Commitment) -> list[list[Point]]:
    return [[e.owner, shifted] for e, shifted in zip(ring, shift_commitments(ring, pseudo_out))]


def sign_enote(
    ring: Ring,
    secret_index: int,
    keys: EnoteKeys,
    message: bytes,
    pseudo_out_blinding: Scalar,
    rng: RandomSource | None = None,
    config: RingCTConfig | None = None,
) -> tuple[Commitment, MLSAGSignature]:
    """
    Spend ``ring[secret_index]`` with a two-column MLSAG.

    Args:
        ring: Enotes to hide among.
        secret_index: Position of the spent enote.
        keys: Owner key, value and blinding of the spent enote.
        message: Bytes to sign.
        pseudo_out_blinding: Blinding of the pseudo-output commitment; callers
            choose it so that pseudo-outputs balance against the outputs.

    Returns:
        (pseudo_out, signature)

    Raises:
        SigningError: If the keys do not open ring[secret_index], or if
            ``pseudo_out_blinding`` equals the input blinding (the commitment
            column would have a zero key).
    """
    config = resolve(config)
    pseudo_out = commit(keys.value, pseudo_out_blinding)
    with Zeroizing() as secrets_:
        z = secrets_.track(keys.blinding - pseudo_out_blinding)
        if z.is_zero():
            raise SigningError("Pseudo-output blinding must differ from the input blinding")
        signature = _sign(
            _enote_matrix(ring, pseudo_out), secret_index, [keys.owner, z],
            message, rng, config, ring.is_sorted(),
        )
    return pseudo_out, signature


def verify_enote(
    signature: MLSAGSignature,
    ring: Ring,
    pseudo_out: Commitment,
    message: bytes,
    config: RingCTConfig | None = None,
) -> None:
    """Raises SignatureError unless the enote spend signature is valid."""
    config = resolve(config)
    try:
        ok = len(signature.key_images) == 2 and _verify(
            signature, _enote_matrix(ring, pseudo_out), message, config, ring.is_sorted()
        )
    except (ArithmeticError, TypeError, ValueError):
        ok = False
    if not ok:
        raise SignatureError()
