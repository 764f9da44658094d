"""
CLSAG: Concise Linkable Spontaneous Anonymous Group signatures.

A RingCT spend proves two things about one ring row π: knowledge of the
owner key x (P_π = x·G) and of z with C_π − C' = z·G, where C' is the
pseudo-output commitment. MLSAG needs a response per column; CLSAG folds
both columns into one with transcript-derived aggregation coefficients, so
the signature carries a single response per ring member.

Mathematical foundation:
    μ_P, μ_C = Hs(transcript)                       aggregation coefficients
    W_i  = μ_P·P_i + μ_C·(C_i − C')                 aggregated public keys
    W~   = μ_P·I   + μ_C·D                          aggregated key image
    w    = μ_P·x   + μ_C·z                          aggregated private key

    I = x·Hp(P_π) is the linking key image, D = z·Hp(P_π) the auxiliary
    commitment image. Each round:
        L_i = s_i·G      + c_i·W_i
        R_i = s_i·Hp(P_i) + c_i·W~
        c_{i+1} = Hs(transcript, L_i, R_i)
    and the signer closes at π with s_π = α − c_π·w.

References:
    [GNB19] B. Goodell, S. Noether, A. Blue, "Concise Linkable Ring
            Signatures and Forgery Against Adversarial Keys", 2019, §3.
"""

from __future__ import annotations

from dataclasses import dataclass

from ringct.config import RingCTConfig, resolve
from ringct.curve import Point, Scalar, multiexp
from ringct.encoding import Reader, Writer
from ringct.errors import SignatureError, SigningError
from ringct.generators import G
from ringct.hashes import CLSAG_TRANSCRIPT
from ringct.pedersen import Commitment, commit
from ringct.rng import RandomSource, random_scalar
from ringct.signature.utils import check_signing_ring, key_image_generator, shift_commitments
from ringct.transcript import Transcript
from ringct.types import EnoteKeys, Ring
from ringct.zeroize import Zeroizing


@dataclass(frozen=True)
class CLSAGSignature:
    """
    Attributes:
        c0: Challenge at ring position 0.
        responses: One response per ring member.
        key_image: Linking tag I = x·Hp(P_π).
        commitment_image: Auxiliary D = z·Hp(P_π).
    """
    c0: Scalar
    responses: list[Scalar]
    key_image: Point
    commitment_image: Point

    def write(self, w: Writer) -> None:
        w.scalar(self.c0).scalars(self.responses)
        w.point(self.key_image).point(self.commitment_image)

    @classmethod
    def read(cls, r: Reader) -> CLSAGSignature:
        c0 = r.scalar()
        responses = r.scalars()
        return cls(c0, responses, r.point(), r.point())


def _transcript(
    ring: Ring,
    pseudo_out: Commitment,
    key_image: Point,
    commitment_image: Point,
    message: bytes,
) -> Transcript:
    tr = Transcript(CLSAG_TRANSCRIPT)
    tr.append_message(b"message", message)
    tr.append_points(b"owners", ring.owners)
    tr.append_points(b"commitments", [c.point for c in ring.commitments])
    tr.append_point(b"pseudo_out", pseudo_out.point)
    tr.append_point(b"I", key_image)
    tr.append_point(b"D", commitment_image)
    return tr


def _aggregation_coefficients(base: Transcript) -> tuple[Scalar, Scalar]:
    tr = base.copy()
    return tr.challenge_scalar(b"mu_P"), tr.challenge_scalar(b"mu_C")


def _round(base: Transcript, L: Point, R: Point) -> Scalar:
    tr = base.copy()
    tr.append_point(b"L", L)
    tr.append_point(b"R", R)
    return tr.challenge_scalar(b"c")


# ==============================================================================
# Sign
# ==============================================================================


def sign(
    ring: Ring,
    secret_index: int,
    keys: EnoteKeys,
    message: bytes,
    pseudo_out_blinding: Scalar,
    rng: RandomSource | None = None,
    config: RingCTConfig | None = None,
) -> tuple[Commitment, CLSAGSignature]:
    """
    Spend ``ring[secret_index]``.

    Args:
        ring: Enotes to hide among.
        secret_index: Position π of the spent enote.
        keys: Owner key, value and blinding of the spent enote.
        message: Bytes to sign.
        pseudo_out_blinding: Blinding for the pseudo-output C' = commit(value, b').

    Returns:
        (pseudo_out, signature)

    Raises:
        ValueError: On an empty ring.
        SigningError: If π is out of bounds or ``keys`` does not open ring[π].
    """
    config = resolve(config)
    n = len(ring)
    check_signing_ring(n, secret_index, ring.is_sorted(), config)
    pi = secret_index
    spent = ring[pi]
    if keys.owner.is_zero() or G * keys.owner != spent.owner:
        raise SigningError(f"Owner key does not match ring member {pi}")
    if commit(keys.value, keys.blinding) != spent.commitment:
        raise SigningError(f"Commitment opening does not match ring member {pi}")

    pseudo_out = commit(keys.value, pseudo_out_blinding)
    shifted = shift_commitments(ring, pseudo_out)
    hp_pi = key_image_generator(spent.owner)

    c: list[Scalar | None] = [None] * n
    s: list[Scalar | None] = [None] * n

    with Zeroizing() as secrets_:
        z = secrets_.track(keys.blinding - pseudo_out_blinding)
        key_image = hp_pi * keys.owner
        commitment_image = hp_pi * z

        base = _transcript(ring, pseudo_out, key_image, commitment_image, message)
        mu_P, mu_C = _aggregation_coefficients(base)
        w_tilde = multiexp([(mu_P, key_image), (mu_C, commitment_image)])
        w = secrets_.track(mu_P * keys.owner + mu_C * z)

        alpha = secrets_.track(random_scalar(rng))
        i = (pi + 1) % n
        c[i] = _round(base, G * alpha, hp_pi * alpha)

        while i != pi:
            s_i = random_scalar(rng)
            s[i] = s_i
            W_i = multiexp([(mu_P, ring[i].owner), (mu_C, shifted[i])])
            L = multiexp([(s_i, G), (c[i], W_i)])
            R = multiexp([(s_i, key_image_generator(ring[i].owner)), (c[i], w_tilde)])
            i = (i + 1) % n
            c[i] = _round(base, L, R)

        s[pi] = alpha - c[pi] * w

    return pseudo_out, CLSAGSignature(c[0], s, key_image, commitment_image)  # type: ignore[arg-type]


# ==============================================================================
# Verify
# ==============================================================================


def _verify(
    signature: CLSAGSignature,
    ring: Ring,
    pseudo_out: Commitment,
    message: bytes,
    config: RingCTConfig,
) -> bool:
    n = len(ring)
    if n == 0 or n < config.min_ring_size or len(signature.responses) != n:
        return False
    if signature.key_image.is_identity():
        return False
    if config.require_sorted_rings and not ring.is_sorted():
        return False

    shifted = shift_commitments(ring, pseudo_out)
    base = _transcript(ring, pseudo_out, signature.key_image, signature.commitment_image, message)
    mu_P, mu_C = _aggregation_coefficients(base)
    w_tilde = multiexp([(mu_P, signature.key_image), (mu_C, signature.commitment_image)])

    c = signature.c0
    for i in range(n):
        s_i = signature.responses[i]
        W_i = multiexp([(mu_P, ring[i].owner), (mu_C, shifted[i])])
        L = multiexp([(s_i, G), (c, W_i)])
        R = multiexp([(s_i, key_image_generator(ring[i].owner)), (c, w_tilde)])
        c = _round(base, L, R)
    return c == signature.c0


def verify(
    signature: CLSAGSignature,
    ring: Ring,
    pseudo_out: Commitment,
    message: bytes,
    config: RingCTConfig | None = None,
) -> None:
    """
    Verify a CLSAG spend.

    Raises:
        SignatureError: On any failure. The message is the same for every
            cause (size mismatch, identity key image, broken chain).
    """
    config = resolve(config)
    try:
        ok = _verify(signature, ring, pseudo_out, message, config)
    except (ArithmeticError, TypeError, ValueError):
        ok = False
    if not ok:
        raise SignatureError()
