"""
ECDH shared secrets and one-time key derivation.

Mathematical foundation:
    Sender r, receiver view key a, A = a·G, transaction key R = r·G:
        s = Hs(r·A) = Hs(a·R)                 shared secret (a scalar)
        P = B + s·G                           one-time public key
        p = b + s                             one-time private key

    The raw DH point is always hashed into the scalar field: a scalar
    secret can be added to keys directly and never exposes x·P itself.

    From s the sender also derives, each under its own domain tag:
        view tag    first byte of H(s), lets scanners skip most outputs
        amount pad  8 bytes XORed with the big-endian amount
        mask        the commitment blinding, so the receiver can reopen C
"""

from __future__ import annotations

import struct

from ringct.curve import Point, Scalar
from ringct.generators import G
from ringct.hashes import (
    ECDH_AMOUNT,
    ECDH_MASK,
    ECDH_SECRET,
    ECDH_SEED,
    ECDH_VIEW_TAG,
    h_bytes,
    h_scalar,
)
from ringct.types import ViewTag


def derive_shared_secret(my_private: Scalar, their_public: Point) -> Scalar:
    """s = Hs(x·P). Symmetric: derive(a, b·G) == derive(b, a·G)."""
    return h_scalar(ECDH_SECRET, (their_public * my_private).to_bytes())


def derive_view_tag(shared_secret: Scalar) -> ViewTag:
    return h_bytes(ECDH_VIEW_TAG, shared_secret.to_bytes())[0]


def derive_public_key(base_public: Point, shared_secret: Scalar) -> Point:
    """P = B + s·G."""
    return base_public + G * shared_secret


def derive_private_key(base_private: Scalar, shared_secret: Scalar) -> Scalar:
    """p = b + s."""
    return base_private + shared_secret


def derive_commitment_mask(shared_secret: Scalar) -> Scalar:
    """Deterministic commitment blinding both sides can compute."""
    return h_scalar(ECDH_MASK, shared_secret.to_bytes())


def _amount_pad(shared_secret: Scalar) -> int:
    return struct.unpack(">Q", h_bytes(ECDH_AMOUNT, shared_secret.to_bytes())[:8])[0]


def encrypt_amount(amount: int, shared_secret: Scalar) -> bytes:
    """8-byte big-endian amount XORed with a pad derived from the shared secret."""
    return struct.pack(">Q", amount ^ _amount_pad(shared_secret))


def decrypt_amount(encrypted: bytes, shared_secret: Scalar) -> int:
    if len(encrypted) != 8:
        raise ValueError(f"Encrypted amount must be 8 bytes, got {len(encrypted)}")
    return struct.unpack(">Q", encrypted)[0] ^ _amount_pad(shared_secret)


def private_key_from_seed(seed: bytes) -> Scalar:
    """Derive a non-zero private key from seed bytes."""
    key = h_scalar(ECDH_SEED, seed)
    if key.is_zero():
        raise ValueError("Seed maps to the zero scalar")
    return key
