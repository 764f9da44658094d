"""
Domain-separated hashing.

Every hash in ringct is Blake2b with an explicit domain tag, so an output
computed for one purpose can never be replayed as input to another.
Parts are length-prefixed before hashing.
"""

from __future__ import annotations

import hashlib
import struct

from ringct.curve import SECP256K1_N, Point, Scalar, hash_to_point

# ==============================================================================
# Domain tags
# ==============================================================================

KEY_IMAGE = b"ringct.key_image"
CLSAG_TRANSCRIPT = b"ringct.clsag.v1"
MLSAG_TRANSCRIPT = b"ringct.mlsag.v1"
BORROMEAN_TRANSCRIPT = b"ringct.borromean.v1"
BPPLUS_TRANSCRIPT = b"ringct.bulletproofs_plus.v1"
PEDERSEN_H = b"ringct.pedersen.H"
GENERATOR_VECTOR = b"ringct.generators"
ECDH_SECRET = b"ringct.ecdh.secret"
ECDH_VIEW_TAG = b"ringct.ecdh.view_tag"
ECDH_AMOUNT = b"ringct.ecdh.amount"
ECDH_MASK = b"ringct.ecdh.mask"
ECDH_SEED = b"ringct.ecdh.seed"
CRYPTONOTE_VIEW = b"ringct.cryptonote.view"
CRYPTONOTE_SPEND = b"ringct.cryptonote.spend"
SUBADDRESS = b"ringct.subaddress"


def _hasher(domain: bytes, parts: tuple[bytes, ...], digest_size: int):
    h = hashlib.blake2b(digest_size=digest_size)
    h.update(struct.pack(">B", len(domain)))
    h.update(domain)
    for part in parts:
        h.update(struct.pack(">I", len(part)))
        h.update(part)
    return h


def h_bytes(domain: bytes, *parts: bytes) -> bytes:
    """32-byte Blake2b digest of ``parts`` under ``domain``."""
    return _hasher(domain, parts, 32).digest()


def h_scalar(domain: bytes, *parts: bytes) -> Scalar:
    """Hash to a scalar via a 64-byte digest reduced mod N (bias below 2^-256)."""
    digest = _hasher(domain, parts, 64).digest()
    return Scalar(int.from_bytes(digest, "big") % SECP256K1_N)


def h_point(domain: bytes, *parts: bytes) -> Point:
    """Hash to a curve point with unknown discrete log."""
    return hash_to_point(h_bytes(domain, *parts))
