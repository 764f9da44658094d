"""
ringct: cryptographic primitives for Ring Confidential Transactions.

Usage:
    from ringct import commit, Scalar
    from ringct.rangeproof import prove, verify
    from ringct.signature import RingSignatureKind, sign
    from ringct.address import CryptoNotePrivate, send, receive
    from ringct.batch import batch_verify

Provides:
- Pedersen commitments over secp256k1
- Borromean and Bulletproofs+ rangeproofs
- MLSAG and CLSAG linkable ring signatures
- ECDH stealth addresses, view tags and subaddresses
- Batch verification of proofs and signatures
"""

from ringct.config import DEFAULT_CONFIG, RingCTConfig
from ringct.curve import Point, Scalar
from ringct.errors import (
    BatchError,
    EncodingError,
    ProofError,
    RingCTError,
    SignatureError,
    SigningError,
    SubaddressError,
    VerificationError,
)
from ringct.pedersen import Commitment, add, commit, commit_random, verify_opening
from ringct.types import Enote, EnoteKeys, Ring, key_image

__version__ = "0.1.0"
__all__ = [
    # Group
    "Point",
    "Scalar",
    # Commitments
    "Commitment",
    "add",
    "commit",
    "commit_random",
    "verify_opening",
    # Enotes
    "Enote",
    "EnoteKeys",
    "Ring",
    "key_image",
    # Config
    "DEFAULT_CONFIG",
    "RingCTConfig",
    # Errors
    "RingCTError",
    "EncodingError",
    "SigningError",
    "SubaddressError",
    "VerificationError",
    "SignatureError",
    "ProofError",
    "BatchError",
]
