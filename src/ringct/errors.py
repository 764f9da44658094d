"""
Error taxonomy for ringct.

Every cryptographic failure surfaces as one of these typed exceptions.
Verification errors carry a single fixed message per class so that a
rejected signature or proof reveals nothing about which check failed.

Hierarchy:
    RingCTError
    ├── EncodingError          (also a ValueError)
    ├── SigningError
    ├── SubaddressError
    └── VerificationError
        ├── SignatureError
        ├── ProofError
        └── BatchError
"""

from __future__ import annotations


class RingCTError(Exception):
    """Base class for all ringct errors."""
    pass


class EncodingError(RingCTError, ValueError):
    """Raised when point, scalar or artifact bytes are malformed or non-canonical."""
    pass


class SigningError(RingCTError):
    """Raised when a ring signature cannot be produced (bad index, key mismatch)."""
    pass


class SubaddressError(RingCTError):
    """Raised on subaddress lookup table misuse or a missing spend key."""
    pass


class VerificationError(RingCTError):
    """Base class for verification rejections. The message never varies."""

    MESSAGE = "verification failed"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.MESSAGE)


class SignatureError(VerificationError):
    """A ring signature failed to verify."""

    MESSAGE = "invalid ring signature"


class ProofError(VerificationError):
    """A rangeproof failed to verify, or could not be constructed."""

    MESSAGE = "invalid rangeproof"


class BatchError(VerificationError):
    """
    The aggregate batch check failed.

    Attributes:
        results: Per-item verdicts when the caller asked for individual
            fallback, otherwise None.
    """

    MESSAGE = "batch verification failed"

    def __init__(self, results: list[bool] | None = None) -> None:
        super().__init__()
        self.results = results

    @property
    def failed_indices(self) -> list[int]:
        """Indices of the items that failed individual verification."""
        if self.results is None:
            return []
        return [i for i, ok in enumerate(self.results) if not ok]
