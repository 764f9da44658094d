"""
Injectable random sources.

Production code uses SystemRandomSource (``secrets``). Tests inject a
DeterministicRandomSource so proofs and signatures are reproducible.
"""

from __future__ import annotations

import hashlib
import secrets
import struct
import threading
from typing import Protocol, runtime_checkable

from ringct.curve import SECP256K1_N, Scalar


@runtime_checkable
class RandomSource(Protocol):
    def random_bytes(self, n: int) -> bytes: ...


class SystemRandomSource:
    """Cryptographically secure randomness from the operating system."""

    def random_bytes(self, n: int) -> bytes:
        return secrets.token_bytes(n)


class DeterministicRandomSource:
    """
    Seeded Blake2b counter stream. For tests only: never use for real keys.

    Thread-safe: the counter is advanced under a lock.
    """

    def __init__(self, seed: bytes | str | int) -> None:
        if isinstance(seed, int):
            seed = seed.to_bytes(32, "big")
        elif isinstance(seed, str):
            seed = seed.encode()
        self._seed = hashlib.blake2b(seed, digest_size=32).digest()
        self._counter = 0
        self._lock = threading.Lock()

    def random_bytes(self, n: int) -> bytes:
        out = bytearray()
        with self._lock:
            while len(out) < n:
                block = hashlib.blake2b(
                    struct.pack(">Q", self._counter), key=self._seed, digest_size=64
                ).digest()
                self._counter += 1
                out.extend(block)
        return bytes(out[:n])


DEFAULT_RNG: RandomSource = SystemRandomSource()


def random_scalar(rng: RandomSource | None = None) -> Scalar:
    """Uniform non-zero scalar from a 64-byte draw reduced mod N."""
    source = rng or DEFAULT_RNG
    while True:
        value = int.from_bytes(source.random_bytes(64), "big") % SECP256K1_N
        if value:
            return Scalar(value)
