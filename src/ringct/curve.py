"""
Group and scalar capability layer over secp256k1.

Provides:
- Scalar: integers modulo the group order N, canonical 32-byte encoding
- Point: group elements with 33-byte compressed encoding (identity = 33 zero bytes)
- hash_to_point: NUMS point derivation (try-and-increment)
- multiexp: Σ k_i·P_i using paired double-scalar multiplication

Every protocol module in ringct touches the curve only through this file,
so swapping the backend means replacing this module and nothing else.

Mathematical foundation:
    secp256k1: y² = x³ + 7 over F_p, prime group order N, cofactor 1.
    Every on-curve point other than the identity generates the full group,
    so a successful decode is also a subgroup check.

References:
    [SEC2]  Certicom Research, "SEC 2: Recommended Elliptic Curve Domain
            Parameters", v2.0, §2.4.1 (secp256k1).
    [H2C]   IETF draft-irtf-cfrg-hash-to-curve, §5 (try-and-increment method).
"""

from __future__ import annotations

import hashlib
import hmac
from collections.abc import Iterable

import ecdsa
import ecdsa.ellipticcurve as ec

from ringct.errors import EncodingError

# ==============================================================================
# secp256k1 curve constants
# ==============================================================================

# Field prime
SECP256K1_P = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEFFFFFC2F

# Group order
SECP256K1_N = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141

SCALAR_BYTES = 32
POINT_BYTES = 33

_CURVE = ecdsa.SECP256k1.curve
_GENERATOR = ecdsa.SECP256k1.generator
_IDENTITY_BYTES = bytes(POINT_BYTES)


# ==============================================================================
# Scalar
# ==============================================================================


class Scalar:
    """
    An element of Z/NZ.

    Scalars holding secrets are cleared with ``zeroize()``. Because a cleared
    scalar changes value, scalars are deliberately unhashable.
    """

    __slots__ = ("_value",)
    __hash__ = None  # type: ignore[assignment]

    def __init__(self, value: int = 0) -> None:
        if not isinstance(value, int):
            raise TypeError(f"Scalar requires an int, got {type(value).__name__}")
        self._value = value % SECP256K1_N

    # -- encoding -------------------------------------------------------------

    @classmethod
    def from_bytes(cls, data: bytes) -> Scalar:
        """
        Decode a canonical 32-byte big-endian scalar.

        Raises:
            EncodingError: If the length is wrong or the value is ≥ N.
        """
        if len(data) != SCALAR_BYTES:
            raise EncodingError(f"Expected {SCALAR_BYTES} scalar bytes, got {len(data)}")
        value = int.from_bytes(data, "big")
        if value >= SECP256K1_N:
            raise EncodingError("Non-canonical scalar encoding")
        return cls(value)

    @classmethod
    def from_hex(cls, hex_str: str) -> Scalar:
        try:
            raw = bytes.fromhex(hex_str)
        except ValueError as e:
            raise EncodingError(f"Invalid hex: {e}") from e
        return cls.from_bytes(raw)

    def to_bytes(self) -> bytes:
        return self._value.to_bytes(SCALAR_BYTES, "big")

    def hex(self) -> str:
        return self.to_bytes().hex()

    # -- arithmetic -----------------------------------------------------------

    @property
    def value(self) -> int:
        return self._value

    def __int__(self) -> int:
        return self._value

    def __index__(self) -> int:
        return self._value

    def __add__(self, other: Scalar | int) -> Scalar:
        return Scalar(self._value + _as_int(other))

    __radd__ = __add__

    def __sub__(self, other: Scalar | int) -> Scalar:
        return Scalar(self._value - _as_int(other))

    def __rsub__(self, other: Scalar | int) -> Scalar:
        return Scalar(_as_int(other) - self._value)

    def __mul__(self, other):
        if isinstance(other, Point):
            return NotImplemented
        return Scalar(self._value * _as_int(other))

    def __rmul__(self, other):
        return Scalar(self._value * _as_int(other))

    def __neg__(self) -> Scalar:
        return Scalar(-self._value)

    def __pow__(self, exponent: int) -> Scalar:
        return Scalar(pow(self._value, exponent, SECP256K1_N))

    def invert(self) -> Scalar:
        """Multiplicative inverse. Raises ZeroDivisionError for zero."""
        if self._value == 0:
            raise ZeroDivisionError("Zero scalar has no inverse")
        return Scalar(pow(self._value, SECP256K1_N - 2, SECP256K1_N))

    def is_zero(self) -> bool:
        return self._value == 0

    def __eq__(self, other: object) -> bool:
        if isinstance(other, int) and not isinstance(other, bool):
            other = Scalar(other)
        if not isinstance(other, Scalar):
            return NotImplemented
        return hmac.compare_digest(self.to_bytes(), other.to_bytes())

    def __bool__(self) -> bool:
        return self._value != 0

    # -- secret handling ------------------------------------------------------

    def copy(self) -> Scalar:
        return Scalar(self._value)

    def zeroize(self) -> None:
        """Overwrite the held value with zero."""
        self._value = 0

    def __repr__(self) -> str:
        # Never print the value: scalars are usually secrets.
        return "Scalar(<redacted>)"


def _as_int(other: Scalar | int) -> int:
    if isinstance(other, Scalar):
        return other._value
    if isinstance(other, int):
        return other
    raise TypeError(f"Unsupported operand type: {type(other).__name__}")


# ==============================================================================
# Point
# ==============================================================================


class Point:
    """
    An element of the secp256k1 group.

    Wraps an ecdsa PointJacobi (or ec.INFINITY for the identity) so that the
    identity behaves like any other element: it negates, encodes and adds.
    """

    __slots__ = ("_inner", "_encoded")

    def __init__(self, inner) -> None:
        self._inner = inner
        self._encoded: bytes | None = None

    @classmethod
    def identity(cls) -> Point:
        return cls(ec.INFINITY)

    def is_identity(self) -> bool:
        return self._inner is ec.INFINITY

    # -- encoding -------------------------------------------------------------

    @classmethod
    def from_bytes(cls, data: bytes) -> Point:
        """
        Decode a 33-byte compressed point.

        The identity is encoded as 33 zero bytes; every other encoding must
        carry a 0x02/0x03 prefix and an x-coordinate below p that lies on the
        curve.

        Raises:
            EncodingError: On bad length, prefix, range or an off-curve x.
        """
        data = bytes(data)
        if len(data) != POINT_BYTES:
            raise EncodingError(f"Expected {POINT_BYTES} point bytes, got {len(data)}")
        if data == _IDENTITY_BYTES:
            return cls.identity()
        prefix = data[0]
        if prefix not in (0x02, 0x03):
            raise EncodingError(f"Invalid prefix byte: 0x{prefix:02x}")

        x = int.from_bytes(data[1:], "big")
        if x >= SECP256K1_P:
            raise EncodingError("Non-canonical x coordinate")
        y_sq = (pow(x, 3, SECP256K1_P) + 7) % SECP256K1_P
        y = pow(y_sq, (SECP256K1_P + 1) // 4, SECP256K1_P)

        # Verify it's actually a quadratic residue (point is on curve)
        if (y * y) % SECP256K1_P != y_sq:
            raise EncodingError("X coordinate does not correspond to a curve point")

        if (y % 2 == 0) != (prefix == 0x02):
            y = SECP256K1_P - y

        point = cls(ec.PointJacobi(_CURVE, x, y, 1, SECP256K1_N))
        point._encoded = data
        return point

    @classmethod
    def from_hex(cls, hex_str: str) -> Point:
        try:
            raw = bytes.fromhex(hex_str)
        except ValueError as e:
            raise EncodingError(f"Invalid hex: {e}") from e
        return cls.from_bytes(raw)

    def to_bytes(self) -> bytes:
        if self._encoded is None:
            if self.is_identity():
                self._encoded = _IDENTITY_BYTES
            else:
                inner = self._inner.scale()
                x, y = int(inner.x()), int(inner.y())
                prefix = b"\x02" if y % 2 == 0 else b"\x03"
                self._encoded = prefix + x.to_bytes(32, "big")
        return self._encoded

    def hex(self) -> str:
        return self.to_bytes().hex()

    # -- group law ------------------------------------------------------------

    def __add__(self, other: Point) -> Point:
        if not isinstance(other, Point):
            return NotImplemented
        if self.is_identity():
            return other
        if other.is_identity():
            return self
        return _wrap(self._inner + other._inner)

    def __neg__(self) -> Point:
        if self.is_identity():
            return self
        return Point(-self._inner)

    def __sub__(self, other: Point) -> Point:
        if not isinstance(other, Point):
            return NotImplemented
        return self + (-other)

    def __mul__(self, k: Scalar | int) -> Point:
        k = _as_int(k) % SECP256K1_N
        if k == 0 or self.is_identity():
            return Point.identity()
        return _wrap(self._inner * k)

    __rmul__ = __mul__

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Point):
            return NotImplemented
        if self.is_identity() or other.is_identity():
            return self.is_identity() and other.is_identity()
        return self._inner == other._inner

    def __hash__(self) -> int:
        return hash(self.to_bytes())

    def __repr__(self) -> str:
        return f"Point({self.hex()})"


def _wrap(inner) -> Point:
    if inner is ec.INFINITY or inner == ec.INFINITY:
        return Point.identity()
    return Point(inner)


# ==============================================================================
# Fixed base point and hash-to-point
# ==============================================================================

G = Point(_GENERATOR)
"""The secp256k1 base point. Blinding generator for commitments and key base."""


def hash_to_point(data: bytes) -> Point:
    """
    Map bytes to a curve point with no known discrete log.

    Algorithm (try-and-increment, per IETF hash-to-curve §5):
        1. x = int(Blake2b256(data)) mod p
        2. While x³+7 mod p is not a quadratic residue: x += 1
        3. y = sqrt(x³+7) mod p, choosing the even root

    Not constant time; only ever applied to public inputs.

    Raises:
        RuntimeError: If no point is found within 1000 increments.
    """
    digest = hashlib.blake2b(data, digest_size=32).digest()
    x = int.from_bytes(digest, "big") % SECP256K1_P

    for _ in range(1000):
        y_sq = (pow(x, 3, SECP256K1_P) + 7) % SECP256K1_P
        # Euler criterion: y_sq is a QR iff y_sq^((p-1)/2) == 1 mod p
        if pow(y_sq, (SECP256K1_P - 1) // 2, SECP256K1_P) == 1:
            y = pow(y_sq, (SECP256K1_P + 1) // 4, SECP256K1_P)
            if y % 2 != 0:
                y = SECP256K1_P - y
            return Point(ec.PointJacobi(_CURVE, x, y, 1, SECP256K1_N))
        x = (x + 1) % SECP256K1_P

    raise RuntimeError("hash_to_point: failed to find a valid point in 1000 iterations")


def as_generator(point: Point) -> Point:
    """Return a copy of ``point`` that precomputes a multiplication table on first use."""
    if point.is_identity():
        raise ValueError("The identity cannot be a generator")
    inner = point._inner.scale()
    return Point(ec.PointJacobi(_CURVE, inner.x(), inner.y(), 1, SECP256K1_N, generator=True))


# ==============================================================================
# Multi-exponentiation
# ==============================================================================


def multiexp(terms: Iterable[tuple[Scalar | int, Point]]) -> Point:
    """
    Compute Σ k_i·P_i.

    Terms sharing a point are merged first, then the remaining terms are
    evaluated two at a time with ecdsa's interleaved ``mul_add``.
    """
    merged: dict[bytes, list] = {}
    for k, point in terms:
        if point.is_identity():
            continue
        key = point.to_bytes()
        slot = merged.get(key)
        if slot is None:
            merged[key] = [_as_int(k) % SECP256K1_N, point]
        else:
            slot[0] = (slot[0] + _as_int(k)) % SECP256K1_N

    live = [(k, p) for k, p in merged.values() if k]
    acc = Point.identity()
    for i in range(0, len(live) - 1, 2):
        (k1, p1), (k2, p2) = live[i], live[i + 1]
        acc = acc + _wrap(p1._inner.mul_add(k1, p2._inner, k2))
    if len(live) % 2:
        k, p = live[-1]
        acc = acc + p * k
    return acc
