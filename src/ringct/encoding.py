"""
Byte layout helpers for serializing ringct artifacts.

Layout is big-endian throughout: scalars are 32 bytes, points 33 bytes,
counts are u32. Readers raise EncodingError on truncation or trailing bytes.
"""

from __future__ import annotations

import struct

from ringct.curve import POINT_BYTES, SCALAR_BYTES, Point, Scalar
from ringct.errors import EncodingError

# Upper bound on any decoded count; rejects absurd lengths before allocating.
MAX_COUNT = 1 << 20


class Writer:
    def __init__(self) -> None:
        self._buf = bytearray()

    def u8(self, value: int) -> Writer:
        self._buf += struct.pack(">B", value)
        return self

    def u32(self, value: int) -> Writer:
        self._buf += struct.pack(">I", value)
        return self

    def u64(self, value: int) -> Writer:
        self._buf += struct.pack(">Q", value)
        return self

    def raw(self, data: bytes) -> Writer:
        self._buf += data
        return self

    def scalar(self, s: Scalar) -> Writer:
        self._buf += s.to_bytes()
        return self

    def point(self, p: Point) -> Writer:
        self._buf += p.to_bytes()
        return self

    def scalars(self, items: list[Scalar]) -> Writer:
        self.u32(len(items))
        for s in items:
            self.scalar(s)
        return self

    def points(self, items: list[Point]) -> Writer:
        self.u32(len(items))
        for p in items:
            self.point(p)
        return self

    def getvalue(self) -> bytes:
        return bytes(self._buf)


class Reader:
    def __init__(self, data: bytes) -> None:
        self._data = bytes(data)
        self._pos = 0

    def _take(self, n: int) -> bytes:
        end = self._pos + n
        if end > len(self._data):
            raise EncodingError(
                f"Truncated input: need {n} bytes at offset {self._pos}, have {len(self._data) - self._pos}"
            )
        chunk = self._data[self._pos:end]
        self._pos = end
        return chunk

    def u8(self) -> int:
        return struct.unpack(">B", self._take(1))[0]

    def u32(self) -> int:
        return struct.unpack(">I", self._take(4))[0]

    def u64(self) -> int:
        return struct.unpack(">Q", self._take(8))[0]

    def count(self) -> int:
        n = self.u32()
        if n > MAX_COUNT:
            raise EncodingError(f"Length {n} exceeds limit {MAX_COUNT}")
        return n

    def raw(self, n: int) -> bytes:
        return self._take(n)

    def scalar(self) -> Scalar:
        return Scalar.from_bytes(self._take(SCALAR_BYTES))

    def point(self) -> Point:
        return Point.from_bytes(self._take(POINT_BYTES))

    def scalars(self) -> list[Scalar]:
        return [self.scalar() for _ in range(self.count())]

    def points(self) -> list[Point]:
        return [self.point() for _ in range(self.count())]

    def finish(self) -> None:
        if self._pos != len(self._data):
            raise EncodingError(f"{len(self._data) - self._pos} trailing bytes")
