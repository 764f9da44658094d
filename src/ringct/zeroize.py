"""
Scoped clearing of secret scalars.

Usage:
    with Zeroizing() as secrets_:
        alpha = secrets_.track(random_scalar(rng))
        ...
    # alpha is now zero, whether the block returned or raised
"""

from __future__ import annotations

from ringct.curve import Scalar


class Zeroizing:
    """Context manager that zeroizes every tracked scalar on exit."""

    def __init__(self, *scalars: Scalar) -> None:
        self._tracked: list[Scalar] = list(scalars)

    def track(self, scalar: Scalar) -> Scalar:
        self._tracked.append(scalar)
        return scalar

    def track_all(self, scalars: list[Scalar]) -> list[Scalar]:
        self._tracked.extend(scalars)
        return scalars

    def __enter__(self) -> Zeroizing:
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        for scalar in self._tracked:
            scalar.zeroize()
        self._tracked.clear()
        return False
