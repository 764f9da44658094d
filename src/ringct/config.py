"""
Protocol limits and policy switches.

RingCTConfig is immutable and validated on construction. Every public
operation accepts an optional ``config``; when omitted DEFAULT_CONFIG applies.

Args:
    bit_range:              Width of the proven range [0, 2^bit_range).
    max_aggregation_size:   Max values in one Bulletproofs+ proof (power of two).
    max_batch_group_size:   Max proofs folded into one multi-exponentiation.
    min_ring_size:          Smallest ring accepted by sign and verify.
    require_sorted_rings:   Reject rings that are not in canonical order.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _is_power_of_two(n: int) -> bool:
    return n >= 1 and (n & (n - 1)) == 0


class RingCTConfig(BaseModel):
    """Limits shared by the rangeproof, signature and batch engines."""

    model_config = ConfigDict(frozen=True)

    bit_range: int = Field(default=64, ge=1, le=64)
    max_aggregation_size: int = Field(default=256, ge=1)
    max_batch_group_size: int = Field(default=256, ge=1)
    min_ring_size: int = Field(default=1, ge=1)
    require_sorted_rings: bool = False

    @field_validator("bit_range", "max_aggregation_size")
    @classmethod
    def _power_of_two(cls, value: int) -> int:
        if not _is_power_of_two(value):
            raise ValueError(f"must be a power of two, got {value}")
        return value

    @property
    def max_value(self) -> int:
        """Largest value a rangeproof accepts."""
        return (1 << self.bit_range) - 1


DEFAULT_CONFIG = RingCTConfig()


def resolve(config: RingCTConfig | None) -> RingCTConfig:
    return DEFAULT_CONFIG if config is None else config
