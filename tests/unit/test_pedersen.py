"""
Unit tests for ringct.pedersen — Pedersen Commitments.

All tests are pure math — no network, no mocks, no external dependencies
beyond the ecdsa library.
"""

import pytest

from ringct.curve import Scalar
from ringct.errors import EncodingError
from ringct.generators import G, H
from ringct.pedersen import (
    MAX_VALUE,
    Commitment,
    add,
    commit,
    commit_random,
    is_balanced,
    sum_commitments,
    verify_opening,
)
from ringct.rng import DeterministicRandomSource, random_scalar

RNG = DeterministicRandomSource(b"test_pedersen")


def _random_r() -> Scalar:
    return random_scalar(RNG)


# ==============================================================================
# Commitment tests
# ==============================================================================


class TestCommit:
    """Tests for commit / verify_opening."""

    def test_formula(self):
        """C = b·G + v·H."""
        r = _random_r()
        assert commit(100, r).point == G * r + H * 100

    def test_zero_amount_is_public_key(self):
        """commit(0, r) should equal r·G (no H component)."""
        r = _random_r()
        assert commit(0, r).point == G * r

    def test_verify_roundtrip(self):
        r = _random_r()
        C = commit(100, r)
        assert verify_opening(C, 100, r) is True

    def test_verify_wrong_amount(self):
        """Changing the amount by even 1 must fail verification."""
        r = _random_r()
        C = commit(100, r)
        assert verify_opening(C, 99, r) is False
        assert verify_opening(C, 101, r) is False

    def test_verify_wrong_blinding(self):
        r = _random_r()
        C = commit(100, r)
        assert verify_opening(C, 100, r + 1) is False

    def test_verify_out_of_range_is_false(self):
        r = _random_r()
        assert verify_opening(commit(1, r), -1, r) is False
        assert verify_opening(commit(1, r), MAX_VALUE + 1, r) is False

    def test_rejects_negative_amount(self):
        with pytest.raises(ValueError):
            commit(-1, _random_r())

    def test_rejects_too_large_amount(self):
        with pytest.raises(ValueError):
            commit(MAX_VALUE + 1, _random_r())

    def test_rejects_non_int(self):
        with pytest.raises(TypeError):
            commit(1.5, _random_r())
        with pytest.raises(TypeError):
            commit(True, _random_r())

    def test_max_value(self):
        r = _random_r()
        assert verify_opening(commit(MAX_VALUE, r), MAX_VALUE, r)

    def test_commit_random(self):
        C, r = commit_random(42, RNG)
        assert verify_opening(C, 42, r)

    def test_hiding(self):
        """Same value under different blindings gives different commitments."""
        assert commit(5, _random_r()) != commit(5, _random_r())


# ==============================================================================
# Homomorphism tests
# ==============================================================================


class TestHomomorphism:

    @pytest.mark.parametrize("v1,v2", [(0, 0), (50, 75), (1, 2**63), (2**32, 2**32)])
    def test_addition(self, v1, v2):
        r1, r2 = _random_r(), _random_r()
        assert commit(v1, r1) + commit(v2, r2) == commit(v1 + v2, r1 + r2)
        assert add(commit(v1, r1), commit(v2, r2)) == commit(v1 + v2, r1 + r2)

    def test_subtraction(self):
        r1, r2 = _random_r(), _random_r()
        assert commit(80, r1) - commit(30, r2) == commit(50, r1 - r2)

    def test_sum_commitments(self):
        rs = [_random_r() for _ in range(4)]
        total = sum_commitments(commit(10 * i, r) for i, r in enumerate(rs))
        assert total == commit(60, rs[0] + rs[1] + rs[2] + rs[3])

    def test_sum_of_nothing_is_zero(self):
        assert sum_commitments([]) == Commitment.zero()


class TestBalance:

    def test_balanced_with_fee(self):
        r_in, r_out1 = _random_r(), _random_r()
        r_out2 = r_in - r_out1
        inputs = [commit(100, r_in)]
        outputs = [commit(60, r_out1), commit(30, r_out2)]
        assert is_balanced(inputs, outputs, fee=10)

    def test_unbalanced(self):
        r_in, r_out = _random_r(), _random_r()
        assert not is_balanced([commit(100, r_in)], [commit(100, r_out)])

    def test_inflation_detected(self):
        r = _random_r()
        assert not is_balanced([commit(100, r)], [commit(101, r)])


# ==============================================================================
# Encoding tests
# ==============================================================================


class TestCommitmentEncoding:

    def test_roundtrip(self):
        C = commit(7, _random_r())
        assert Commitment.from_bytes(C.to_bytes()) == C
        assert Commitment.from_hex(C.hex()) == C

    def test_zero_roundtrip(self):
        assert Commitment.from_bytes(Commitment.zero().to_bytes()) == Commitment.zero()

    def test_rejects_garbage(self):
        with pytest.raises(EncodingError):
            Commitment.from_bytes(b"\x05" * 33)
