"""
Unit tests for ringct.signature.mlsag — MLSAG over key matrices and enote spends.
"""

import dataclasses

import pytest

from ringct.config import RingCTConfig
from ringct.curve import Point, Scalar
from ringct.encoding import Reader, Writer
from ringct.errors import SignatureError, SigningError
from ringct.generators import G
from ringct.pedersen import commit
from ringct.rng import DeterministicRandomSource, random_scalar
from ringct.signature import mlsag
from ringct.signature.mlsag import MLSAGSignature
from ringct.types import EnoteKeys, Ring, key_image

RNG = DeterministicRandomSource(b"test_mlsag")
MESSAGE = b"spend authorization"


def _matrix(rows: int, cols: int):
    secrets_ = [[random_scalar(RNG) for _ in range(cols)] for _ in range(rows)]
    return [[G * x for x in row] for row in secrets_], secrets_


def _ring(size: int, secret_index: int, value: int = 50):
    keys = EnoteKeys(random_scalar(RNG), value, random_scalar(RNG))
    enotes = [EnoteKeys(random_scalar(RNG), 7, random_scalar(RNG)).to_enote() for _ in range(size)]
    enotes[secret_index] = keys.to_enote()
    return Ring(enotes), keys


def _with_response(sig: MLSAGSignature, row: int, col: int) -> MLSAGSignature:
    responses = [list(r) for r in sig.responses]
    responses[row][col] = responses[row][col] + 1
    return dataclasses.replace(sig, responses=responses)


# ==============================================================================
# Generic key matrix
# ==============================================================================


class TestMatrixSignature:

    @pytest.mark.parametrize("rows,cols,pi", [(1, 1, 0), (2, 1, 1), (3, 2, 0), (5, 3, 4), (11, 2, 6)])
    def test_sign_verify(self, rows, cols, pi):
        matrix, keys = _matrix(rows, cols)
        sig = mlsag.sign(matrix, pi, keys[pi], MESSAGE, RNG)
        assert len(sig.responses) == rows
        assert len(sig.key_images) == cols
        mlsag.verify(sig, matrix, MESSAGE)

    def test_tampered_response(self):
        matrix, keys = _matrix(4, 2)
        sig = mlsag.sign(matrix, 2, keys[2], MESSAGE, RNG)
        for row in range(4):
            with pytest.raises(SignatureError):
                mlsag.verify(_with_response(sig, row, 1), matrix, MESSAGE)

    def test_tampered_message(self):
        matrix, keys = _matrix(3, 1)
        sig = mlsag.sign(matrix, 0, keys[0], MESSAGE, RNG)
        with pytest.raises(SignatureError):
            mlsag.verify(sig, matrix, MESSAGE + b"!")

    def test_tampered_challenge(self):
        matrix, keys = _matrix(3, 1)
        sig = mlsag.sign(matrix, 0, keys[0], MESSAGE, RNG)
        with pytest.raises(SignatureError):
            mlsag.verify(dataclasses.replace(sig, c0=sig.c0 + 1), matrix, MESSAGE)

    def test_different_matrix(self):
        matrix, keys = _matrix(3, 1)
        sig = mlsag.sign(matrix, 0, keys[0], MESSAGE, RNG)
        other, _ = _matrix(3, 1)
        with pytest.raises(SignatureError):
            mlsag.verify(sig, other, MESSAGE)

    def test_response_count_mismatch(self):
        matrix, keys = _matrix(3, 1)
        sig = mlsag.sign(matrix, 0, keys[0], MESSAGE, RNG)
        with pytest.raises(SignatureError):
            mlsag.verify(dataclasses.replace(sig, responses=sig.responses[:2]), matrix, MESSAGE)

    def test_identity_key_image_rejected(self):
        matrix, keys = _matrix(2, 1)
        sig = mlsag.sign(matrix, 0, keys[0], MESSAGE, RNG)
        with pytest.raises(SignatureError):
            mlsag.verify(dataclasses.replace(sig, key_images=[Point.identity()]), matrix, MESSAGE)

    def test_key_image_deterministic(self):
        """Same key, different nonces and messages: same key image."""
        matrix, keys = _matrix(3, 1)
        sig1 = mlsag.sign(matrix, 1, keys[1], b"one", RNG)
        sig2 = mlsag.sign(matrix, 1, keys[1], b"two", RNG)
        assert sig1.key_images == sig2.key_images
        assert sig1.key_images[0] == key_image(keys[1][0])
        assert sig1.c0 != sig2.c0

    def test_wrong_secret_key(self):
        matrix, keys = _matrix(3, 2)
        with pytest.raises(SigningError):
            mlsag.sign(matrix, 1, keys[0], MESSAGE, RNG)

    def test_zero_secret_key(self):
        matrix, keys = _matrix(2, 1)
        matrix[0][0] = Point.identity()
        with pytest.raises(SigningError):
            mlsag.sign(matrix, 0, [Scalar(0)], MESSAGE, RNG)

    @pytest.mark.parametrize("index", [-1, 3, 10])
    def test_index_out_of_bounds(self, index):
        matrix, keys = _matrix(3, 1)
        with pytest.raises(SigningError):
            mlsag.sign(matrix, index, keys[0], MESSAGE, RNG)

    def test_empty_ring(self):
        with pytest.raises(ValueError):
            mlsag.sign([], 0, [random_scalar(RNG)], MESSAGE, RNG)

    def test_ragged_matrix(self):
        matrix, keys = _matrix(3, 2)
        matrix[1] = matrix[1][:1]
        with pytest.raises(ValueError):
            mlsag.sign(matrix, 0, keys[0], MESSAGE, RNG)

    def test_serialization_roundtrip(self):
        matrix, keys = _matrix(3, 2)
        sig = mlsag.sign(matrix, 2, keys[2], MESSAGE, RNG)
        w = Writer()
        sig.write(w)
        r = Reader(w.getvalue())
        decoded = MLSAGSignature.read(r)
        r.finish()
        assert decoded == sig
        mlsag.verify(decoded, matrix, MESSAGE)


# ==============================================================================
# Ring size policy
# ==============================================================================


class TestRingSizePolicy:

    def test_singleton_ring_accepted_by_default(self):
        matrix, keys = _matrix(1, 1)
        sig = mlsag.sign(matrix, 0, keys[0], MESSAGE, RNG)
        mlsag.verify(sig, matrix, MESSAGE)

    def test_minimum_ring_size_enforced(self):
        config = RingCTConfig(min_ring_size=2)
        matrix, keys = _matrix(1, 1)
        with pytest.raises(SigningError):
            mlsag.sign(matrix, 0, keys[0], MESSAGE, RNG, config)
        sig = mlsag.sign(matrix, 0, keys[0], MESSAGE, RNG)
        with pytest.raises(SignatureError):
            mlsag.verify(sig, matrix, MESSAGE, config)

    def test_sorted_rows_required(self):
        config = RingCTConfig(require_sorted_rings=True)
        matrix, keys = _matrix(4, 1)
        order = sorted(range(4), key=lambda i: matrix[i][0].to_bytes())
        unsorted = [order[1], order[0], order[2], order[3]]
        with pytest.raises(SigningError):
            mlsag.sign([matrix[i] for i in unsorted], 0, keys[unsorted[0]], MESSAGE, RNG, config)

        sorted_matrix = [matrix[i] for i in order]
        sig = mlsag.sign(sorted_matrix, 2, keys[order[2]], MESSAGE, RNG, config)
        mlsag.verify(sig, sorted_matrix, MESSAGE, config)


# ==============================================================================
# Enote spends
# ==============================================================================


class TestEnoteSpend:

    def test_sign_verify(self):
        ring, keys = _ring(5, 3)
        pseudo_out, sig = mlsag.sign_enote(ring, 3, keys, MESSAGE, random_scalar(RNG), RNG)
        assert len(sig.key_images) == 2
        assert sig.key_images[0] == keys.key_image()
        mlsag.verify_enote(sig, ring, pseudo_out, MESSAGE)

    def test_pseudo_out_commits_same_value(self):
        ring, keys = _ring(3, 0, value=99)
        b = random_scalar(RNG)
        pseudo_out, _ = mlsag.sign_enote(ring, 0, keys, MESSAGE, b, RNG)
        assert pseudo_out == commit(99, b)

    def test_wrong_pseudo_out(self):
        ring, keys = _ring(3, 1)
        pseudo_out, sig = mlsag.sign_enote(ring, 1, keys, MESSAGE, random_scalar(RNG), RNG)
        with pytest.raises(SignatureError):
            mlsag.verify_enote(sig, ring, pseudo_out + commit(1, Scalar(0)), MESSAGE)

    def test_value_mismatch_cannot_sign(self):
        """Signing with the wrong value means C − C' is not a commitment to zero."""
        ring, keys = _ring(3, 1, value=50)
        lying = EnoteKeys(keys.owner, 51, keys.blinding)
        with pytest.raises(SigningError):
            mlsag.sign_enote(ring, 1, lying, MESSAGE, random_scalar(RNG), RNG)

    def test_pseudo_out_blinding_equal_to_input(self):
        """A zero commitment-column key has no usable key image; the error says why."""
        ring, keys = _ring(3, 1)
        with pytest.raises(SigningError, match="must differ from the input blinding"):
            mlsag.sign_enote(ring, 1, keys, MESSAGE, keys.blinding.copy(), RNG)

    def test_wrong_index(self):
        ring, keys = _ring(3, 1)
        with pytest.raises(SigningError):
            mlsag.sign_enote(ring, 2, keys, MESSAGE, random_scalar(RNG), RNG)

    def test_tampered_response(self):
        ring, keys = _ring(4, 0)
        pseudo_out, sig = mlsag.sign_enote(ring, 0, keys, MESSAGE, random_scalar(RNG), RNG)
        with pytest.raises(SignatureError):
            mlsag.verify_enote(_with_response(sig, 3, 0), ring, pseudo_out, MESSAGE)

    def test_rejects_plain_matrix_signature(self):
        """verify_enote only accepts the two-column form."""
        ring, keys = _ring(2, 0)
        pseudo_out, sig = mlsag.sign_enote(ring, 0, keys, MESSAGE, random_scalar(RNG), RNG)
        truncated = dataclasses.replace(
            sig, responses=[row[:1] for row in sig.responses], key_images=sig.key_images[:1]
        )
        with pytest.raises(SignatureError):
            mlsag.verify_enote(truncated, ring, pseudo_out, MESSAGE)
