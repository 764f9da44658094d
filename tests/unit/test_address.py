"""
Unit tests for ringct.address — CryptoNote keys, subaddresses and the
send / receive pair.
"""

from unittest.mock import patch

import pytest

from ringct.address import (
    CryptoNotePrivate,
    CryptoNotePublic,
    MasterPrivateKeys,
    Output,
    SubaddressPublic,
    derive_commitment_mask,
    derive_shared_secret,
    receive,
    send,
    subaddress_scalar,
)
from ringct.config import RingCTConfig
from ringct.curve import Point, Scalar
from ringct.errors import EncodingError, ProofError, SubaddressError
from ringct.generators import G
from ringct.pedersen import commit, verify_opening
from ringct.rangeproof import RangeProofKind, verify
from ringct.rng import DeterministicRandomSource, random_scalar
from ringct.signature import RingSignatureKind, sign
from ringct.signature import verify as verify_signature
from ringct.types import EnoteKeys, Ring

RNG = DeterministicRandomSource(b"test_address")
SMALL = RingCTConfig(bit_range=8)


def _send(address, amount, **kwargs):
    kwargs.setdefault("config", SMALL)
    return send(address, amount, rng=RNG, **kwargs)


def _master() -> MasterPrivateKeys:
    keys = MasterPrivateKeys(random_scalar(RNG), random_scalar(RNG))
    keys.init(2, 3)
    return keys


# ==============================================================================
# CryptoNote keys
# ==============================================================================


class TestCryptoNoteKeys:

    def test_public_keys(self):
        keys = CryptoNotePrivate.generate(RNG)
        public = keys.to_public()
        assert public.view == G * keys.view
        assert public.spend == G * keys.spend
        assert public.is_subaddress is False

    def test_from_seed_deterministic(self):
        a = CryptoNotePrivate.from_seed(b"wallet seed")
        b = CryptoNotePrivate.from_seed(b"wallet seed")
        assert a.to_public() == b.to_public()
        assert a.view != a.spend

    def test_rejects_zero_keys(self):
        with pytest.raises(ValueError):
            CryptoNotePrivate(Scalar(0), random_scalar(RNG))

    def test_view_only(self):
        keys = CryptoNotePrivate.generate(RNG)
        view_only = keys.to_view_only()
        assert view_only.to_public() == keys.to_public()
        view_only.zeroize()
        assert not keys.view.is_zero()

    def test_address_roundtrip(self):
        public = CryptoNotePrivate.generate(RNG).to_public()
        assert CryptoNotePublic.from_bytes(public.to_bytes()) == public

    def test_zeroize(self):
        keys = CryptoNotePrivate.generate(RNG)
        keys.zeroize()
        assert keys.view.is_zero() and keys.spend.is_zero()


# ==============================================================================
# Subaddresses
# ==============================================================================


class TestSubaddress:

    def test_derivation(self):
        keys = _master()
        m = subaddress_scalar(keys.view, 1, 2)
        sub = keys.get_subaddress(1, 2)
        assert sub.spend == G * keys.spend + G * m
        assert sub.view == sub.spend * keys.view
        assert sub.spend == G * keys.subaddress_spend_private(1, 2)
        assert sub.is_subaddress is True

    def test_indices_unlinkable(self):
        keys = _master()
        subs = [keys.get_subaddress(x, y) for x in range(2) for y in range(3)]
        spends = {s.spend for s in subs}
        views = {s.view for s in subs}
        assert len(spends) == len(views) == 6
        assert G * keys.spend not in spends

    def test_index_range(self):
        with pytest.raises(ValueError):
            subaddress_scalar(random_scalar(RNG), -1, 0)
        with pytest.raises(ValueError):
            subaddress_scalar(random_scalar(RNG), 0, 2**32)

    def test_table(self):
        keys = _master()
        assert keys.is_initialized
        assert keys.export_coordinates() == [(x, y) for x in range(2) for y in range(3)]

    def test_get_subaddress_requires_registration(self):
        keys = _master()
        with pytest.raises(SubaddressError, match="not initialized"):
            keys.get_subaddress(7, 7)
        keys.init_coordinates(7, 7)
        assert keys.get_subaddress(7, 7).spend == keys.spend_key_at(7, 7)

    def test_get_subaddress_uninitialized_table(self):
        keys = MasterPrivateKeys(random_scalar(RNG), random_scalar(RNG))
        with pytest.raises(SubaddressError, match="not initialized"):
            keys.get_subaddress(0, 0)

    def test_import_export(self):
        keys = MasterPrivateKeys(random_scalar(RNG), random_scalar(RNG))
        keys.import_coordinates([(5, 9), (0, 1)])
        assert keys.export_coordinates() == [(0, 1), (5, 9)]

    def test_recover_coordinates(self):
        keys = _master()
        sub = keys.get_subaddress(1, 1)
        s = random_scalar(RNG)
        P = sub.spend + G * s
        assert keys.recover_coordinates(P, s) == (1, 1)

    def test_recover_unknown_key(self):
        keys = _master()
        with pytest.raises(SubaddressError, match="not found"):
            keys.recover_coordinates(G * random_scalar(RNG), random_scalar(RNG))

    def test_uninitialized_table(self):
        keys = MasterPrivateKeys(random_scalar(RNG), random_scalar(RNG))
        assert not keys.is_initialized
        with pytest.raises(SubaddressError, match="not initialized"):
            keys.recover_coordinates(G, Scalar(1))

    def test_view_only_carries_table(self):
        keys = _master()
        view_only = keys.to_view_only()
        assert view_only.export_coordinates() == keys.export_coordinates()
        assert view_only.get_subaddress(1, 2) == keys.get_subaddress(1, 2)

    def test_address_roundtrip(self):
        sub = _master().get_subaddress(0, 1)
        assert SubaddressPublic.from_bytes(sub.to_bytes()) == sub

    def test_address_rejects_trailing(self):
        sub = _master().get_subaddress(0, 1)
        with pytest.raises(EncodingError):
            SubaddressPublic.from_bytes(sub.to_bytes() + b"\x00")


# ==============================================================================
# send / receive
# ==============================================================================


class TestSendReceive:

    def test_primary_address_roundtrip(self):
        keys = CryptoNotePrivate.generate(RNG)
        commitment, proof, output = _send(keys.to_public(), 200)
        verify(proof, [commitment], SMALL)

        [received] = receive(keys, [output])
        assert received.index == 0
        assert received.value == 200
        assert received.coordinates is None
        assert verify_opening(commitment, 200, received.blinding)
        assert G * received.private_key == output.public_key

    def test_unrelated_keys_no_match(self):
        keys = CryptoNotePrivate.generate(RNG)
        stranger = CryptoNotePrivate.generate(RNG)
        _, _, output = _send(keys.to_public(), 10)
        assert receive(stranger, [output]) == []

    def test_scan_picks_owned_outputs(self):
        alice = CryptoNotePrivate.generate(RNG)
        bob = CryptoNotePrivate.generate(RNG)
        outputs = [
            _send(bob.to_public(), 1)[2],
            _send(alice.to_public(), 2)[2],
            _send(bob.to_public(), 3)[2],
            _send(alice.to_public(), 4)[2],
        ]
        received = receive(alice, outputs)
        assert [(r.index, r.value) for r in received] == [(1, 2), (3, 4)]

    def test_one_time_keys_unlinkable(self):
        keys = CryptoNotePrivate.generate(RNG)
        outputs = [_send(keys.to_public(), 5)[2] for _ in range(3)]
        assert len({o.public_key for o in outputs}) == 3
        assert len({o.transaction_key for o in outputs}) == 3

    def test_view_only_receive(self):
        keys = CryptoNotePrivate.generate(RNG)
        _, _, output = _send(keys.to_public(), 77)
        [received] = receive(keys.to_view_only(), [output])
        assert received.value == 77
        assert received.private_key is None
        with pytest.raises(ValueError):
            received.enote_keys()

    def test_tampered_amount_skipped(self):
        keys = CryptoNotePrivate.generate(RNG)
        _, _, output = _send(keys.to_public(), 8)
        flipped = bytes([output.encrypted_amount[0] ^ 1]) + output.encrypted_amount[1:]
        forged = Output(output.public_key, output.transaction_key, output.view_tag, flipped, output.commitment)
        assert receive(keys, [forged]) == []

    def test_tampered_view_tag_skipped(self):
        keys = CryptoNotePrivate.generate(RNG)
        _, _, output = _send(keys.to_public(), 8)
        forged = Output(
            output.public_key, output.transaction_key, (output.view_tag + 1) % 256,
            output.encrypted_amount, output.commitment,
        )
        assert receive(keys, [forged]) == []

    def test_borromean_kind(self):
        keys = CryptoNotePrivate.generate(RNG)
        commitment, proof, output = _send(keys.to_public(), 3, kind=RangeProofKind.BORROMEAN)
        assert proof.kind == RangeProofKind.BORROMEAN
        verify(proof, [commitment], SMALL)
        assert receive(keys, [output])[0].value == 3

    def test_amount_out_of_range(self):
        keys = CryptoNotePrivate.generate(RNG)
        with pytest.raises(ProofError):
            _send(keys.to_public(), 256)

    def test_default_config_full_range(self):
        keys = CryptoNotePrivate.generate(RNG)
        commitment, proof, output = send(keys.to_public(), 2**64 - 1, rng=RNG)
        verify(proof, [commitment])
        assert receive(keys, [output])[0].value == 2**64 - 1

    def test_scan_secrets_cleared(self):
        keys = CryptoNotePrivate.generate(RNG)
        stranger = CryptoNotePrivate.generate(RNG)
        outputs = [_send(keys.to_public(), 21)[2], _send(stranger.to_public(), 22)[2]]
        derived = []

        def capture(private, public):
            secret = derive_shared_secret(private, public)
            derived.append(secret)
            return secret

        with patch("ringct.address.derive_shared_secret", side_effect=capture):
            [received] = receive(keys, outputs)
        assert len(derived) == 2
        assert all(s.is_zero() for s in derived)
        assert received.value == 21
        assert not received.blinding.is_zero()
        assert G * received.private_key == outputs[0].public_key

    def test_rejected_opening_clears_secrets(self):
        keys = CryptoNotePrivate.generate(RNG)
        _, _, output = _send(keys.to_public(), 8)
        flipped = bytes([output.encrypted_amount[0] ^ 1]) + output.encrypted_amount[1:]
        forged = Output(output.public_key, output.transaction_key, output.view_tag, flipped, output.commitment)
        masks = []

        def capture(shared_secret):
            mask = derive_commitment_mask(shared_secret)
            masks.append(mask)
            return mask

        with patch("ringct.address.derive_commitment_mask", side_effect=capture):
            assert receive(keys, [forged]) == []
        assert [m.is_zero() for m in masks] == [True]

    def test_output_roundtrip(self):
        keys = CryptoNotePrivate.generate(RNG)
        _, _, output = _send(keys.to_public(), 12)
        decoded = Output.from_bytes(output.to_bytes())
        assert decoded == output
        assert receive(keys, [decoded])[0].value == 12

    def test_output_rejects_identity_key(self):
        keys = CryptoNotePrivate.generate(RNG)
        _, _, output = _send(keys.to_public(), 12)
        forged = Output(Point.identity(), output.transaction_key, 0, bytes(8), output.commitment)
        with pytest.raises(EncodingError):
            Output.from_bytes(forged.to_bytes())


class TestSubaddressSendReceive:

    def test_roundtrip(self):
        keys = _master()
        sub = keys.get_subaddress(1, 2)
        commitment, _, output = _send(sub, 40)
        [received] = receive(keys, [output])
        assert received.coordinates == (1, 2)
        assert received.value == 40
        assert verify_opening(commitment, 40, received.blinding)
        assert G * received.private_key == output.public_key

    def test_transaction_key_uses_subaddress_spend(self):
        keys = _master()
        sub = keys.get_subaddress(0, 2)
        _, _, output = _send(sub, 1)
        # R = r·D: the receiver's a·R equals the sender's r·C
        assert receive(keys, [output])[0].coordinates == (0, 2)

    def test_view_only_master(self):
        keys = _master()
        _, _, output = _send(keys.get_subaddress(1, 0), 9)
        [received] = receive(keys.to_view_only(), [output])
        assert received.coordinates == (1, 0)
        assert received.private_key is None

    def test_unregistered_index_not_found(self):
        keys = _master()
        D = keys.spend_key_at(7, 7)
        _, _, output = _send(SubaddressPublic(view=D * keys.view, spend=D), 9)
        assert receive(keys, [output]) == []

    def test_uninitialized_table_raises(self):
        keys = _master()
        _, _, output = _send(keys.get_subaddress(0, 0), 9)
        fresh = MasterPrivateKeys(keys.view.copy(), keys.spend.copy())
        with pytest.raises(SubaddressError):
            receive(fresh, [output])

    def test_uninitialized_table_raises_for_unowned_outputs(self):
        """An empty table is reported up front, never depending on view tags."""
        keys = MasterPrivateKeys(random_scalar(RNG), random_scalar(RNG))
        stranger = CryptoNotePrivate.generate(RNG)
        outputs = [_send(stranger.to_public(), v)[2] for v in range(5)]
        for scan in (keys, keys.to_view_only()):
            with pytest.raises(SubaddressError, match="not initialized"):
                receive(scan, outputs)
            with pytest.raises(SubaddressError, match="not initialized"):
                receive(scan, [])

    def test_other_master_no_match(self):
        keys, other = _master(), _master()
        _, _, output = _send(keys.get_subaddress(1, 1), 9)
        assert receive(other, [output]) == []


# ==============================================================================
# End to end: receive, then spend
# ==============================================================================


class TestSpendReceived:

    def test_spend_with_clsag(self):
        keys = CryptoNotePrivate.generate(RNG)
        _, _, output = _send(keys.to_public(), 60)
        [received] = receive(keys, [output])

        enote_keys = received.enote_keys()
        mine = enote_keys.to_enote()
        assert mine.owner == output.public_key
        assert mine.commitment == output.commitment

        decoys = [EnoteKeys(random_scalar(RNG), 1, random_scalar(RNG)).to_enote() for _ in range(3)]
        ring = Ring(decoys + [mine])
        ring.sort()
        pi = ring.index(mine)
        pseudo_out, sig = sign(RingSignatureKind.CLSAG, ring, pi, enote_keys, b"tx", random_scalar(RNG), RNG)
        verify_signature(sig, ring, pseudo_out, b"tx")
        assert pseudo_out.point != commit(60, received.blinding).point
