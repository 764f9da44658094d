"""
ringct.address — stealth addresses, subaddresses and the send/receive pair.

Usage:
    keys = CryptoNotePrivate.generate()
    commitment, proof, output = send(keys.to_public(), 1_000)
    [received] = receive(keys, [output])
    assert received.value == 1_000

``receive`` accepts any key set that exposes ``view_private`` and
``recognize(base_spend, shared_secret)``: CryptoNote keys, master keys with
a subaddress table, and their view-only counterparts.
"""

from __future__ import annotations

import logging
from typing import Protocol, Union

from ringct.address.cryptonote import CryptoNotePrivate, CryptoNotePrivateView, CryptoNotePublic
from ringct.address.ecdh import (
    decrypt_amount,
    derive_commitment_mask,
    derive_private_key,
    derive_public_key,
    derive_shared_secret,
    derive_view_tag,
    encrypt_amount,
    private_key_from_seed,
)
from ringct.address.output import Coordinates, OwnedKey, Output, ReceivedOutput
from ringct.address.subaddress import (
    MasterPrivateKeys,
    MasterPrivateView,
    SubaddressPublic,
    subaddress_scalar,
)
from ringct.config import RingCTConfig
from ringct.curve import Point, Scalar
from ringct.generators import G
from ringct.pedersen import Commitment, commit, verify_opening
from ringct.rangeproof import RangeProof, RangeProofKind, prove
from ringct.rng import RandomSource, random_scalar
from ringct.zeroize import Zeroizing

logger = logging.getLogger("ringct.address")

Address = Union[CryptoNotePublic, SubaddressPublic]


class ReceivingKeys(Protocol):
    @property
    def view_private(self) -> Scalar: ...

    def recognize(self, base_spend: Point, shared_secret: Scalar) -> OwnedKey | None: ...


def send(
    address: Address,
    amount: int,
    kind: RangeProofKind = RangeProofKind.BULLETPROOFS_PLUS,
    rng: RandomSource | None = None,
    config: RingCTConfig | None = None,
) -> tuple[Commitment, RangeProof, Output]:
    """
    Create an output paying ``amount`` to ``address``.

    The commitment blinding is derived from the shared secret, so the
    receiver can reopen the commitment without any extra data.

    Args:
        address: Primary address or subaddress of the receiver.
        amount: Value to send.
        kind: Rangeproof backend.
        rng: Random source for the transaction key and the proof.
        config: Protocol limits.

    Returns:
        (commitment, rangeproof, output)

    Raises:
        ProofError: If ``amount`` is outside the provable range.
    """
    with Zeroizing() as secrets_:
        r = secrets_.track(random_scalar(rng))
        base = address.spend if address.is_subaddress else G
        transaction_key = base * r
        shared_secret = secrets_.track(derive_shared_secret(r, address.view))

        mask = derive_commitment_mask(shared_secret)
        proof = prove([amount], [mask], kind=kind, rng=rng, config=config)
        commitment = commit(amount, mask)
        output = Output(
            public_key=derive_public_key(address.spend, shared_secret),
            transaction_key=transaction_key,
            view_tag=derive_view_tag(shared_secret),
            encrypted_amount=encrypt_amount(amount, shared_secret),
            commitment=commitment,
        )
    return commitment, proof, output


def _open(index: int, keys: ReceivingKeys, output: Output) -> ReceivedOutput | None:
    with Zeroizing() as secrets_:
        shared_secret = secrets_.track(derive_shared_secret(keys.view_private, output.transaction_key))
        if derive_view_tag(shared_secret) != output.view_tag:
            return None

        owned = keys.recognize(output.public_key - G * shared_secret, shared_secret)
        if owned is None:
            logger.debug(f"Output {index}: view tag matched but spend key did not")
            return None

        value = decrypt_amount(output.encrypted_amount, shared_secret)
        blinding = derive_commitment_mask(shared_secret)
        if not verify_opening(output.commitment, value, blinding):
            secrets_.track(blinding)
            if owned.private_key is not None:
                secrets_.track(owned.private_key)
            logger.debug(f"Output {index}: commitment does not open")
            return None

        return ReceivedOutput(
            index=index,
            output=output,
            value=value,
            blinding=blinding,
            private_key=owned.private_key,
            coordinates=owned.coordinates,
        )


def receive(keys: ReceivingKeys, outputs: list[Output]) -> list[ReceivedOutput]:
    """
    Scan ``outputs`` and open the ones owned by ``keys``.

    The view tag is checked first; only on a match are the spend key and
    the commitment opening checked. Outputs that fail any step are skipped.

    Returns:
        The owned outputs, in scan order. Empty when nothing matches.

    Raises:
        SubaddressError: If master keys are used before their subaddress
            table has been initialized, whatever ``outputs`` holds.
    """
    if isinstance(keys, (MasterPrivateKeys, MasterPrivateView)):
        keys.check_initialized()
    received = []
    for index, output in enumerate(outputs):
        found = _open(index, keys, output)
        if found is not None:
            received.append(found)
    logger.debug(f"Scanned {len(outputs)} outputs, {len(received)} owned")
    return received


__all__ = [
    "Address",
    "Coordinates",
    "CryptoNotePrivate",
    "CryptoNotePrivateView",
    "CryptoNotePublic",
    "MasterPrivateKeys",
    "MasterPrivateView",
    "Output",
    "OwnedKey",
    "ReceivedOutput",
    "ReceivingKeys",
    "SubaddressPublic",
    "decrypt_amount",
    "derive_commitment_mask",
    "derive_private_key",
    "derive_public_key",
    "derive_shared_secret",
    "derive_view_tag",
    "encrypt_amount",
    "private_key_from_seed",
    "receive",
    "send",
    "subaddress_scalar",
]
