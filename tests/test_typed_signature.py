"""Tests for TypedSignature."""

from dataclasses import dataclass

import pytest

from ledger_crypto import (
    InvalidFormat,
    Signature,
    TypedSignature,
    VerificationFailed,
    type_tag_of,
)


@dataclass
class Block:
    height: int
    author: str


@dataclass
class Vote:
    height: int
    author: str


@dataclass
class Commit:
    __type_tag__ = "commit/v1"

    block_hash: str


class TestTypedSignature:
    """Test typed signatures bound to a payload type."""

    def test_round_trip(self, keypair):
        block = Block(height=1, author="alice")
        typed = TypedSignature.sign(block, *keypair)
        typed.verify(block, keypair[0])
        assert typed.type_tag == "Block"

    def test_equal_value_verifies(self, keypair):
        """A freshly constructed equal value verifies."""
        typed = TypedSignature.sign(Block(height=1, author="alice"), *keypair)
        typed.verify(Block(height=1, author="alice"), keypair[0])

    def test_different_value_rejected(self, keypair):
        typed = TypedSignature.sign(Block(height=1, author="alice"), *keypair)
        with pytest.raises(VerificationFailed):
            typed.verify(Block(height=2, author="alice"), keypair[0])

    def test_cross_type_rejected(self, keypair):
        """Same fields, different type: the signature does not carry over."""
        typed = TypedSignature.sign(Block(height=1, author="alice"), *keypair)
        with pytest.raises(VerificationFailed):
            typed.verify(Vote(height=1, author="alice"), keypair[0])

    def test_rewrapped_with_wrong_tag_rejected(self, keypair):
        """Re-tagging the raw signature does not make it valid for another type."""
        typed = TypedSignature.sign(Block(height=1, author="alice"), *keypair)
        forged = TypedSignature.new(typed.signature, TypedSignature.for_type(Vote))
        with pytest.raises(VerificationFailed):
            forged.verify(Vote(height=1, author="alice"), keypair[0])

    def test_raw_signature_differs_per_type(self, keypair):
        block_sig = TypedSignature.sign(Block(height=1, author="alice"), *keypair)
        vote_sig = TypedSignature.sign(Vote(height=1, author="alice"), *keypair)
        assert block_sig.signature != vote_sig.signature

    def test_explicit_tag_for_plain_values(self, keypair):
        payload = {"height": 3, "txs": ["a", "b"]}
        typed = TypedSignature.sign(payload, *keypair, type_tag="block-header")
        typed.verify({"txs": ["a", "b"], "height": 3}, keypair[0], type_tag="block-header")
        with pytest.raises(VerificationFailed):
            typed.verify(payload, keypair[0], type_tag="vote")
        with pytest.raises(VerificationFailed):
            typed.verify(payload, keypair[0])

    def test_class_type_tag(self, keypair):
        assert type_tag_of(Commit) == "commit/v1"
        typed = TypedSignature.sign(Commit(block_hash="ab"), *keypair)
        assert typed.type_tag == "commit/v1"
        typed.verify(Commit(block_hash="ab"), keypair[0])

    def test_unserializable_value(self, keypair):
        """Values with no canonical encoding fail as InvalidFormat."""
        with pytest.raises(InvalidFormat) as exc_info:
            TypedSignature.sign({"price": 1.5}, *keypair, type_tag="quote")
        assert exc_info.value.context == "data"

    def test_mismatched_keypair(self, keypair, other_keypair):
        with pytest.raises(VerificationFailed):
            TypedSignature.sign(Block(height=1, author="alice"), keypair[0], other_keypair[1])

    def test_wire_form(self, keypair):
        block = Block(height=5, author="bob")
        typed = TypedSignature.sign(block, *keypair)
        restored = TypedSignature.from_dict(typed.to_dict())
        assert restored == typed
        assert isinstance(restored.signature, Signature)
        restored.verify(block, keypair[0])

    def test_new_wraps_without_checking(self):
        typed = TypedSignature.new(Signature(b"\x00" * 64), "Block")
        assert typed.signature == Signature(b"\x00" * 64)
        assert typed.type_tag == "Block"

    def test_self_referential_value(self, keypair):
        """A payload that contains itself cannot be encoded."""
        payload = []
        payload.append(payload)
        with pytest.raises(InvalidFormat) as exc_info:
            TypedSignature.sign(payload, *keypair, type_tag="loop")
        assert exc_info.value.context == "data"

    def test_from_dict_missing_fields(self, keypair):
        typed = TypedSignature.sign(Block(height=1, author="alice"), *keypair)
        with pytest.raises(InvalidFormat) as exc_info:
            TypedSignature.from_dict({"type": "Block"})
        assert exc_info.value.context == "signature: missing"
        with pytest.raises(InvalidFormat) as exc_info:
            TypedSignature.from_dict({"signature": typed.signature.to_hex()})
        assert exc_info.value.context == "type: missing"
        with pytest.raises(InvalidFormat):
            TypedSignature.from_dict({"signature": typed.signature.to_hex(), "type": 7})
