"""Test fixtures."""

import pytest

from ledger_crypto import Hash256, generate_keypair


@pytest.fixture
def keypair():
    """Deterministic keypair used across the suite."""
    return generate_keypair("test-seed")


@pytest.fixture
def other_keypair():
    """A second keypair that does not match the first."""
    return generate_keypair("other-seed")


@pytest.fixture
def message_hash():
    return Hash256.hash(b"hello")
