"""
Ledger Crypto v0.1
Identity and integrity primitives for the ledger

Hashing: Hash256 (blake3)
Signing: PublicKey, PrivateKey, Signature, TypedSignature (ed25519)
Keys: check_keypair_match, generate_keypair, generate_random_keypair
"""

from .canonical import canonicalize, canonicalize_bytes
from .errors import CryptoError, InvalidFormat, VerificationFailed
from .crypto import (
    HASH_SIZE,
    KEY_SIZE,
    SIGNATURE_SIZE,
    Hash256,
    PublicKey,
    PrivateKey,
    Signature,
    TypedSignature,
    type_tag_of,
    check_keypair_match,
    generate_keypair,
    generate_random_keypair,
)

__version__ = "0.1.0"
__all__ = [
    # Canonical
    "canonicalize",
    "canonicalize_bytes",
    # Errors
    "CryptoError",
    "InvalidFormat",
    "VerificationFailed",
    # Types
    "HASH_SIZE",
    "KEY_SIZE",
    "SIGNATURE_SIZE",
    "Hash256",
    "PublicKey",
    "PrivateKey",
    "Signature",
    "TypedSignature",
    "type_tag_of",
    # Keys
    "check_keypair_match",
    "generate_keypair",
    "generate_random_keypair",
]
