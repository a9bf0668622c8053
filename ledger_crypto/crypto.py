"""
Cryptographic primitives: ed25519 + blake3

Hashes, keys, signatures and typed signatures shared by every layer of the
ledger. Higher layers only ever see these value types; PyNaCl and blake3
objects never leave this module.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Generic, Optional, Tuple, TypeVar, Union
import logging

import blake3
from nacl.exceptions import BadSignatureError
from nacl.exceptions import CryptoError as NaclCryptoError
from nacl.signing import SigningKey, VerifyKey

from .canonical import canonicalize_bytes
from .errors import InvalidFormat, VerificationFailed

logger = logging.getLogger(__name__)

BytesLike = Union[bytes, bytearray, memoryview, str]
T = TypeVar("T")

HASH_SIZE = 32
KEY_SIZE = 32
SIGNATURE_SIZE = 64
KEYPAIR_CHECK_MESSAGE = b"Some Random Message"


def _as_bytes(data: BytesLike) -> bytes:
    if isinstance(data, str):
        return data.encode("utf-8")
    if isinstance(data, (bytes, bytearray, memoryview)):
        return bytes(data)
    raise TypeError(f"Expected bytes-like or str, got {type(data).__name__}")


def _raw_bytes(data: Union[bytes, bytearray, memoryview]) -> bytes:
    if not isinstance(data, (bytes, bytearray, memoryview)):
        raise TypeError(f"Expected raw bytes, got {type(data).__name__}")
    return bytes(data)


def _from_hex(hex_string: str, context: str) -> bytes:
    try:
        return bytes.fromhex(hex_string)
    except (TypeError, ValueError):
        raise InvalidFormat(f"{context}: invalid hex") from None


def _wire_field(d: Dict[str, Any], name: str, context: str) -> Any:
    try:
        return d[name]
    except (KeyError, TypeError):
        raise InvalidFormat(f"{context}: missing") from None


def _check_length(data: bytes, expected: int, context: str) -> None:
    if len(data) != expected:
        raise InvalidFormat(f"{context}: expected {expected} bytes, got {len(data)}")


@dataclass(frozen=True, order=True)
class Hash256:
    """A 32-byte BLAKE3 hash. Ordered byte-lexicographically."""

    digest: bytes

    def __post_init__(self):
        digest = _raw_bytes(self.digest)
        _check_length(digest, HASH_SIZE, "hash")
        object.__setattr__(self, "digest", digest)

    @staticmethod
    def zero() -> "Hash256":
        return Hash256(bytes(HASH_SIZE))

    @staticmethod
    def hash(data: BytesLike) -> "Hash256":
        """Hashes the given data."""
        return Hash256(blake3.blake3(_as_bytes(data)).digest())

    @staticmethod
    def from_array(data: Union[bytes, bytearray, memoryview]) -> "Hash256":
        return Hash256(bytes(data))

    def aggregate(self, other: "Hash256") -> "Hash256":
        """Hash of the concatenation `self || other`. Not commutative."""
        return Hash256.hash(self.digest + other.digest)

    def to_hex(self) -> str:
        return self.digest.hex()

    @staticmethod
    def from_hex(hex_string: str) -> "Hash256":
        return Hash256(_from_hex(hex_string, "hash"))

    def to_dict(self) -> Dict[str, Any]:
        return {"hash": self.to_hex()}

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "Hash256":
        return Hash256.from_hex(_wire_field(d, "hash", "hash"))

    def __bytes__(self) -> bytes:
        return self.digest

    def __str__(self) -> str:
        return self.to_hex()


@dataclass(frozen=True, order=True)
class PublicKey:
    key: bytes

    def __post_init__(self):
        key = _raw_bytes(self.key)
        _check_length(key, KEY_SIZE, "public key")
        object.__setattr__(self, "key", key)

    def to_hex(self) -> str:
        return self.key.hex()

    @staticmethod
    def from_hex(hex_string: str) -> "PublicKey":
        return PublicKey(_from_hex(hex_string, "public key"))

    def to_dict(self) -> Dict[str, Any]:
        return {"key": self.to_hex()}

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "PublicKey":
        return PublicKey.from_hex(_wire_field(d, "key", "public key"))

    def __bytes__(self) -> bytes:
        return self.key

    def __str__(self) -> str:
        return self.to_hex()


@dataclass(frozen=True, order=True)
class PrivateKey:
    """A private key. Never rendered in cleartext by repr() or str()."""

    key: bytes = field(repr=False)

    def __post_init__(self):
        key = _raw_bytes(self.key)
        # The length is safe to report, the bytes are not.
        _check_length(key, KEY_SIZE, "private key")
        object.__setattr__(self, "key", key)

    def to_hex(self) -> str:
        return self.key.hex()

    @staticmethod
    def from_hex(hex_string: str) -> "PrivateKey":
        return PrivateKey(_from_hex(hex_string, "private key"))

    def to_dict(self) -> Dict[str, Any]:
        return {"key": self.to_hex()}

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "PrivateKey":
        return PrivateKey.from_hex(_wire_field(d, "key", "private key"))

    def __bytes__(self) -> bytes:
        return self.key

    def __repr__(self) -> str:
        return "PrivateKey([omitted])"

    __str__ = __repr__


def _verify_key(public_key: PublicKey) -> VerifyKey:
    try:
        return VerifyKey(bytes(public_key))
    except (NaclCryptoError, TypeError, ValueError):
        raise InvalidFormat(f"public key: {public_key}") from None


def _signing_key(private_key: PrivateKey) -> SigningKey:
    try:
        return SigningKey(bytes(private_key))
    except (NaclCryptoError, TypeError, ValueError):
        raise InvalidFormat("private key: [omitted]") from None


def _sign_raw(data: Hash256, private_key: PrivateKey) -> "Signature":
    signed = _signing_key(private_key).sign(bytes(data))
    return Signature(signed.signature)


@dataclass(frozen=True, order=True)
class Signature:
    """A raw Ed25519 signature over a Hash256."""

    signature: bytes

    def __post_init__(self):
        object.__setattr__(self, "signature", _raw_bytes(self.signature))

    @staticmethod
    def sign(data: Hash256, public_key: PublicKey, private_key: PrivateKey) -> "Signature":
        """Creates a new signature from the given data and keys."""
        check_keypair_match(public_key, private_key)
        return _sign_raw(data, private_key)

    def verify(self, data: Hash256, public_key: PublicKey) -> None:
        """
        Verifies the signature against the given data and public key.

        Raises InvalidFormat if the signature or key cannot be decoded and
        VerificationFailed if the check itself fails.
        """
        if len(self.signature) != SIGNATURE_SIZE:
            raise InvalidFormat(f"signature: {self}")
        verify_key = _verify_key(public_key)
        try:
            verify_key.verify(bytes(data), self.signature)
        except BadSignatureError:
            logger.debug("Signature verification failed for key %s...", public_key.to_hex()[:16])
            raise VerificationFailed() from None
        except (NaclCryptoError, TypeError, ValueError):
            raise InvalidFormat(f"signature: {self}") from None

    def to_hex(self) -> str:
        return self.signature.hex()

    @staticmethod
    def from_hex(hex_string: str) -> "Signature":
        return Signature(_from_hex(hex_string, "signature"))

    def to_dict(self) -> Dict[str, Any]:
        return {"signature": self.to_hex()}

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "Signature":
        return Signature.from_hex(_wire_field(d, "signature", "signature"))

    def __bytes__(self) -> bytes:
        return self.signature

    def __str__(self) -> str:
        return self.to_hex()


def type_tag_of(cls: type) -> str:
    """
    Tag used to bind typed signatures to a class: `__type_tag__` or the qualified name.

    The qualified name carries no module, so same-named classes in different
    modules share a tag. Payload types that go over the wire should set
    `__type_tag__` explicitly.
    """
    return getattr(cls, "__type_tag__", None) or cls.__qualname__


@dataclass(frozen=True, order=True)
class TypedSignature(Generic[T]):
    """
    A signature explicitly marked with the type of the signed data.

    The signed hash is `Hash256.hash(canonicalize_bytes({"type": tag, "value": data}))`,
    so the type tag is part of what gets signed. A TypedSignature produced
    for one payload type never verifies a value of another type, even when
    both serialize to the same JSON.
    """

    signature: Signature
    type_tag: str

    @staticmethod
    def _hash_value(data: Any, type_tag: str) -> Hash256:
        try:
            payload = canonicalize_bytes({"type": type_tag, "value": data})
        except (RecursionError, TypeError, ValueError):
            raise InvalidFormat("data") from None
        return Hash256.hash(payload)

    @staticmethod
    def for_type(cls: type) -> str:
        return type_tag_of(cls)

    @staticmethod
    def new(signature: Signature, type_tag: str) -> "TypedSignature[Any]":
        """Wraps a signature received off the wire. No cryptographic check is done."""
        return TypedSignature(signature=signature, type_tag=type_tag)

    @staticmethod
    def sign(
        data: T,
        public_key: PublicKey,
        private_key: PrivateKey,
        type_tag: Optional[str] = None,
    ) -> "TypedSignature[T]":
        """Creates a new signature from the given data and keys."""
        tag = type_tag or type_tag_of(type(data))
        digest = TypedSignature._hash_value(data, tag)
        signature = Signature.sign(digest, public_key, private_key)
        return TypedSignature(signature=signature, type_tag=tag)

    def verify(self, data: T, public_key: PublicKey, type_tag: Optional[str] = None) -> None:
        """Verifies the signature against the given data and public key."""
        tag = type_tag or type_tag_of(type(data))
        if tag != self.type_tag:
            logger.debug("Typed signature tag mismatch: signed %r, got %r", self.type_tag, tag)
            raise VerificationFailed()
        digest = TypedSignature._hash_value(data, tag)
        self.signature.verify(digest, public_key)

    def to_dict(self) -> Dict[str, Any]:
        return {"signature": self.signature.to_hex(), "type": self.type_tag}

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "TypedSignature[Any]":
        signature = Signature.from_hex(_wire_field(d, "signature", "signature"))
        type_tag = _wire_field(d, "type", "type")
        if not isinstance(type_tag, str):
            raise InvalidFormat("type: expected a string")
        return TypedSignature.new(signature, type_tag)


def check_keypair_match(public_key: PublicKey, private_key: PrivateKey) -> None:
    """Checks whether the given public and private keys match by a sign/verify round."""
    message = Hash256.hash(KEYPAIR_CHECK_MESSAGE)
    signature = _sign_raw(message, private_key)
    try:
        signature.verify(message, public_key)
    except VerificationFailed:
        logger.debug("Keypair mismatch for public key %s...", public_key.to_hex()[:16])
        raise


def _keypair_from_signing_key(signing_key: SigningKey) -> Tuple[PublicKey, PrivateKey]:
    return (
        PublicKey(signing_key.verify_key.encode()),
        PrivateKey(signing_key.encode()),
    )


def generate_keypair(seed: BytesLike) -> Tuple[PublicKey, PrivateKey]:
    """
    Generates a new keypair using the seed.

    The seed is hashed to 32 bytes, which key a BLAKE3 output stream; the
    first 32 bytes of the stream become the Ed25519 secret. The same seed
    always yields the same keypair.
    """
    stream = blake3.blake3(key=bytes(Hash256.hash(seed)))
    public_key, private_key = _keypair_from_signing_key(SigningKey(stream.digest(length=KEY_SIZE)))
    logger.debug("Derived keypair from seed, public key %s...", public_key.to_hex()[:16])
    return public_key, private_key


def generate_random_keypair() -> Tuple[PublicKey, PrivateKey]:
    """Generate a keypair from OS randomness, for identities that need not be reproducible."""
    return _keypair_from_signing_key(SigningKey.generate())
