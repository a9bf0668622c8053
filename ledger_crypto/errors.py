"""
Crypto errors: InvalidFormat, VerificationFailed
"""

from typing import Any, Dict


class CryptoError(Exception):
    """Base class for errors raised by the crypto primitives."""

    kind = "crypto_error"

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind}

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "CryptoError":
        """Rebuild an error received over the error-reporting channel."""
        kind = d.get("kind")
        if kind == InvalidFormat.kind:
            return InvalidFormat(d.get("context", ""))
        if kind == VerificationFailed.kind:
            return VerificationFailed()
        raise ValueError(f"Unknown crypto error kind: {kind!r}")


class InvalidFormat(CryptoError):
    """The data format is not valid (undecodable key, signature, hash or payload)."""

    kind = "invalid_format"

    def __init__(self, context: str):
        super().__init__(context)
        self.context = context

    def __str__(self) -> str:
        return f"invalid format: {self.context}"

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind, "context": self.context}


class VerificationFailed(CryptoError):
    kind = "verification_failed"

    def __str__(self) -> str:
        return "verification failed"
