"""Keyed-hash message authentication over four hash families.

Provides the MAC primitive used for symmetric token keys and, in
``buraq.core.encryption``, for resource key derivation and keystream
generation.

Usage:
    from buraq.tokens.hmac import HmacHashFunction, HmacKey, HmacKeyLength

    mac = HmacHashFunction.SHA256.sign(b"key", b"message")
    assert HmacHashFunction.SHA256.verify(b"key", b"message", mac)

    key = generate_hmac_key(HmacHashFunction.SHA512, HmacKeyLength.B512)
    signature = key.sign(b"payload")
"""

import hashlib
import hmac
import secrets
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum

from buraq.core.exceptions import GenerationError


class HmacKeyLength(Enum):
    """Supported symmetric key sizes, valued in bytes."""

    B128 = 16
    B192 = 24
    B256 = 32
    B384 = 48
    B512 = 64

    def as_bytes(self) -> int:
        return self.value

    def as_bits(self) -> int:
        return self.value * 8

    @classmethod
    def nearest(cls, length: int) -> "HmacKeyLength":
        """Map an arbitrary byte count to the smallest tier that holds it.

        Anything above 48 bytes maps to the 512-bit tier.
        """
        for tier in (cls.B128, cls.B192, cls.B256, cls.B384):
            if length <= tier.value:
                return tier
        return cls.B512


class HmacHashFunction(str, Enum):
    """Hash families usable as the MAC core."""

    SHA256 = "SHA256"
    SHA512 = "SHA512"
    SHA3_256 = "SHA3_256"
    SHA3_512 = "SHA3_512"

    @property
    def digestmod(self) -> Callable:
        match self:
            case HmacHashFunction.SHA256:
                return hashlib.sha256
            case HmacHashFunction.SHA512:
                return hashlib.sha512
            case HmacHashFunction.SHA3_256:
                return hashlib.sha3_256
            case HmacHashFunction.SHA3_512:
                return hashlib.sha3_512

    def recommended_key_length(self) -> HmacKeyLength:
        """Return the key length matching the digest size."""
        match self:
            case HmacHashFunction.SHA256 | HmacHashFunction.SHA3_256:
                return HmacKeyLength.B256
            case HmacHashFunction.SHA512 | HmacHashFunction.SHA3_512:
                return HmacKeyLength.B512

    def output_size_bytes(self) -> int:
        match self:
            case HmacHashFunction.SHA256 | HmacHashFunction.SHA3_256:
                return 32
            case HmacHashFunction.SHA512 | HmacHashFunction.SHA3_512:
                return 64

    def sign(self, key: bytes, data: bytes) -> bytes:
        """Compute the MAC of ``data`` under ``key``.

        Keys of any length are accepted, including empty ones.
        """
        return hmac.new(key, data, self.digestmod).digest()

    def verify(self, key: bytes, data: bytes, mac: bytes) -> bool:
        """Recompute the MAC and compare it with ``mac``.

        Uses plain equality, not a constant-time comparison.
        """
        # TODO: switch to hmac.compare_digest once the timing review signs off
        return self.sign(key, data) == mac


@dataclass(frozen=True, slots=True)
class HmacKey:
    """Immutable MAC key bound to a hash function.

    Attributes:
        key: Raw key bytes
        hash_function: Hash family used for sign/verify
    """

    key: bytes = field(repr=False)
    hash_function: HmacHashFunction

    def sign(self, data: bytes) -> bytes:
        return self.hash_function.sign(self.key, data)

    def verify(self, data: bytes, mac: bytes) -> bool:
        return self.hash_function.verify(self.key, data, mac)


def generate_hmac_key(
    hash_function: HmacHashFunction,
    key_length: HmacKeyLength | None = None,
) -> HmacKey:
    """Generate a random MAC key.

    Args:
        hash_function: Hash family the key is bound to
        key_length: Key size (default: the hash function's recommended length)

    Returns:
        HmacKey filled from the operating system's secure random source

    Raises:
        GenerationError: If the random source is unavailable
    """
    length = key_length or hash_function.recommended_key_length()
    try:
        key_bytes = secrets.token_bytes(length.as_bytes())
    except (OSError, NotImplementedError) as e:
        raise GenerationError(f"Failed to generate HMAC key: {e}") from e
    return HmacKey(key=key_bytes, hash_function=hash_function)
