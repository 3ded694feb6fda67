"""RSA key pair generation at fixed bit-length tiers."""

import time
from enum import IntEnum

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from buraq.core.exceptions import GenerationError
from buraq.core.logging import get_logger

logger = get_logger(__name__)

PUBLIC_EXPONENT = 65537


class RsaKeyLength(IntEnum):
    """Supported RSA modulus sizes in bits."""

    B2048 = 2048
    B3072 = 3072
    B4096 = 4096
    B8192 = 8192

    def as_bits(self) -> int:
        return int(self)

    @classmethod
    def from_bits(cls, bits: int) -> "RsaKeyLength | None":
        try:
            return cls(bits)
        except ValueError:
            return None

    @classmethod
    def all(cls) -> tuple["RsaKeyLength", ...]:
        return tuple(cls)


def private_key_to_pem(private_key: rsa.RSAPrivateKey) -> bytes:
    """Encode a private key as unencrypted PKCS#8 PEM."""
    return private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )


def public_key_to_pem(public_key: rsa.RSAPublicKey) -> bytes:
    """Encode a public key as SubjectPublicKeyInfo PEM."""
    return public_key.public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )


def generate_rsa_key_pair(key_length: RsaKeyLength) -> tuple[bytes, bytes]:
    """Generate an RSA key pair.

    The public key is derived from the freshly generated private key, so
    the two halves always match.

    Args:
        key_length: Modulus size tier

    Returns:
        Tuple of (private_pem, public_pem)

    Raises:
        GenerationError: If the underlying generator fails
    """
    start = time.perf_counter()
    try:
        private_key = rsa.generate_private_key(
            public_exponent=PUBLIC_EXPONENT,
            key_size=key_length.as_bits(),
        )
    except (ValueError, OSError) as e:
        raise GenerationError(f"Failed to generate RSA key: {e}") from e

    private_pem = private_key_to_pem(private_key)
    public_pem = public_key_to_pem(private_key.public_key())

    logger.info(
        "rsa_key_pair_generated",
        bits=key_length.as_bits(),
        duration_ms=round((time.perf_counter() - start) * 1000, 2),
    )
    return private_pem, public_pem
