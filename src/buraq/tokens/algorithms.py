"""Signing algorithm identifiers and their key-generation strategies."""

from dataclasses import dataclass
from enum import Enum

from buraq.core.exceptions import UnsupportedAlgorithmError
from buraq.tokens.hmac import HmacHashFunction
from buraq.tokens.rsa import RsaKeyLength


class KeyFamily(str, Enum):
    """Stored algorithm family of a key."""

    RSA = "RSA"
    HMAC = "HMAC"


class SigningAlgorithm(str, Enum):
    """Token signing algorithm identifiers."""

    HS256 = "HS256"
    HS384 = "HS384"
    HS512 = "HS512"
    RS256 = "RS256"
    RS384 = "RS384"
    RS512 = "RS512"
    PS256 = "PS256"
    PS384 = "PS384"
    PS512 = "PS512"
    ES256 = "ES256"
    ES384 = "ES384"
    EDDSA = "EdDSA"

    @classmethod
    def parse(cls, value: "str | SigningAlgorithm") -> "SigningAlgorithm":
        """Resolve an identifier string to a member.

        Raises:
            UnsupportedAlgorithmError: If the identifier is unknown
        """
        try:
            return cls(value)
        except ValueError as e:
            raise UnsupportedAlgorithmError(
                str(value), f"Unknown signing algorithm: {value}"
            ) from e

    @property
    def is_symmetric(self) -> bool:
        return self in (SigningAlgorithm.HS256, SigningAlgorithm.HS384, SigningAlgorithm.HS512)

    @property
    def family(self) -> KeyFamily | None:
        """Key family, or None for algorithms without key generation."""
        return spec_for(self).family


@dataclass(frozen=True, slots=True)
class SigningAlgorithmSpec:
    """How keys for a signing algorithm are produced.

    Attributes:
        algorithm: The algorithm identifier
        hash_function: MAC hash family for symmetric algorithms
        rsa_key_length: Modulus tier for RSA algorithms
    """

    algorithm: SigningAlgorithm
    hash_function: HmacHashFunction | None = None
    rsa_key_length: RsaKeyLength | None = None

    @property
    def symmetric(self) -> bool:
        return self.hash_function is not None

    @property
    def implemented(self) -> bool:
        return self.hash_function is not None or self.rsa_key_length is not None

    @property
    def family(self) -> KeyFamily | None:
        if self.hash_function is not None:
            return KeyFamily.HMAC
        if self.rsa_key_length is not None:
            return KeyFamily.RSA
        return None


def spec_for(algorithm: SigningAlgorithm) -> SigningAlgorithmSpec:
    """Return the key-generation strategy for an algorithm.

    HS384 keys are derived with SHA-256, which is sufficient for the
    shared secret size.
    """
    match algorithm:
        case SigningAlgorithm.HS256 | SigningAlgorithm.HS384:
            return SigningAlgorithmSpec(algorithm, hash_function=HmacHashFunction.SHA256)
        case SigningAlgorithm.HS512:
            return SigningAlgorithmSpec(algorithm, hash_function=HmacHashFunction.SHA512)
        case SigningAlgorithm.RS256 | SigningAlgorithm.PS256:
            return SigningAlgorithmSpec(algorithm, rsa_key_length=RsaKeyLength.B2048)
        case SigningAlgorithm.RS384 | SigningAlgorithm.PS384:
            return SigningAlgorithmSpec(algorithm, rsa_key_length=RsaKeyLength.B3072)
        case SigningAlgorithm.RS512 | SigningAlgorithm.PS512:
            return SigningAlgorithmSpec(algorithm, rsa_key_length=RsaKeyLength.B4096)
        case SigningAlgorithm.ES256 | SigningAlgorithm.ES384 | SigningAlgorithm.EDDSA:
            return SigningAlgorithmSpec(algorithm)
