"""Key generation for token signing algorithms.

Maps a signing algorithm to a generation strategy: MAC-derived shared
secrets for HS*, RSA key pairs for RS* and PS*. ECDSA and EdDSA are
recognized but rejected.

Usage:
    from buraq.tokens.key_builder import KeyBuilder
    from buraq.tokens.algorithms import SigningAlgorithm

    builder = KeyBuilder()
    pair = builder.generate_key(SigningAlgorithm.RS256)
    pair.private_key  # PKCS#8 PEM bytes
    pair.public_key   # SubjectPublicKeyInfo PEM bytes
"""

from dataclasses import dataclass, field

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization

from buraq.core.exceptions import KeyLoadError, UnsupportedAlgorithmError
from buraq.core.logging import get_logger
from buraq.tokens import hmac, rsa
from buraq.tokens.algorithms import SigningAlgorithm, spec_for
from buraq.tokens.hmac import HmacHashFunction, HmacKeyLength
from buraq.tokens.rsa import RsaKeyLength

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class KeyPair:
    """Generated or loaded signing key material.

    Attributes:
        private_key: Shared secret bytes (symmetric) or private PEM bytes
        public_key: Public PEM bytes, None for symmetric algorithms
    """

    private_key: bytes = field(repr=False)
    public_key: bytes | None = None

    @property
    def is_symmetric(self) -> bool:
        return self.public_key is None


class KeyBuilder:
    """Produces key material appropriate for a signing algorithm."""

    @staticmethod
    def from_private_key_pem(pem_private_key: str | bytes) -> KeyPair:
        """Load an external private key and re-derive its public half.

        Args:
            pem_private_key: Unencrypted PEM private key

        Returns:
            KeyPair with re-encoded PKCS#8 private key and SPKI public key

        Raises:
            KeyLoadError: If the PEM is malformed or unsupported
        """
        if isinstance(pem_private_key, str):
            pem_private_key = pem_private_key.encode("utf-8")
        try:
            private_key = serialization.load_pem_private_key(pem_private_key, password=None)
        except (ValueError, TypeError, UnsupportedAlgorithm) as e:
            raise KeyLoadError(f"Failed to load private key from PEM: {e}") from e

        private_pem = private_key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.PKCS8,
            encryption_algorithm=serialization.NoEncryption(),
        )
        public_pem = private_key.public_key().public_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PublicFormat.SubjectPublicKeyInfo,
        )
        return KeyPair(private_key=private_pem, public_key=public_pem)

    def generate_key(self, algorithm: SigningAlgorithm | str) -> KeyPair:
        """Generate key material for an algorithm.

        Raises:
            UnsupportedAlgorithmError: For ES256, ES384 and EdDSA
            GenerationError: If the random source or RSA generator fails
        """
        algorithm = SigningAlgorithm.parse(algorithm)
        spec = spec_for(algorithm)

        if spec.hash_function is not None:
            pair = self.generate_hmac_key(spec.hash_function)
        elif spec.rsa_key_length is not None:
            pair = self.generate_rsa_key(spec.rsa_key_length)
        elif algorithm is SigningAlgorithm.EDDSA:
            raise UnsupportedAlgorithmError(
                algorithm.value, "EdDSA key generation is not yet implemented"
            )
        else:
            raise UnsupportedAlgorithmError(
                algorithm.value, "ECDSA key generation is not yet implemented"
            )

        logger.info("key_generated", algorithm=algorithm.value)
        return pair

    def generate_hmac_key(
        self,
        hash_function: HmacHashFunction,
        key_length: HmacKeyLength | None = None,
    ) -> KeyPair:
        """Generate a symmetric secret.

        A random MAC key is drawn and the secret is its MAC over the empty
        message, so the secret length equals the hash output size.
        """
        hmac_key = hmac.generate_hmac_key(hash_function, key_length)
        return KeyPair(private_key=hmac_key.sign(b""), public_key=None)

    def generate_rsa_key(self, key_length: RsaKeyLength) -> KeyPair:
        private_pem, public_pem = rsa.generate_rsa_key_pair(key_length)
        return KeyPair(private_key=private_pem, public_key=public_pem)

    def generate_key_with_length(
        self,
        algorithm: SigningAlgorithm | str,
        key_length: int | None = None,
    ) -> KeyPair:
        """Generate key material with an explicit symmetric key size.

        Args:
            algorithm: Signing algorithm
            key_length: Requested MAC key size in bytes, mapped to the
                nearest supported tier. Ignored for asymmetric algorithms.
        """
        algorithm = SigningAlgorithm.parse(algorithm)
        spec = spec_for(algorithm)
        if spec.hash_function is None:
            return self.generate_key(algorithm)

        tier = (
            HmacKeyLength.nearest(key_length)
            if key_length is not None
            else spec.hash_function.recommended_key_length()
        )
        logger.info("key_generated", algorithm=algorithm.value, key_bits=tier.as_bits())
        return self.generate_hmac_key(spec.hash_function, tier)
