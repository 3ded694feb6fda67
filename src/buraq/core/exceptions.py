"""Core exceptions for key derivation, encryption and token issuance.

None of these exceptions carry key material, plaintext or ciphertext in
their messages. The underlying library error is chained with ``from``.
"""

from buraq.utils.exceptions import BuraqError


class CryptoError(BuraqError):
    """Base class for failures in the cryptographic core."""

    pass


class DecryptionError(CryptoError):
    """Raised when an encrypted payload cannot be turned back into plaintext."""

    pass


class EncodingError(DecryptionError):
    """Raised when an encrypted payload is not valid base64."""

    pass


class FormatError(DecryptionError):
    """Raised when a decoded payload is too short to hold an IV and data.

    Attributes:
        length: Decoded payload length in bytes
        minimum: Smallest accepted length
    """

    def __init__(self, length: int, minimum: int):
        super().__init__(
            f"Encrypted data is too short: {length} bytes (minimum {minimum})"
        )
        self.length = length
        self.minimum = minimum


class DecodingError(DecryptionError):
    """Raised when recovered bytes cannot be decoded.

    For the legacy stream cipher this usually means the wrong resource id was
    used. Since the scheme carries no authentication tag, a wrong id can also
    decode to different valid text without raising.
    """

    pass


class InvalidResourceIdError(CryptoError):
    """Raised when a resource id is not a UUID.

    Attributes:
        resource_id: The rejected value, as given
    """

    def __init__(self, resource_id: object):
        super().__init__(f"Resource id is not a valid UUID: {resource_id!r}")
        self.resource_id = resource_id


class UnsupportedAlgorithmError(CryptoError):
    """Raised when key generation is requested for an unimplemented algorithm.

    Attributes:
        algorithm: The requested algorithm identifier
    """

    def __init__(self, algorithm: str, message: str | None = None):
        super().__init__(message or f"Key generation for {algorithm} is not yet implemented")
        self.algorithm = algorithm


class KeyMismatchError(CryptoError):
    """Raised when a signing key cannot be used with the requested algorithm.

    Attributes:
        algorithm: The requested algorithm identifier
    """

    def __init__(self, algorithm: str, reason: str):
        super().__init__(f"Key is not compatible with {algorithm}: {reason}")
        self.algorithm = algorithm


class KeyLoadError(CryptoError):
    """Raised when external key material (PEM) cannot be parsed."""

    pass


class GenerationError(CryptoError):
    """Raised when the random source or the RSA generator fails."""

    pass


class TokenValidationError(CryptoError):
    """Raised when a signed token fails signature or claim validation."""

    pass
