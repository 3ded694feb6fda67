"""Core services and utilities for Buraq."""

from .exceptions import (
    CryptoError,
    DecodingError,
    DecryptionError,
    EncodingError,
    FormatError,
    GenerationError,
    InvalidResourceIdError,
    KeyLoadError,
    KeyMismatchError,
    TokenValidationError,
    UnsupportedAlgorithmError,
)

__all__ = [
    # Exceptions
    "CryptoError",
    "DecodingError",
    "DecryptionError",
    "EncodingError",
    "FormatError",
    "GenerationError",
    "InvalidResourceIdError",
    "KeyLoadError",
    "KeyMismatchError",
    "TokenValidationError",
    "UnsupportedAlgorithmError",
]
