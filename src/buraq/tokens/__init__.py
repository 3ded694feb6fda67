"""Signing key generation and token issuance.

This module provides:
- HmacHashFunction / HmacKey: MAC engine over SHA-2 and SHA-3 families
- RsaKeyLength / generate_rsa_key_pair: RSA key pairs at fixed tiers
- KeyBuilder: algorithm-driven key generation
- Claims / create_jwt / decode_jwt: signed token issuance and verification
"""

from buraq.tokens.algorithms import (
    KeyFamily,
    SigningAlgorithm,
    SigningAlgorithmSpec,
    spec_for,
)
from buraq.tokens.claims import Claims, create_jwt, decode_jwt
from buraq.tokens.hmac import (
    HmacHashFunction,
    HmacKey,
    HmacKeyLength,
    generate_hmac_key,
)
from buraq.tokens.key_builder import KeyBuilder, KeyPair
from buraq.tokens.rsa import RsaKeyLength, generate_rsa_key_pair

__all__ = [
    # MAC engine
    "HmacHashFunction",
    "HmacKey",
    "HmacKeyLength",
    "generate_hmac_key",
    # RSA
    "RsaKeyLength",
    "generate_rsa_key_pair",
    # Algorithms
    "KeyFamily",
    "SigningAlgorithm",
    "SigningAlgorithmSpec",
    "spec_for",
    # Keys
    "KeyBuilder",
    "KeyPair",
    # Tokens
    "Claims",
    "create_jwt",
    "decode_jwt",
]
