"""Token claims and signed token issuance.

Tokens are standard three-part JWTs produced with PyJWT. Symmetric
algorithms sign with the raw shared secret, asymmetric algorithms with
the PEM private key.

Usage:
    claims = Claims.new("service-account-1", 3600).with_issuer("buraq")
    token = create_jwt(claims, key_pair, SigningAlgorithm.HS256)
    payload = decode_jwt(token, key_pair, SigningAlgorithm.HS256)
"""

import dataclasses
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

import jwt
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec, ed448, ed25519, rsa

from buraq.core.exceptions import KeyMismatchError, TokenValidationError
from buraq.core.logging import get_logger, log_exception
from buraq.tokens.algorithms import SigningAlgorithm
from buraq.tokens.key_builder import KeyPair

logger = get_logger(__name__)

PEM_PREFIX = b"-----BEGIN"
PRIVATE_KEY_MARKER = b"PRIVATE KEY-----"


def _timestamp(value: int | datetime) -> int:
    if isinstance(value, datetime):
        return int(value.timestamp())
    return int(value)


@dataclass(frozen=True, slots=True)
class Claims:
    """Registered token claims.

    Setters return a new instance; a Claims value never changes once built.

    Attributes:
        subject: ``sub`` claim
        issued_at: ``iat`` claim, seconds since epoch
        expires_at: ``exp`` claim, seconds since epoch
        issuer: Optional ``iss`` claim
        audience: Optional ``aud`` claim
        not_before: Optional ``nbf`` claim
        token_id: Optional ``jti`` claim
    """

    subject: str
    issued_at: int
    expires_at: int
    issuer: str | None = None
    audience: tuple[str, ...] | None = None
    not_before: int | None = None
    token_id: str | None = None

    @classmethod
    def new(
        cls,
        subject: str,
        lifetime_seconds: int,
        now: datetime | None = None,
    ) -> "Claims":
        """Create claims issued now and expiring after ``lifetime_seconds``."""
        issued_at = _timestamp(now or datetime.now(UTC))
        return cls(
            subject=subject,
            issued_at=issued_at,
            expires_at=issued_at + lifetime_seconds,
        )

    def with_issuer(self, issuer: str) -> "Claims":
        return dataclasses.replace(self, issuer=issuer)

    def with_audience(self, *audience: str) -> "Claims":
        return dataclasses.replace(self, audience=tuple(audience))

    def with_not_before(self, not_before: int | datetime) -> "Claims":
        return dataclasses.replace(self, not_before=_timestamp(not_before))

    def with_token_id(self, token_id: str) -> "Claims":
        return dataclasses.replace(self, token_id=token_id)

    def to_payload(self) -> dict[str, Any]:
        """Serialize to a JWT payload, omitting unset optional claims."""
        payload: dict[str, Any] = {
            "sub": self.subject,
            "iat": self.issued_at,
            "exp": self.expires_at,
        }
        if self.issuer is not None:
            payload["iss"] = self.issuer
        if self.audience is not None:
            payload["aud"] = list(self.audience)
        if self.not_before is not None:
            payload["nbf"] = self.not_before
        if self.token_id is not None:
            payload["jti"] = self.token_id
        return payload

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "Claims":
        """Rebuild claims from a decoded JWT payload."""
        audience = payload.get("aud")
        if isinstance(audience, str):
            audience = (audience,)
        elif audience is not None:
            audience = tuple(audience)
        return cls(
            subject=payload["sub"],
            issued_at=int(payload["iat"]),
            expires_at=int(payload["exp"]),
            issuer=payload.get("iss"),
            audience=audience,
            not_before=payload.get("nbf"),
            token_id=payload.get("jti"),
        )


def _as_bytes(key: KeyPair | bytes | str, *, public: bool = False) -> bytes:
    if isinstance(key, KeyPair):
        if public and key.public_key is not None:
            return key.public_key
        return key.private_key
    if isinstance(key, str):
        return key.encode("utf-8")
    return key


def _private_key_types(algorithm: SigningAlgorithm) -> tuple[type, ...]:
    match algorithm:
        case SigningAlgorithm.ES256 | SigningAlgorithm.ES384:
            return (ec.EllipticCurvePrivateKey,)
        case SigningAlgorithm.EDDSA:
            return (ed25519.Ed25519PrivateKey, ed448.Ed448PrivateKey)
        case _:
            return (rsa.RSAPrivateKey,)


def _signing_key(key: KeyPair | bytes | str, algorithm: SigningAlgorithm) -> Any:
    raw = _as_bytes(key)
    if algorithm.is_symmetric:
        if raw.lstrip().startswith(PEM_PREFIX):
            raise KeyMismatchError(algorithm.value, "PEM key material used as a shared secret")
        return raw

    try:
        private_key = serialization.load_pem_private_key(raw, password=None)
    except (ValueError, TypeError, UnsupportedAlgorithm) as e:
        raise KeyMismatchError(algorithm.value, "expected a PEM private key") from e
    if not isinstance(private_key, _private_key_types(algorithm)):
        raise KeyMismatchError(
            algorithm.value, f"unexpected key type {type(private_key).__name__}"
        )
    return private_key


def create_jwt(
    claims: Claims,
    key: KeyPair | bytes | str,
    algorithm: SigningAlgorithm | str,
) -> str:
    """Sign claims into a compact JWT.

    Args:
        claims: Claims to embed
        key: KeyPair, raw shared secret, or PEM private key
        algorithm: Signing algorithm, written to the ``alg`` header

    Returns:
        Token of three dot-separated base64url segments

    Raises:
        KeyMismatchError: If the key cannot be used with the algorithm
        UnsupportedAlgorithmError: If the identifier is unknown
    """
    algorithm = SigningAlgorithm.parse(algorithm)
    signing_key = _signing_key(key, algorithm)
    try:
        token = jwt.encode(claims.to_payload(), signing_key, algorithm=algorithm.value)
    except (jwt.PyJWTError, ValueError, TypeError) as e:
        raise KeyMismatchError(algorithm.value, str(e)) from e

    logger.info("jwt_issued", algorithm=algorithm.value, subject=claims.subject)
    return token


def _verification_key(key: KeyPair | bytes | str, algorithm: SigningAlgorithm) -> Any:
    if algorithm.is_symmetric:
        return _as_bytes(key)

    raw = _as_bytes(key, public=True)
    if PRIVATE_KEY_MARKER not in raw:
        return raw
    # Private PEM given without its public half: verify with the derived public key
    try:
        private_key = serialization.load_pem_private_key(raw, password=None)
    except (ValueError, TypeError, UnsupportedAlgorithm) as e:
        raise TokenValidationError(
            "Token validation failed: private key PEM could not be loaded"
        ) from e
    return private_key.public_key()


def decode_jwt(
    token: str,
    key: KeyPair | bytes | str,
    algorithm: SigningAlgorithm | str,
    *,
    audience: str | list[str] | None = None,
    issuer: str | None = None,
) -> dict[str, Any]:
    """Verify a token and return its payload.

    Symmetric algorithms verify with the shared secret; asymmetric ones
    with the public key. A KeyPair's public half is used when given, and
    a private PEM is reduced to its public key.

    Raises:
        TokenValidationError: On bad signature, expired or premature token,
            audience/issuer mismatch, or unusable key material
    """
    algorithm = SigningAlgorithm.parse(algorithm)
    try:
        return jwt.decode(
            token,
            _verification_key(key, algorithm),
            algorithms=[algorithm.value],
            audience=audience,
            issuer=issuer,
            options={"require": ["exp", "iat", "sub"]},
        )
    except TokenValidationError as e:
        log_exception(logger, e, operation="decode_jwt", algorithm=algorithm.value)
        raise
    except (jwt.PyJWTError, ValueError, TypeError) as e:
        error = TokenValidationError(f"Token validation failed: {e}")
        log_exception(logger, error, operation="decode_jwt", algorithm=algorithm.value)
        raise error from e
