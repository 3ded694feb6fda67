"""Resource-scoped encryption of stored secrets.

Every resource (typically an environment or service account) gets its own
key, derived from the process master key and the resource's UUID. Secrets
are encrypted with a hash-chain keystream keyed by that resource key.

Payload format: base64(IV (16 bytes) || ciphertext), where the ciphertext
has exactly the plaintext's length. The legacy scheme has NO
authentication tag: a wrong resource id or corrupted payload may decode
to different but valid text. ``AuthenticatedSecretsManager`` offers an
AES-256-GCM variant with its own payload format for new data.

Usage:
    from buraq.core.encryption import SecretsManager, get_secrets_manager

    manager = SecretsManager.from_env()
    ciphertext = manager.encrypt("s3cret", resource_id)
    plaintext = manager.decrypt(ciphertext, resource_id)

    # Process-wide instance built from settings
    manager = get_secrets_manager()
"""

import base64
import binascii
import secrets
from dataclasses import dataclass, field
from uuid import UUID

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from buraq.config.settings import MASTER_KEY_ENV_VAR, Settings, get_settings
from buraq.core.exceptions import (
    DecodingError,
    EncodingError,
    FormatError,
    GenerationError,
    InvalidResourceIdError,
)
from buraq.core.logging import get_logger, log_exception
from buraq.tokens.hmac import HmacHashFunction
from buraq.utils.exceptions import ConfigurationError

logger = get_logger(__name__)

# Constants
IV_SIZE = 16
NONCE_SIZE = 12  # 96 bits recommended for AES-GCM
TAG_SIZE = 16
KEYSTREAM_STEP = b"\x00"

KEY_HASH = HmacHashFunction.SHA256


@dataclass(frozen=True, slots=True)
class MasterKey:
    """Process-wide master secret.

    Holds the UTF-8 bytes of the configured value as-is (no base64 decoding).
    """

    value: bytes = field(repr=False)

    def __post_init__(self) -> None:
        if not self.value:
            raise ConfigurationError(f"{MASTER_KEY_ENV_VAR} must not be empty")

    @classmethod
    def from_settings(cls, settings: Settings) -> "MasterKey":
        """Build the master key from loaded settings.

        Raises:
            ConfigurationError: If BURAQ_MASTER_KEY is not configured
        """
        if settings.buraq_master_key is None:
            raise ConfigurationError(
                f"{MASTER_KEY_ENV_VAR} not found in environment variables"
            )
        return cls(settings.buraq_master_key.get_secret_value().encode("utf-8"))

    @classmethod
    def from_env(cls) -> "MasterKey":
        """Read the master key from the environment (and ``.env``) once."""
        return cls.from_settings(Settings())


def parse_resource_id(resource_id: UUID | str) -> UUID:
    """Coerce a resource id to a UUID.

    Raises:
        InvalidResourceIdError: If the value is not a UUID
    """
    if isinstance(resource_id, UUID):
        return resource_id
    try:
        return UUID(str(resource_id))
    except ValueError as e:
        raise InvalidResourceIdError(resource_id) from e


def _resource_bytes(resource_id: UUID | str) -> bytes:
    return parse_resource_id(resource_id).bytes


def _random_bytes(size: int) -> bytes:
    try:
        return secrets.token_bytes(size)
    except (OSError, NotImplementedError) as e:
        raise GenerationError(f"Failed to draw random bytes: {e}") from e


def _b64decode(encoded: str | bytes) -> bytes:
    try:
        return base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError) as e:
        raise EncodingError(f"Failed to decode Base64 input: {e}") from e


def build_keystream(
    key: bytes,
    iv: bytes,
    length: int,
    hash_function: HmacHashFunction = KEY_HASH,
) -> bytes:
    """Expand a key and IV into ``length`` pseudorandom bytes.

    The seed is MAC(key, iv); each block appends the seed and then
    replaces it with MAC(seed, 0x00). Stored payloads use SHA-256.
    """
    seed = hash_function.sign(key, iv)
    stream = bytearray()
    while len(stream) < length:
        stream.extend(seed)
        seed = hash_function.sign(seed, KEYSTREAM_STEP)
    return bytes(stream[:length])


def _xor(data: bytes, keystream: bytes) -> bytes:
    return bytes(d ^ k for d, k in zip(data, keystream))


class SecretsManager:
    """Encrypts and decrypts secrets under per-resource derived keys.

    Stateless apart from the master key, so one instance can be shared
    across threads.
    """

    def __init__(self, master_key: MasterKey | bytes):
        if isinstance(master_key, bytes):
            master_key = MasterKey(master_key)
        self._master_key = master_key

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"

    @classmethod
    def from_settings(cls, settings: Settings) -> "SecretsManager":
        return cls(MasterKey.from_settings(settings))

    @classmethod
    def from_env(cls) -> "SecretsManager":
        """Create a manager from BURAQ_MASTER_KEY.

        Raises:
            ConfigurationError: If the variable is missing
        """
        return cls(MasterKey.from_env())

    def derive_resource_key(self, resource_id: UUID | str) -> bytes:
        """Derive the key for a resource: MAC-SHA256(master key, uuid bytes).

        Deterministic; the result is never stored.

        Raises:
            InvalidResourceIdError: If ``resource_id`` is not a UUID
        """
        resource_bytes = _resource_bytes(resource_id)
        logger.debug("resource_key_derived", resource_id=str(resource_id))
        return KEY_HASH.sign(self._master_key.value, resource_bytes)

    def encrypt_bytes(self, data: bytes, resource_id: UUID | str) -> str:
        """Encrypt raw bytes for a resource.

        Returns:
            Base64 of IV || ciphertext
        """
        iv = _random_bytes(IV_SIZE)
        resource_key = self.derive_resource_key(resource_id)
        ciphertext = _xor(data, build_keystream(resource_key, iv, len(data)))
        return base64.b64encode(iv + ciphertext).decode("ascii")

    def decrypt_bytes(self, encoded: str | bytes, resource_id: UUID | str) -> bytes:
        """Decrypt a payload produced by ``encrypt_bytes``.

        Raises:
            EncodingError: If the payload is not valid base64
            FormatError: If the payload holds no data beyond the IV
        """
        payload = _b64decode(encoded)
        if len(payload) <= IV_SIZE:
            raise FormatError(len(payload), IV_SIZE + 1)

        iv, ciphertext = payload[:IV_SIZE], payload[IV_SIZE:]
        resource_key = self.derive_resource_key(resource_id)
        return _xor(ciphertext, build_keystream(resource_key, iv, len(ciphertext)))

    def encrypt(self, plaintext: str, resource_id: UUID | str) -> str:
        """Encrypt a string for a resource.

        Args:
            plaintext: Secret text
            resource_id: UUID of the owning resource

        Returns:
            Base64-encoded payload
        """
        return self.encrypt_bytes(plaintext.encode("utf-8"), resource_id)

    def decrypt(self, encoded: str | bytes, resource_id: UUID | str) -> str:
        """Decrypt a string payload.

        Raises:
            EncodingError: If the payload is not valid base64
            FormatError: If the payload is too short
            DecodingError: If the recovered bytes are not UTF-8
        """
        data = self.decrypt_bytes(encoded, resource_id)
        try:
            return data.decode("utf-8")
        except UnicodeDecodeError as e:
            error = DecodingError("Failed to convert decrypted data to string")
            log_exception(logger, error, operation="decrypt", resource_id=str(resource_id))
            raise error from e


class AuthenticatedSecretsManager(SecretsManager):
    """AES-256-GCM variant of ``SecretsManager``.

    Uses the same resource key derivation. The resource id is bound as
    associated data, so a wrong id or modified payload always fails.

    Payload format: base64(nonce (12 bytes) || ciphertext || tag (16 bytes)).
    Not interchangeable with the legacy format.
    """

    def encrypt_bytes(self, data: bytes, resource_id: UUID | str) -> str:
        nonce = _random_bytes(NONCE_SIZE)
        aesgcm = AESGCM(self.derive_resource_key(resource_id))
        ciphertext = aesgcm.encrypt(nonce, data, _resource_bytes(resource_id))
        return base64.b64encode(nonce + ciphertext).decode("ascii")

    def decrypt_bytes(self, encoded: str | bytes, resource_id: UUID | str) -> bytes:
        """Decrypt and authenticate a payload.

        Raises:
            EncodingError: If the payload is not valid base64
            FormatError: If the payload is shorter than nonce plus tag
            DecodingError: If authentication fails
        """
        payload = _b64decode(encoded)
        if len(payload) < NONCE_SIZE + TAG_SIZE:
            raise FormatError(len(payload), NONCE_SIZE + TAG_SIZE)

        aesgcm = AESGCM(self.derive_resource_key(resource_id))
        try:
            return aesgcm.decrypt(
                payload[:NONCE_SIZE], payload[NONCE_SIZE:], _resource_bytes(resource_id)
            )
        except InvalidTag as e:
            error = DecodingError("Payload failed authentication")
            log_exception(logger, error, operation="decrypt", resource_id=str(resource_id))
            raise error from e


# Global secrets manager instance (lazy-loaded)
_secrets_manager: SecretsManager | None = None


def get_secrets_manager() -> SecretsManager:
    """Get the global secrets manager instance.

    Loads the master key from settings on first call.

    Raises:
        ConfigurationError: If BURAQ_MASTER_KEY is not configured
    """
    global _secrets_manager

    if _secrets_manager is None:
        _secrets_manager = SecretsManager.from_settings(get_settings())
        logger.info("secrets_manager_initialized")

    return _secrets_manager


def reset_secrets_manager() -> None:
    """Reset the global secrets manager (for testing)."""
    global _secrets_manager
    _secrets_manager = None
