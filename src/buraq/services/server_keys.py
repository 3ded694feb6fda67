"""Server key and access key issuance.

Produces signing keys for environments and encrypts them at rest under the
environment's resource key. Records returned here are what the persistence
layer stores; the plaintext private key never appears in them.
"""

import base64
import binascii
from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import UUID

from buraq.core.encryption import SecretsManager, get_secrets_manager, parse_resource_id
from buraq.core.exceptions import DecodingError
from buraq.core.logging import LogContext, get_logger
from buraq.tokens.algorithms import KeyFamily, SigningAlgorithm
from buraq.tokens.claims import Claims, create_jwt
from buraq.tokens.key_builder import KeyBuilder, KeyPair

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class ServerKeyRecord:
    """An environment signing key, encrypted at rest.

    Attributes:
        environment_id: Resource the key is scoped to
        algorithm: Signing algorithm the key was generated for
        encrypted_key: Secrets-manager payload of the base64 private key
        public_key: Public PEM for asymmetric algorithms
        created_at: Creation time
        updated_at: Last update time
    """

    environment_id: UUID
    algorithm: SigningAlgorithm
    encrypted_key: str = field(repr=False)
    public_key: bytes | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @property
    def family(self) -> KeyFamily | None:
        return self.algorithm.family


@dataclass(frozen=True, slots=True)
class AccessKey:
    """Raw key material for an access token.

    Attributes:
        algorithm: Signing algorithm
        key_pair: Generated key material
        expires_at: Optional expiry chosen by the caller
        created_at: Creation time
    """

    algorithm: SigningAlgorithm
    key_pair: KeyPair
    expires_at: datetime | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))


class ServerKeyIssuer:
    """Issues, reveals and signs with environment server keys."""

    def __init__(
        self,
        secrets_manager: SecretsManager | None = None,
        key_builder: KeyBuilder | None = None,
    ):
        self._secrets_manager = secrets_manager or get_secrets_manager()
        self._key_builder = key_builder or KeyBuilder()

    def issue(
        self,
        algorithm: SigningAlgorithm | str,
        environment_id: UUID | str,
    ) -> ServerKeyRecord:
        """Generate a key for ``algorithm`` and encrypt it for an environment.

        Raises:
            UnsupportedAlgorithmError: For algorithms without key generation
            InvalidResourceIdError: If ``environment_id`` is not a UUID
            GenerationError: If key generation fails
        """
        algorithm = SigningAlgorithm.parse(algorithm)
        environment_id = parse_resource_id(environment_id)

        with LogContext(operation="issue_server_key", environment_id=str(environment_id)):
            key_pair = self._key_builder.generate_key(algorithm)
            encoded = base64.b64encode(key_pair.private_key).decode("ascii")
            encrypted_key = self._secrets_manager.encrypt(encoded, environment_id)
            logger.info("server_key_issued", algorithm=algorithm.value)

        return ServerKeyRecord(
            environment_id=environment_id,
            algorithm=algorithm,
            encrypted_key=encrypted_key,
            public_key=key_pair.public_key,
        )

    def reveal(self, record: ServerKeyRecord) -> KeyPair:
        """Decrypt the private key held by a record.

        Raises:
            DecryptionError: If the stored payload cannot be decrypted
        """
        encoded = self._secrets_manager.decrypt(record.encrypted_key, record.environment_id)
        try:
            private_key = base64.b64decode(encoded, validate=True)
        except (binascii.Error, ValueError) as e:
            raise DecodingError("Stored server key is not valid base64") from e
        return KeyPair(private_key=private_key, public_key=record.public_key)

    def sign_token(self, record: ServerKeyRecord, claims: Claims) -> str:
        """Sign claims with the record's server key."""
        return create_jwt(claims, self.reveal(record), record.algorithm)

    def issue_access_key(
        self,
        algorithm: SigningAlgorithm | str,
        expires_at: datetime | None = None,
    ) -> AccessKey:
        """Generate raw key material for an access token."""
        algorithm = SigningAlgorithm.parse(algorithm)
        key_pair = self._key_builder.generate_key(algorithm)
        logger.info("access_key_issued", algorithm=algorithm.value)
        return AccessKey(algorithm=algorithm, key_pair=key_pair, expires_at=expires_at)
