"""Pytest fixtures for Buraq tests."""

import os
from collections.abc import Generator
from unittest.mock import patch
from uuid import UUID

import pytest
import structlog
from pydantic import SecretStr

from buraq.config.settings import Settings, get_settings
from buraq.core.encryption import MasterKey, SecretsManager, reset_secrets_manager
from buraq.tokens.rsa import RsaKeyLength, generate_rsa_key_pair

TEST_MASTER_KEY = "test-master-key-12345"


# =============================================================================
# Global State Fixtures
# =============================================================================


@pytest.fixture(scope="function", autouse=True)
def reset_structlog_after_test():
    """Reset structlog configuration after each test.

    This ensures tests that modify structlog global state
    don't affect other tests.
    """
    yield
    structlog.reset_defaults()
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=False,
    )


@pytest.fixture(autouse=True)
def reset_cached_state() -> Generator[None, None, None]:
    """Clear cached settings and the global secrets manager."""
    get_settings.cache_clear()
    reset_secrets_manager()
    yield
    get_settings.cache_clear()
    reset_secrets_manager()


# =============================================================================
# Configuration Fixtures
# =============================================================================


@pytest.fixture
def mock_settings() -> Settings:
    """Create settings with a test master key."""
    return Settings(
        buraq_master_key=SecretStr(TEST_MASTER_KEY),
        environment="test",
        log_level="DEBUG",
    )


@pytest.fixture
def master_key_env() -> Generator[str, None, None]:
    """Set BURAQ_MASTER_KEY for the duration of a test."""
    with patch.dict(os.environ, {"BURAQ_MASTER_KEY": TEST_MASTER_KEY}):
        yield TEST_MASTER_KEY


# =============================================================================
# Crypto Fixtures
# =============================================================================


@pytest.fixture
def secrets_manager() -> SecretsManager:
    """Secrets manager with the test master key."""
    return SecretsManager(MasterKey(TEST_MASTER_KEY.encode("utf-8")))


@pytest.fixture
def resource_id() -> UUID:
    """Fixed resource identifier."""
    return UUID("67e55044-10b1-426f-9247-bb680e5fe0c8")


@pytest.fixture(scope="session")
def rsa_pem_pair() -> tuple[bytes, bytes]:
    """One 2048-bit RSA pair shared across the session."""
    return generate_rsa_key_pair(RsaKeyLength.B2048)
