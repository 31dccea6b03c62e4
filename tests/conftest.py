"""Pytest configuration and fixtures."""

import pytest

from tests.factories import OTHER_SECRET_KEY, SECRET_KEY, address_of, make_compiler, make_node


@pytest.fixture
def node():
    """Node client mock on the test network."""
    return make_node()


@pytest.fixture
def compiler():
    """Compiler client mock."""
    return make_compiler()


@pytest.fixture
def keypair():
    """Deterministic keypair."""
    return {"secret_key": SECRET_KEY, "public_key": address_of(SECRET_KEY)}


@pytest.fixture
def other_keypair():
    """Second deterministic keypair, without public key."""
    return {"secret_key": OTHER_SECRET_KEY}


@pytest.fixture
def settings():
    """Create settings instance for testing."""
    from aesdk.core.config import Settings

    return Settings(_env_file=None)
