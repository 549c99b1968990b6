"""
Test configuration and fixtures for the customer management service
"""

import os
from typing import Generator
from unittest.mock import patch

import pytest
from sqlalchemy.orm import sessionmaker

from customer_management.domain.value_objects.address import Address
from customer_management.infrastructure.configuration.config import reset_config
from customer_management.infrastructure.database.operations import DatabaseManager


# Mock environment variables for testing
@pytest.fixture(autouse=True)
def mock_env():
    """Mock environment variables for testing"""
    test_env = {
        'DATABASE_URL': 'sqlite:///:memory:',
        'ENVIRONMENT': 'test',
        'LOG_LEVEL': 'DEBUG',
        'CUSTOMER_API_BASE_URL': 'https://customers.test/api',
        'AUTH_BASE_URL': 'https://identity.test',
    }

    reset_config()
    with patch.dict(os.environ, test_env, clear=True):
        yield test_env
    reset_config()


@pytest.fixture
def address() -> Address:
    """A valid address"""
    return Address(
        street="Avenida Paulista",
        number="1000",
        neighborhood="Bela Vista",
        city="São Paulo",
        state="SP",
        zip_code="01310-100",
    )


@pytest.fixture
def session_factory() -> Generator[sessionmaker, None, None]:
    """Session factory bound to a fresh in-memory SQLite database"""
    manager = DatabaseManager(database_url="sqlite:///:memory:")
    manager.create_tables()
    yield manager.get_session_factory()
    manager.close()
