"""
Pytest configuration and fixtures for service-client-builder tests.
"""

from unittest.mock import Mock

import pytest
import responses as responses_lib

from service_client.logging.filters import clear_trace_id


@pytest.fixture
def base_url():
    """Base URL for testing."""
    return "https://somedomain.com"


@pytest.fixture
def mock_responses():
    """Mock HTTP responses using responses library."""
    with responses_lib.RequestsMock() as rsps:
        yield rsps


@pytest.fixture
def log():
    """Logger collaborator with info/error/warn mocks."""
    return Mock(spec=["info", "error", "warn"])


@pytest.fixture(autouse=True)
def _reset_trace_id():
    yield
    clear_trace_id()
