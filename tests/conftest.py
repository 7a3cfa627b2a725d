"""
Pytest configuration and shared fixtures for osbclient tests.
"""

import json
import tempfile
from pathlib import Path
from typing import Any, Dict, Generator, Optional

import pytest

from osbclient.config.settings import ClientConfiguration
from osbclient.core.transport import BrokerResponse
from osbclient.core.version import latest
from osbclient.sdk.adapters.mock import MockAdapter


BROKER_URL = "http://broker.example.com"


def make_response(
    status_code: int,
    body: Any = None,
    headers: Optional[Dict[str, str]] = None,
) -> BrokerResponse:
    """
    Build a canned broker response.

    Args:
        status_code: HTTP status code.
        body: Dict/list serialized as JSON, or raw bytes/str sent as-is.
        headers: Optional response headers.
    """
    if isinstance(body, (dict, list)):
        body = json.dumps(body)
    return BrokerResponse(status_code=status_code, headers=headers or {}, stream=body)


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def mock_adapter() -> MockAdapter:
    """Empty mock adapter; tests register reactions with ``add``."""
    return MockAdapter()


@pytest.fixture
def make_config():
    """Factory for client configurations pointing at the test broker."""

    def _make_config(**overrides) -> ClientConfiguration:
        values = dict(url=BROKER_URL, name="test-broker", api_version=latest())
        values.update(overrides)
        return ClientConfiguration(**values)

    return _make_config


@pytest.fixture(name="make_response")
def make_response_fixture():
    """Factory for canned broker responses."""
    return make_response
