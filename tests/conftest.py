"""Test configuration and fixtures for the login agent."""

import json
import tempfile
from collections.abc import Generator
from datetime import datetime, timezone
from pathlib import Path
from unittest.mock import Mock

import pytest
import requests

from login_core.config import MemoryConfigSource
from login_core.constants import CFG_WEBSITE_URL, USERNAME_ACCOUNT, PASSWORD_ACCOUNT
from login_core.keychain import MemoryCredentialSource
from login_core.state import MemoryOutcomeStore

LOGIN_URL = "https://example.com/login"
NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def make_response(status_code=200, body=None, cookies=None, url=LOGIN_URL) -> requests.Response:
    """Build a real requests.Response without touching the network."""
    resp = requests.Response()
    resp.status_code = status_code
    resp.url = url
    resp.encoding = "utf-8"
    if body is None:
        resp._content = b""
    elif isinstance(body, (dict, list)):
        resp._content = json.dumps(body).encode("utf-8")
    else:
        resp._content = body.encode("utf-8")
    for name, value in (cookies or {}).items():
        resp.cookies.set(name, value)
    return resp


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def session() -> Mock:
    """A requests.Session double; set .post/.get/.head return values per test."""
    return Mock(spec=requests.Session)


@pytest.fixture
def credential_source() -> MemoryCredentialSource:
    return MemoryCredentialSource({
        USERNAME_ACCOUNT: b"userA",
        PASSWORD_ACCOUNT: b"passA",
    })


@pytest.fixture
def config_source() -> MemoryConfigSource:
    return MemoryConfigSource({CFG_WEBSITE_URL: LOGIN_URL})


@pytest.fixture
def outcome_store() -> MemoryOutcomeStore:
    return MemoryOutcomeStore()


@pytest.fixture
def reachable() -> Mock:
    prober = Mock()
    prober.is_reachable.return_value = True
    return prober


@pytest.fixture
def unreachable() -> Mock:
    prober = Mock()
    prober.is_reachable.return_value = False
    return prober
