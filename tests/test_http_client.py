"""Tests for the HTTP session factory."""

import certifi
import pytest

from login_core import http_client
from login_core.constants import USER_AGENT


class TestCreateSession:
    def test_fixed_user_agent(self) -> None:
        session = http_client.create_session()
        assert session.headers["User-Agent"] == USER_AGENT

    def test_adapters_do_not_retry(self) -> None:
        session = http_client.create_session()
        for prefix in ("http://", "https://"):
            adapter = session.get_adapter(prefix + "example.com")
            assert adapter.max_retries.total == 0

    def test_ca_bundle_defaults_to_certifi(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("REQUESTS_CA_BUNDLE", raising=False)
        monkeypatch.delenv("SSL_CERT_FILE", raising=False)
        assert http_client.create_session().verify == certifi.where()

    def test_ca_bundle_env_override(self, monkeypatch: pytest.MonkeyPatch, temp_dir) -> None:
        bundle = temp_dir / "ca.pem"
        bundle.write_text("")
        monkeypatch.setenv("REQUESTS_CA_BUNDLE", str(bundle))
        assert http_client.create_session().verify == str(bundle)

