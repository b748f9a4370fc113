"""Tests for the login request and session verification."""

import json
from unittest.mock import Mock

import pytest
import requests

from login_core.api import (
    LoginStatus,
    encode_login_body,
    login,
    verification_url,
    verify_session,
)
from login_core.constants import USER_AGENT
from login_core.keychain import Credentials

from conftest import LOGIN_URL, make_response

CREDS = Credentials("userA", "passA")


class TestLoginRequest:
    def test_posts_json_body_with_fixed_headers(self, session: Mock) -> None:
        session.post.return_value = make_response(200, {"success": True})

        login(session, LOGIN_URL, CREDS)

        args, kwargs = session.post.call_args
        assert args == (LOGIN_URL,)
        assert json.loads(kwargs["data"]) == {"username": "userA", "password": "passA"}
        assert kwargs["headers"]["Content-Type"] == "application/json"
        assert kwargs["headers"]["User-Agent"] == USER_AGENT
        assert kwargs["timeout"] == 30

    def test_password_not_logged(self, session: Mock, caplog: pytest.LogCaptureFixture) -> None:
        session.post.return_value = make_response(200, {"success": True})
        with caplog.at_level("INFO", logger="loginbot"):
            login(session, LOGIN_URL, CREDS)
        assert "passA" not in caplog.text


class TestLoginClassification:
    @pytest.mark.parametrize("body, expected", [
        ({"success": True}, LoginStatus.AUTHENTICATED),
        ({"success": False}, LoginStatus.REJECTED),
        ({"success": True, "error": "ignored"}, LoginStatus.AUTHENTICATED),
        ({"success": False, "token": "x"}, LoginStatus.REJECTED),
        ({"error": "Invalid password"}, LoginStatus.REJECTED),
        ({"success": "yes", "error": "bad"}, LoginStatus.REJECTED),
        ({"user": {"id": 1}}, LoginStatus.AUTHENTICATED),
    ])
    def test_json_fields(self, session: Mock, body, expected) -> None:
        session.post.return_value = make_response(200, body)
        assert login(session, LOGIN_URL, CREDS).status is expected

    def test_success_field_beats_cookies(self, session: Mock) -> None:
        session.post.return_value = make_response(200, {"success": False}, cookies={"sid": "abc"})
        assert login(session, LOGIN_URL, CREDS).status is LoginStatus.REJECTED

    def test_error_field_beats_cookies(self, session: Mock) -> None:
        session.post.return_value = make_response(200, {"error": "locked"}, cookies={"sid": "abc"})
        assert login(session, LOGIN_URL, CREDS).status is LoginStatus.REJECTED

    def test_cookies_authenticate(self, session: Mock) -> None:
        session.post.return_value = make_response(200, "<html>welcome</html>", cookies={"sid": "abc"})
        result = login(session, LOGIN_URL, CREDS)
        assert result.status is LoginStatus.AUTHENTICATED
        assert result.detail == "cookies"

    def test_cookies_set_on_redirect_authenticate(self, session: Mock) -> None:
        redirect = make_response(302, cookies={"sid": "abc"})
        final = make_response(200, "<html>dashboard</html>", url="https://example.com/home")
        final.history = [redirect]
        session.post.return_value = final
        assert login(session, LOGIN_URL, CREDS).detail == "cookies"

    def test_bare_2xx_defaults_to_authenticated_with_warning(
        self, session: Mock, caplog: pytest.LogCaptureFixture
    ) -> None:
        session.post.return_value = make_response(204)
        with caplog.at_level("WARNING", logger="loginbot"):
            result = login(session, LOGIN_URL, CREDS)
        assert result.status is LoginStatus.AUTHENTICATED
        assert result.detail == "2xx default"
        assert "assuming authenticated" in caplog.text

    @pytest.mark.parametrize("status", [301, 400, 401, 403, 404, 500, 503])
    def test_non_2xx_rejected(self, session: Mock, status: int) -> None:
        session.post.return_value = make_response(status, {"success": True})
        result = login(session, LOGIN_URL, CREDS)
        assert result.status is LoginStatus.REJECTED
        assert result.status_code == status

    @pytest.mark.parametrize("exc", [
        requests.Timeout("timed out"),
        requests.ConnectionError("connection reset"),
        requests.exceptions.InvalidURL("bad host"),
    ])
    def test_transport_errors(self, session: Mock, exc: Exception) -> None:
        session.post.side_effect = exc
        assert login(session, LOGIN_URL, CREDS).status is LoginStatus.TRANSPORT_ERROR

    def test_unencodable_body(self, session: Mock) -> None:
        result = login(session, LOGIN_URL, Credentials("userA", object()))
        assert result.status is LoginStatus.ENCODING_ERROR
        session.post.assert_not_called()


class TestVerificationUrl:
    @pytest.mark.parametrize("base, path, expected", [
        ("https://example.com/login", "/api/user", "https://example.com/api/user"),
        ("https://example.com:8443/auth/login?next=/x#frag", "/api/user", "https://example.com:8443/api/user"),
        ("http://10.0.0.5/login", "me", "http://10.0.0.5/me"),
    ])
    def test_replaces_path(self, base: str, path: str, expected: str) -> None:
        assert verification_url(base, path) == expected


class TestVerifySession:
    def test_get_uses_derived_url_and_user_agent(self, session: Mock) -> None:
        session.get.return_value = make_response(200, {"id": 1})
        assert verify_session(session, LOGIN_URL) is True
        args, kwargs = session.get.call_args
        assert args == ("https://example.com/api/user",)
        assert kwargs["headers"]["User-Agent"] == USER_AGENT
        assert kwargs["timeout"] == 30

    def test_custom_path(self, session: Mock) -> None:
        session.get.return_value = make_response(200)
        verify_session(session, LOGIN_URL, "/dashboard")
        assert session.get.call_args[0] == ("https://example.com/dashboard",)

    @pytest.mark.parametrize("status, expected", [
        (200, True), (204, True), (401, False), (403, False), (302, False), (404, False), (500, False),
    ])
    def test_status_mapping(self, session: Mock, status: int, expected: bool) -> None:
        session.get.return_value = make_response(status)
        assert verify_session(session, LOGIN_URL) is expected

    def test_transport_error_is_false(self, session: Mock) -> None:
        session.get.side_effect = requests.Timeout("timed out")
        assert verify_session(session, LOGIN_URL) is False


def test_encode_login_body() -> None:
    assert json.loads(encode_login_body(CREDS)) == {"username": "userA", "password": "passA"}
