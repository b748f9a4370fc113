"""
Website API calls: login POST and session verification GET.

Both are blocking and run strictly one after the other on the same
requests.Session, so cookies set by the login are sent with the verification.
No call here retries: a failure is reported to the workflow as-is.
"""

import json
from dataclasses import dataclass
from enum import Enum
from urllib.parse import urlparse

import requests

from .config import log
from .constants import (
    LOGIN_TIMEOUT_SEC, VERIFY_TIMEOUT_SEC, DEFAULT_VERIFY_PATH,
    CONTENT_TYPE_JSON, USER_AGENT, RESPONSE_LOG_CHARS,
)


class LoginStatus(str, Enum):
    AUTHENTICATED = "Authenticated"
    REJECTED = "Rejected"
    TRANSPORT_ERROR = "TransportError"
    ENCODING_ERROR = "EncodingError"


@dataclass(frozen=True)
class LoginResult:
    status: LoginStatus
    detail: str = ""
    status_code: int = 0

    @property
    def authenticated(self):
        return self.status is LoginStatus.AUTHENTICATED


def _snippet(resp):
    try:
        return resp.text[:RESPONSE_LOG_CHARS]
    except Exception:
        return "<unreadable body>"


def _is_2xx(status_code):
    return 200 <= status_code < 300


def _response_set_cookies(resp):
    """True if this response, or a redirect on the way to it, set any cookie."""
    if len(resp.cookies):
        return True
    return any(len(r.cookies) for r in resp.history)


def encode_login_body(credentials) -> str:
    return json.dumps({"username": credentials.username, "password": credentials.password})


# ─── Login ───────────────────────────────────────────────────────

def login(session, url, credentials, timeout=LOGIN_TIMEOUT_SEC) -> LoginResult:
    """POST credentials as JSON and classify the answer.

    Classification on 2xx, first match wins:
      boolean ``success`` field → its value
      ``error`` field          → rejected
      cookies set              → authenticated
      anything else            → authenticated (status code alone)
    """
    try:
        body = encode_login_body(credentials)
    except (TypeError, ValueError) as e:
        log.error("Failed to encode login request: %s", e)
        return LoginResult(LoginStatus.ENCODING_ERROR, str(e))

    headers = {"Content-Type": CONTENT_TYPE_JSON, "User-Agent": USER_AGENT}

    try:
        resp = session.post(url, data=body, headers=headers, timeout=timeout)
    except requests.RequestException as e:
        log.warning("Login request error: %s", e)
        return LoginResult(LoginStatus.TRANSPORT_ERROR, str(e))

    log.info("Login response status: %d", resp.status_code)

    if not _is_2xx(resp.status_code):
        log.warning("Login failed. Response: %s", _snippet(resp))
        return LoginResult(LoginStatus.REJECTED, f"HTTP {resp.status_code}", resp.status_code)

    try:
        data = resp.json()
    except ValueError:
        data = None

    if isinstance(data, dict):
        success = data.get("success")
        if isinstance(success, bool):
            log.info("Login response success=%s", success)
            status = LoginStatus.AUTHENTICATED if success else LoginStatus.REJECTED
            return LoginResult(status, "success field", resp.status_code)

        if data.get("error") is not None:
            log.warning("Login error: %s", str(data["error"])[:RESPONSE_LOG_CHARS])
            return LoginResult(LoginStatus.REJECTED, "error field", resp.status_code)

    if _response_set_cookies(resp):
        log.info("Login response set cookies: %s", ", ".join(sorted(resp.cookies.keys())) or "(on redirect)")
        return LoginResult(LoginStatus.AUTHENTICATED, "cookies", resp.status_code)

    # Unconfirmed 2xx: may report success for a page that never authenticated.
    log.warning(
        "Login response has no success flag, error, or cookies: assuming "
        "authenticated from HTTP %d. Response: %s",
        resp.status_code, _snippet(resp),
    )
    return LoginResult(LoginStatus.AUTHENTICATED, "2xx default", resp.status_code)


# ─── Session verification ────────────────────────────────────────

def verification_url(base_url, path=DEFAULT_VERIFY_PATH) -> str:
    """``base_url`` with its path replaced (query and fragment dropped)."""
    if not path.startswith("/"):
        path = "/" + path
    return urlparse(base_url)._replace(path=path, params="", query="", fragment="").geturl()


def verify_session(session, base_url, path=DEFAULT_VERIFY_PATH, timeout=VERIFY_TIMEOUT_SEC) -> bool:
    """GET the verification endpoint. Only a 2xx proves the session is live."""
    url = verification_url(base_url, path)
    try:
        resp = session.get(url, headers={"User-Agent": USER_AGENT}, timeout=timeout)
    except requests.RequestException as e:
        log.warning("Session verification error: %s", e)
        return False

    log.info("Session verification status: %d", resp.status_code)

    if _is_2xx(resp.status_code):
        log.info("Session verification response: %s", _snippet(resp))
        return True
    if resp.status_code in (401, 403):
        log.warning("Session verification failed: not authenticated (HTTP %d)", resp.status_code)
        return False
    log.warning("Session verification failed: HTTP %d", resp.status_code)
    return False
