"""
Failure taxonomy for a login attempt.

Every failure is terminal for the current run. The next scheduler tick,
gated by the attempt policy, is the only retry.
"""

from enum import Enum


class FailureReason(str, Enum):
    NO_CONNECTIVITY = "NoConnectivity"
    CREDENTIAL_UNAVAILABLE = "CredentialUnavailable"
    CONFIG_INVALID = "ConfigInvalid"
    TRANSPORT_ERROR = "TransportError"
    AUTH_REJECTED = "AuthRejected"
    SESSION_INVALID = "SessionInvalid"
    ENCODING_ERROR = "EncodingError"


class LoginAgentError(Exception):
    """Base error. ``reason`` maps the error onto the failure taxonomy."""

    reason = FailureReason.TRANSPORT_ERROR

    def __init__(self, message="", reason=None):
        super().__init__(message)
        if reason is not None:
            self.reason = reason


class CredentialUnavailable(LoginAgentError):
    reason = FailureReason.CREDENTIAL_UNAVAILABLE


class CredentialNotFound(CredentialUnavailable):
    """The requested account has no item in the credential store."""


class CredentialStoreError(CredentialUnavailable):
    """The credential store itself failed (tool missing, bad status, bad data)."""


class ConfigInvalid(LoginAgentError):
    reason = FailureReason.CONFIG_INVALID
