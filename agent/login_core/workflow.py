"""
LoginWorkflow: one login attempt, start to finish.

  IDLE → CHECKING_NETWORK → FETCHING_CREDENTIALS → FETCHING_CONFIG
       → AUTHENTICATING → VERIFYING_SESSION → DONE(success | failure)

Every step is blocking and strictly sequential. Any failure jumps straight to
DONE(failure); nothing is retried inside a run. Each run that leaves IDLE
writes exactly one AttemptOutcome. A tick skipped by the attempt policy writes
nothing.

The scheduled (headless) run and the manual "test now" run both go through
attempt(); the only difference is ``forced``.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from .api import login, verify_session, LoginStatus
from .config import log, get_target_url
from .constants import CFG_VERIFY_PATH, DEFAULT_VERIFY_PATH
from .errors import FailureReason, LoginAgentError
from .http_client import create_session
from .keychain import retrieve_credentials
from .policy import should_attempt, minutes_since
from .state import AttemptOutcome, utcnow


class WorkflowState(str, Enum):
    IDLE = "Idle"
    CHECKING_NETWORK = "CheckingNetwork"
    FETCHING_CREDENTIALS = "FetchingCredentials"
    FETCHING_CONFIG = "FetchingConfig"
    AUTHENTICATING = "Authenticating"
    VERIFYING_SESSION = "VerifyingSession"
    DONE = "Done"


# Reason reported when a step blows up with something other than LoginAgentError
_STEP_FAILURE_REASON = {
    WorkflowState.CHECKING_NETWORK: FailureReason.NO_CONNECTIVITY,
    WorkflowState.FETCHING_CREDENTIALS: FailureReason.CREDENTIAL_UNAVAILABLE,
    WorkflowState.FETCHING_CONFIG: FailureReason.CONFIG_INVALID,
    WorkflowState.AUTHENTICATING: FailureReason.TRANSPORT_ERROR,
    WorkflowState.VERIFYING_SESSION: FailureReason.SESSION_INVALID,
}

_LOGIN_FAILURE_REASON = {
    LoginStatus.REJECTED: FailureReason.AUTH_REJECTED,
    LoginStatus.TRANSPORT_ERROR: FailureReason.TRANSPORT_ERROR,
    LoginStatus.ENCODING_ERROR: FailureReason.ENCODING_ERROR,
}


@dataclass
class AttemptResult:
    success: bool
    skipped: bool = False
    reason: Optional[FailureReason] = None
    states: List[WorkflowState] = field(default_factory=list)
    outcome: Optional[AttemptOutcome] = None

    @property
    def final_state(self):
        return self.states[-1] if self.states else None

    @property
    def exit_code(self):
        return 0 if self.success or self.skipped else 1


class LoginWorkflow:
    """Sequences prober → credentials → config → login → verify → outcome.

    All collaborators are injected. ``session_factory`` makes one fresh
    requests.Session per attempt so cookies never leak between runs.
    """

    def __init__(self, prober, credential_source, config_source, outcome_store,
                 session_factory=create_session, clock=utcnow):
        self.prober = prober
        self.credential_source = credential_source
        self.config_source = config_source
        self.outcome_store = outcome_store
        self.session_factory = session_factory
        self.clock = clock

    def attempt(self, forced=False, now=None) -> AttemptResult:
        now = now or self.clock()
        previous = self.outcome_store.read()

        if not should_attempt(previous, now, forced):
            log.info(
                "Skipping: Last successful login was recent (%d minutes ago)",
                minutes_since(previous, now),
            )
            return AttemptResult(success=False, skipped=True)

        if forced:
            log.info("Forced attempt: skipping the cool-down check")

        states = [WorkflowState.IDLE]
        reason = self._run(states)
        states.append(WorkflowState.DONE)
        success = reason is None

        outcome = AttemptOutcome(success=success, timestamp=now)
        try:
            outcome = self.outcome_store.write(outcome)
        except OSError as e:
            log.error("Failed to persist attempt outcome: %s", e)

        return AttemptResult(success=success, reason=reason, states=states, outcome=outcome)

    def _run(self, states) -> Optional[FailureReason]:
        """Drive the steps. Returns None on success, else the failure reason."""
        try:
            self._steps(states)
            return None
        except LoginAgentError as e:
            log.error("Attempt failed [%s]: %s", e.reason.value, e)
            return e.reason
        except Exception as e:
            reason = _STEP_FAILURE_REASON[states[-1]]
            log.error("Attempt failed [%s] in %s: %s", reason.value, states[-1].value, e, exc_info=True)
            return reason

    def _steps(self, states):
        states.append(WorkflowState.CHECKING_NETWORK)
        if not self.prober.is_reachable():
            raise LoginAgentError("No network connection", reason=FailureReason.NO_CONNECTIVITY)
        log.info("Network connection verified")

        states.append(WorkflowState.FETCHING_CREDENTIALS)
        credentials = retrieve_credentials(self.credential_source)
        log.info("Retrieved stored credentials")

        states.append(WorkflowState.FETCHING_CONFIG)
        url = get_target_url(self.config_source)
        verify_path = self.config_source.get(CFG_VERIFY_PATH) or DEFAULT_VERIFY_PATH

        states.append(WorkflowState.AUTHENTICATING)
        log.info("Attempting login to: %s", url)
        session = self.session_factory()
        try:
            result = login(session, url, credentials)
            if not result.authenticated:
                raise LoginAgentError(
                    f"Login {result.status.value}: {result.detail}",
                    reason=_LOGIN_FAILURE_REASON[result.status],
                )
            log.info("Login accepted (%s)", result.detail)

            states.append(WorkflowState.VERIFYING_SESSION)
            if not verify_session(session, url, verify_path):
                raise LoginAgentError(
                    "Login accepted but the session is not active",
                    reason=FailureReason.SESSION_INVALID,
                )
            log.info("Session verified successfully")
        finally:
            session.close()
