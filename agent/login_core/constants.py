"""
Constants, thresholds, timeouts, and wire-format defaults.
"""

AGENT_VERSION = "1.0.0"

# ─── Attempt policy ──────────────────────────────────────────────
# A successful session is not re-validated more often than this.
# Just under one hour so an hourly scheduler tick is never skipped by jitter.
SUCCESS_COOLDOWN_SEC = 55 * 60

# ─── Network ─────────────────────────────────────────────────────
PROBE_TIMEOUT_SEC = 5          # Connectivity probe (HEAD / TCP connect)
PROBE_DEADLINE_SEC = 6         # Hard cap on total probe latency
LOGIN_TIMEOUT_SEC = 30         # Login POST
VERIFY_TIMEOUT_SEC = 30        # Session verification GET
RESPONSE_LOG_CHARS = 200       # Truncate response bodies in the log

DEFAULT_PROBE_URL = "https://www.google.com"
DEFAULT_VERIFY_PATH = "/api/user"
PROBE_MODES = ("http", "socket")

USER_AGENT = "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36"
CONTENT_TYPE_JSON = "application/json"

# ─── Credential store ────────────────────────────────────────────
KEYCHAIN_SERVICE = "com.websiteloginbot.credentials"
USERNAME_ACCOUNT = "username"
PASSWORD_ACCOUNT = "password"

# ─── Config keys (config.json) ───────────────────────────────────
CFG_WEBSITE_URL = "websiteUrl"
CFG_VERIFY_PATH = "verifyPath"
CFG_PROBE_URL = "probeUrl"
CFG_PROBE_MODE = "probeMode"

# ─── Outcome keys (state.json) ───────────────────────────────────
STATE_LAST_SUCCESS = "lastSuccess"
STATE_LAST_ATTEMPT = "lastAttemptTime"

# ─── Exit codes ──────────────────────────────────────────────────
EXIT_OK = 0
EXIT_FAILURE = 1
