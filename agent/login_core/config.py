"""
Paths, logging, config load/save, safe_print, and the Config Source.
"""

import os
import sys
import json
import logging
import tempfile
from pathlib import Path
from typing import Any, Optional, Protocol
from urllib.parse import urlparse

from .constants import CFG_WEBSITE_URL
from .errors import ConfigInvalid


# ─── Paths ───────────────────────────────────────────────────────
# One config/state per user per machine. LOGINBOT_HOME overrides everything
# (used by the scheduler plist and by tests).
_FOLDER_NAME = "WebsiteLoginBot"

if os.environ.get("LOGINBOT_HOME"):
    BASE_DIR = Path(os.environ["LOGINBOT_HOME"])
    LOG_DIR = BASE_DIR / "logs"
elif sys.platform == "darwin":
    BASE_DIR = Path.home() / "Library" / "Application Support" / _FOLDER_NAME
    LOG_DIR = Path.home() / "Library" / "Logs" / _FOLDER_NAME
else:
    BASE_DIR = Path.home() / ".websiteloginbot"
    LOG_DIR = BASE_DIR / "logs"

CONFIG_FILE = BASE_DIR / "config.json"
STATE_FILE = BASE_DIR / "state.json"
CREDENTIALS_FILE = BASE_DIR / "credentials.json"
LOG_FILE = LOG_DIR / "worker.log"


# ─── Safe print (no crash when launched without a console) ───────

def safe_print(*args, **kwargs):
    try:
        print(*args, **kwargs)
    except Exception:
        pass


# ─── Logging ─────────────────────────────────────────────────────

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"
LOG_MAX_BYTES = 1_000_000

log = logging.getLogger("loginbot")
_console_handler = None


def setup_logging(log_file=LOG_FILE, console=True):
    """File log (append-only, truncated past 1 MB) plus stdout mirror.

    Called once by the runner; importing the package never touches disk.
    """
    global _console_handler
    log_file = Path(log_file)
    log_file.parent.mkdir(parents=True, exist_ok=True)

    try:
        if log_file.exists() and log_file.stat().st_size > LOG_MAX_BYTES:
            log_file.write_text("")
    except OSError:
        pass

    logging.basicConfig(
        filename=str(log_file),
        level=logging.INFO,
        format=LOG_FORMAT,
        datefmt=LOG_DATEFMT,
        encoding="utf-8",
    )
    log.setLevel(logging.INFO)

    if console and _console_handler is None:
        _console_handler = logging.StreamHandler(sys.stdout)
        _console_handler.setLevel(logging.INFO)
        _console_handler.setFormatter(logging.Formatter(LOG_FORMAT, LOG_DATEFMT))
        log.addHandler(_console_handler)
    return log


# ─── Atomic JSON writes ──────────────────────────────────────────

def atomic_write_json(path, data, mode=None):
    """Write JSON to ``path`` all-or-nothing.

    The payload goes to a temp file in the same directory and is then
    os.replace()d over the target, so a crash mid-write leaves the previous
    file intact.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=str(path.parent))
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
            f.flush()
            os.fsync(f.fileno())
        if mode is not None:
            os.chmod(tmp_name, mode)
        os.replace(tmp_name, path)
    except BaseException:
        try:
            os.unlink(tmp_name)
        except OSError:
            pass
        raise


def read_json(path):
    """Load a JSON object from disk. Returns dict or None (missing / corrupt)."""
    path = Path(path)
    if not path.exists():
        return None
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (json.JSONDecodeError, OSError, UnicodeDecodeError):
        return None
    return data if isinstance(data, dict) else None


# ─── Config Management ──────────────────────────────────────────

def load_config(path=CONFIG_FILE):
    """Load config from disk. Returns dict or None."""
    return read_json(path)


def save_config(config, path=CONFIG_FILE):
    """Save config dict to disk (atomically)."""
    atomic_write_json(path, config)
    log.info("Config saved to %s", path)


def validate_url(value) -> str:
    """Return ``value`` stripped if it is an absolute http(s) URL with a host."""
    if not isinstance(value, str) or not value.strip():
        raise ConfigInvalid("Website URL is missing")
    url = value.strip()
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.hostname:
        raise ConfigInvalid(f"Website URL is not an absolute http(s) URL: {url!r}")
    return url


# ─── Config Source (capability) ──────────────────────────────────

class ConfigSource(Protocol):
    def get(self, key: str, default: Any = None) -> Any: ...

    def set(self, key: str, value: Any) -> None: ...


class JsonConfigSource:
    """Config Source backed by config.json. Every set() rewrites the file atomically."""

    def __init__(self, path=CONFIG_FILE):
        self.path = Path(path)

    def get(self, key, default=None):
        config = load_config(self.path) or {}
        return config.get(key, default)

    def set(self, key, value):
        config = load_config(self.path) or {}
        if value is None:
            config.pop(key, None)
        else:
            config[key] = value
        save_config(config, self.path)


class MemoryConfigSource:
    """In-memory Config Source for tests and one-off runs."""

    def __init__(self, values: Optional[dict] = None):
        self.values = dict(values or {})

    def get(self, key, default=None):
        return self.values.get(key, default)

    def set(self, key, value):
        if value is None:
            self.values.pop(key, None)
        else:
            self.values[key] = value


def get_target_url(config_source) -> str:
    """The validated login URL, or ConfigInvalid."""
    return validate_url(config_source.get(CFG_WEBSITE_URL))
