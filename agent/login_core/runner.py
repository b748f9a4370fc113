"""
Entry point: one scheduler tick, plus the configure/status helpers.

The scheduler (launchd, cron, Task Scheduler) runs ``login-agent`` on a fixed
interval; ``login-agent --test`` is the manual "test login now" trigger.
Exit code 0 on success or skip, 1 on failure.
"""

import sys
import getpass
import argparse

from .constants import AGENT_VERSION, CFG_WEBSITE_URL, EXIT_OK, EXIT_FAILURE
from .config import (
    log, safe_print, setup_logging, validate_url,
    JsonConfigSource, LOG_FILE,
)
from .errors import ConfigInvalid, CredentialUnavailable
from .http_client import create_session
from .keychain import (
    default_credential_source, store_credentials, delete_credentials, has_credentials,
)
from .network import make_prober
from .state import JsonOutcomeStore, format_ts
from .workflow import LoginWorkflow


def build_workflow(config_source=None, credential_source=None, outcome_store=None):
    """Wire the production adapters (config.json, Keychain, state.json)."""
    config_source = config_source or JsonConfigSource()
    credential_source = credential_source or default_credential_source()
    outcome_store = outcome_store or JsonOutcomeStore()
    prober = make_prober(config_source, create_session())
    return LoginWorkflow(prober, credential_source, config_source, outcome_store)


# ─── Configure ───────────────────────────────────────────────────

def configure(config_source, credential_source, url=None, username=None, password=None):
    """Store the website URL and credentials. Prompts for anything not given."""
    if url is None:
        url = input("Website URL (e.g. https://example.com/login): ")
    if username is None:
        username = input("Username: ")
    if password is None:
        password = getpass.getpass("Password: ")

    url, username = url.strip(), username.strip()
    if not url or not username or not password:
        raise ConfigInvalid("Please fill in all fields.")
    url = validate_url(url)

    store_credentials(credential_source, username, password)
    config_source.set(CFG_WEBSITE_URL, url)
    log.info("Configuration saved (url=%s)", url)


def is_configured(config_source, credential_source) -> bool:
    try:
        validate_url(config_source.get(CFG_WEBSITE_URL))
    except ConfigInvalid:
        return False
    return has_credentials(credential_source)


# ─── Status ──────────────────────────────────────────────────────

def describe_status(outcome_store, config_source, credential_source):
    outcome = outcome_store.read()
    if outcome is None:
        lines = ["Status: Not attempted"]
    else:
        lines = [
            "Status: " + ("Success" if outcome.success else "Failed"),
            "Last: " + format_ts(outcome.timestamp),
        ]
    lines.append("URL: " + (config_source.get(CFG_WEBSITE_URL) or "(not set)"))
    lines.append("Configured: " + ("yes" if is_configured(config_source, credential_source) else "no"))
    return lines


# ─── CLI ─────────────────────────────────────────────────────────

def _parser():
    p = argparse.ArgumentParser(
        prog="login-agent",
        description="Log into the configured website and verify the session.",
    )
    p.add_argument("--version", action="version", version=f"%(prog)s {AGENT_VERSION}")
    p.add_argument("--test", "--force", dest="forced", action="store_true",
                   help="run now, ignoring the cool-down after a recent success")
    mode = p.add_mutually_exclusive_group()
    mode.add_argument("--configure", action="store_true",
                      help="store the website URL and credentials")
    mode.add_argument("--status", action="store_true",
                      help="show the last attempt outcome")
    mode.add_argument("--clear-credentials", action="store_true",
                      help="delete the stored credentials")
    mode.add_argument("--logs", action="store_true",
                      help="print the log file location")
    p.add_argument("--url", help="website URL for --configure")
    p.add_argument("--username", help="username for --configure")
    p.add_argument("--password-stdin", action="store_true",
                   help="read the password for --configure from stdin")
    p.add_argument("--no-console", action="store_true",
                   help="log to the file only")
    return p


def run_attempt(workflow, forced=False) -> int:
    log.info("=== LoginWorker Started ===")
    if forced:
        log.info("Running in test mode")

    result = workflow.attempt(forced=forced)

    if result.skipped:
        log.info("=== LoginWorker Finished (Skipped) ===")
    elif result.success:
        log.info("Login completed successfully")
        log.info("=== LoginWorker Finished (Success) ===")
    else:
        log.error("Login failed [%s]", result.reason.value)
        log.info("=== LoginWorker Finished (Failed) ===")
    return result.exit_code


def main(argv=None, config_source=None, credential_source=None, outcome_store=None):
    """CLI entry point. Returns the process exit code."""
    args = _parser().parse_args(argv)
    setup_logging(console=not args.no_console)

    try:
        if args.logs:
            safe_print(LOG_FILE)
            return EXIT_OK

        config_source = config_source or JsonConfigSource()
        credential_source = credential_source or default_credential_source()

        if args.configure:
            password = sys.stdin.readline().rstrip("\n") if args.password_stdin else None
            configure(config_source, credential_source,
                      url=args.url, username=args.username, password=password)
            safe_print("Configuration saved.")
            return EXIT_OK

        if args.clear_credentials:
            delete_credentials(credential_source)
            log.info("Stored credentials deleted")
            safe_print("Credentials deleted.")
            return EXIT_OK

        outcome_store = outcome_store or JsonOutcomeStore()

        if args.status:
            for line in describe_status(outcome_store, config_source, credential_source):
                safe_print(line)
            return EXIT_OK

        workflow = build_workflow(config_source, credential_source, outcome_store)
        return run_attempt(workflow, forced=args.forced)

    except (ConfigInvalid, CredentialUnavailable) as e:
        log.error("%s: %s", e.reason.value, e)
        safe_print(f"Error: {e}")
        return EXIT_FAILURE
    except KeyboardInterrupt:
        safe_print("\nStopped by user.")
        return EXIT_FAILURE
    except Exception as e:
        log.error("LoginWorker crashed: %s", e, exc_info=True)
        return EXIT_FAILURE
