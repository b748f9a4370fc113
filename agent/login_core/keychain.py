"""
Credential Source: secure storage for the username and password.

Two accounts are kept under one service name: ``username`` and ``password``.
Backends:
  KeychainCredentialSource → macOS Keychain via keyring
  FileCredentialSource     → JSON file, mode 0600 (hosts without a Keychain)
  MemoryCredentialSource   → in-process dict (tests, dry runs)

Values are bytes at this layer; the helpers at the bottom speak Credentials.
"""

import sys
import base64
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol

import keyring
from keyring.errors import KeyringError, PasswordDeleteError

from .config import log, read_json, atomic_write_json, CREDENTIALS_FILE
from .constants import KEYCHAIN_SERVICE, USERNAME_ACCOUNT, PASSWORD_ACCOUNT
from .errors import CredentialNotFound, CredentialStoreError


@dataclass(frozen=True)
class Credentials:
    username: str
    password: str = field(repr=False)


class CredentialSource(Protocol):
    def get(self, account: str) -> bytes: ...

    def put(self, account: str, value: bytes) -> None: ...

    def delete(self, account: str) -> None: ...


# ─── macOS Keychain ──────────────────────────────────────────────

class KeychainCredentialSource:
    """Generic-password items in the login keychain, via keyring.

    Secrets never appear on a command line and round-trip as exact text.
    """

    def __init__(self, service=KEYCHAIN_SERVICE):
        self.service = service

    def get(self, account):
        try:
            value = keyring.get_password(self.service, account)
        except KeyringError as e:
            raise CredentialStoreError(f"Keychain lookup failed for {account!r}: {e}") from e
        if value is None:
            raise CredentialNotFound(f"No keychain item for account {account!r}")
        return value.encode("utf-8")

    def put(self, account, value):
        try:
            text = value.decode("utf-8")
        except UnicodeDecodeError as e:
            raise CredentialStoreError("Invalid credential data") from e
        try:
            keyring.set_password(self.service, account, text)
        except KeyringError as e:
            raise CredentialStoreError(f"Keychain write failed for {account!r}: {e}") from e

    def delete(self, account):
        try:
            keyring.delete_password(self.service, account)
        except PasswordDeleteError:
            # item not found
            return
        except KeyringError as e:
            raise CredentialStoreError(f"Keychain delete failed for {account!r}: {e}") from e


# ─── File store (no Keychain on this host) ───────────────────────

class FileCredentialSource:
    """Credentials in a 0600 JSON file, one base64 value per account."""

    def __init__(self, path=CREDENTIALS_FILE, service=KEYCHAIN_SERVICE):
        self.path = Path(path)
        self.service = service

    def _load(self):
        data = read_json(self.path) or {}
        items = data.get(self.service)
        return dict(items) if isinstance(items, dict) else {}

    def _save(self, items):
        data = read_json(self.path) or {}
        data[self.service] = items
        atomic_write_json(self.path, data, mode=0o600)

    def get(self, account):
        items = self._load()
        if account not in items:
            raise CredentialNotFound(f"No stored item for account {account!r}")
        try:
            return base64.b64decode(items[account], validate=True)
        except (ValueError, TypeError) as e:
            raise CredentialStoreError(f"Corrupt credential item for {account!r}") from e

    def put(self, account, value):
        items = self._load()
        items[account] = base64.b64encode(value).decode("ascii")
        try:
            self._save(items)
        except OSError as e:
            raise CredentialStoreError(f"Credential file write failed: {e}") from e

    def delete(self, account):
        items = self._load()
        if items.pop(account, None) is None:
            return
        try:
            self._save(items)
        except OSError as e:
            raise CredentialStoreError(f"Credential file write failed: {e}") from e


class MemoryCredentialSource:
    def __init__(self, items=None):
        self.items = dict(items or {})

    def get(self, account):
        if account not in self.items:
            raise CredentialNotFound(f"No stored item for account {account!r}")
        return self.items[account]

    def put(self, account, value):
        self.items[account] = bytes(value)

    def delete(self, account):
        self.items.pop(account, None)


def default_credential_source():
    """Keychain on macOS, the 0600 file store elsewhere."""
    if sys.platform == "darwin":
        return KeychainCredentialSource()
    log.info("No macOS Keychain available, using credential file %s", CREDENTIALS_FILE)
    return FileCredentialSource()


# ─── Credential helpers ──────────────────────────────────────────

def _decode(account, value):
    try:
        return value.decode("utf-8")
    except UnicodeDecodeError as e:
        raise CredentialStoreError(f"Invalid credential data for {account!r}") from e


def retrieve_credentials(source) -> Credentials:
    """Read both accounts. Raises CredentialUnavailable (or a subclass)."""
    username = _decode(USERNAME_ACCOUNT, source.get(USERNAME_ACCOUNT))
    password = _decode(PASSWORD_ACCOUNT, source.get(PASSWORD_ACCOUNT))
    return Credentials(username=username, password=password)


def delete_credentials(source):
    source.delete(USERNAME_ACCOUNT)
    source.delete(PASSWORD_ACCOUNT)


def store_credentials(source, username, password):
    """Replace any stored credentials with these (delete, then add both)."""
    delete_credentials(source)
    source.put(USERNAME_ACCOUNT, username.encode("utf-8"))
    source.put(PASSWORD_ACCOUNT, password.encode("utf-8"))
    log.info("Credentials stored")


update_credentials = store_credentials


def has_credentials(source) -> bool:
    try:
        retrieve_credentials(source)
        return True
    except (CredentialNotFound, CredentialStoreError):
        return False
