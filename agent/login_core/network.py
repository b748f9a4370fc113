"""
Connectivity probes: is the network up before we try to log in?

HttpProber:   HEAD to a known-stable host (default https://www.google.com).
SocketProber: TCP connect to the target site's host:port, network-interface
              agnostic (WiFi, LAN, hotspot).

Both fail closed: any error, timeout, or non-2xx answer means "unreachable".
"""

import socket
from typing import Protocol
from urllib.parse import urlparse

import requests

from .config import log, validate_url
from .constants import (
    PROBE_TIMEOUT_SEC, PROBE_DEADLINE_SEC, DEFAULT_PROBE_URL, PROBE_MODES,
    CFG_PROBE_URL, CFG_PROBE_MODE, CFG_WEBSITE_URL,
)
from .errors import ConfigInvalid


class Prober(Protocol):
    def is_reachable(self, timeout: float = PROBE_TIMEOUT_SEC) -> bool: ...


class HttpProber:
    """HEAD probe on its own session, closed after every probe."""

    def __init__(self, session, probe_url=DEFAULT_PROBE_URL):
        self.session = session
        self.probe_url = probe_url

    def is_reachable(self, timeout=PROBE_TIMEOUT_SEC):
        # connect + read together stay under the probe deadline
        read_timeout = max(PROBE_DEADLINE_SEC - timeout, 1)
        try:
            resp = self.session.head(
                self.probe_url, timeout=(timeout, read_timeout), allow_redirects=True,
            )
        except requests.RequestException as e:
            log.info("Connectivity probe to %s failed: %s", self.probe_url, e)
            return False
        finally:
            self.session.close()
        if 200 <= resp.status_code < 300:
            return True
        log.info("Connectivity probe to %s returned HTTP %d", self.probe_url, resp.status_code)
        return False


class SocketProber:
    def __init__(self, host, port):
        self.host = host
        self.port = port

    @classmethod
    def for_url(cls, url):
        parsed = urlparse(url)
        port = parsed.port or (443 if parsed.scheme == "https" else 80)
        return cls(parsed.hostname, port)

    def is_reachable(self, timeout=PROBE_TIMEOUT_SEC):
        try:
            sock = socket.create_connection((self.host, self.port), timeout=timeout)
            sock.close()
            return True
        except OSError as e:
            log.info("TCP probe to %s:%d failed: %s", self.host, self.port, e)
            return False


def make_prober(config_source, session):
    """Pick the probe from config: ``probeMode`` = "http" (default) or "socket"."""
    mode = config_source.get(CFG_PROBE_MODE, "http")
    if mode == "socket":
        try:
            return SocketProber.for_url(validate_url(config_source.get(CFG_WEBSITE_URL)))
        except ConfigInvalid:
            log.warning("probeMode=socket needs a valid websiteUrl: falling back to HTTP probe")
    elif mode not in PROBE_MODES:
        log.warning("Unknown probeMode %r: using HTTP probe", mode)
    return HttpProber(session, config_source.get(CFG_PROBE_URL) or DEFAULT_PROBE_URL)
