"""
login_core: Scheduled Website Login Agent v1.0
===============================================
Architecture: one blocking attempt per scheduler tick. No threads.

  constants.py    → Version, cool-down, timeouts, wire-format defaults
  errors.py       → Failure taxonomy + exceptions
  config.py       → Paths, logging, atomic JSON, Config Source
  http_client.py  → HTTP session with pooling, no retries, CA bundle
  keychain.py     → Credential Source (macOS Keychain / 0600 file / memory)
  state.py        → AttemptOutcome + Outcome Store
  policy.py       → should_attempt() cool-down decision
  network.py      → Connectivity probes (HTTP HEAD / TCP connect)
  api.py          → Login POST + session verification GET
  workflow.py     → LoginWorkflow state machine
  runner.py       → main() CLI entry point
"""
