"""
Website Login Agent, scheduled entry point
===========================================
Invoked by the OS scheduler (launchd / cron / Task Scheduler) on a fixed
interval. Each run logs into the configured website, verifies the session,
and records the outcome. A run within 55 minutes of a successful one exits
immediately.

Usage:
    python agent.py               # scheduled tick
    python agent.py --test        # test login now (ignores the cool-down)
    python agent.py --configure   # store URL + credentials
    python agent.py --status      # last outcome
"""

import sys

from login_core.runner import main

if __name__ == "__main__":
    sys.exit(main())
