#!/usr/bin/env python3
"""
DecisionLogger demo: text lines, JSON lines, and deny-only sampling.

Run:
  python examples/logging/decision_logger_demo.py
"""

import logging

from restrbac import Guard
from restrbac.logging import DecisionLogger

ROLES = {
    "editor": [
        {"action": "*", "resource": "posts"},
        {"type": "deny", "action": "delete", "resource": "posts"},
    ]
}


def run(guard: Guard) -> None:
    guard.authorize_request("editor", "GET", "/posts")
    guard.authorize_request("editor", "DELETE", "/posts/7")
    guard.authorize_request("stranger", "GET", "/posts")


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(name)s %(message)s")

    print("\n=== 1) text lines ===")
    run(Guard(ROLES, logger_sink=DecisionLogger()))

    print("\n=== 2) JSON lines ===")
    run(Guard(ROLES, logger_sink=DecisionLogger(as_json=True)))

    print("\n=== 3) only denials ===")
    run(Guard(ROLES, logger_sink=DecisionLogger(sample_rate=0.0, always_log_deny=True)))


if __name__ == "__main__":
    main()
