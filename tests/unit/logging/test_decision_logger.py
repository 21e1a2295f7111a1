import json
import logging

from restrbac.core.engine import Guard
from restrbac.logging.decision_logger import DecisionLogger


class DummyLogger:
    def __init__(self):
        self.records = []

    def log(self, level, msg):
        self.records.append((level, msg))


PAYLOAD = {
    "role": "accountant",
    "action": "show",
    "resource": "posts",
    "identifier": "7",
    "decision": "deny",
    "allowed": False,
    "reason": "explicit_deny",
    "rule_index": 1,
}


def test_json_lines():
    dl = DecisionLogger(as_json=True)
    dl.logger = DummyLogger()
    dl.log(PAYLOAD)
    level, msg = dl.logger.records[-1]
    assert level == logging.INFO
    assert json.loads(msg) == PAYLOAD


def test_text_lines_mirror_access_messages():
    dl = DecisionLogger(level=logging.WARNING)
    dl.logger = DummyLogger()
    dl.log(PAYLOAD)
    dl.log(dict(PAYLOAD, allowed=True, decision="allow", reason="matched", identifier=None))
    (lvl1, denied), (_, granted) = dl.logger.records
    assert lvl1 == logging.WARNING
    assert denied.startswith("Access denied")
    assert "role=accountant" in denied
    assert "identifier=7" in denied and "rule_index=1" in denied
    assert granted.startswith("Access granted")
    assert "identifier" not in granted


def test_sampling(monkeypatch):
    dl = DecisionLogger(sample_rate=0.5)
    dl.logger = DummyLogger()
    monkeypatch.setattr("random.random", lambda: 0.9)
    dl.log(dict(PAYLOAD, allowed=True))
    assert dl.logger.records == []
    monkeypatch.setattr("random.random", lambda: 0.1)
    dl.log(dict(PAYLOAD, allowed=True))
    assert len(dl.logger.records) == 1


def test_always_log_deny_bypasses_sampling():
    dl = DecisionLogger(sample_rate=0.0, always_log_deny=True)
    dl.logger = DummyLogger()
    dl.log(dict(PAYLOAD, allowed=True))
    dl.log(PAYLOAD)
    assert len(dl.logger.records) == 1
    assert dl.logger.records[0][1].startswith("Access denied")


def test_guard_writes_to_audit_logger(caplog):
    guard = Guard({"r": [{"action": "list", "resource": "posts"}]}, logger_sink=DecisionLogger())
    with caplog.at_level(logging.INFO, logger="restrbac.audit"):
        guard.authorize_request("r", "GET", "/posts")
        guard.authorize_request("r", "DELETE", "/posts/1")
    messages = [r.getMessage() for r in caplog.records if r.name == "restrbac.audit"]
    assert messages[0].startswith("Access granted") and "action=list" in messages[0]
    assert messages[1].startswith("Access denied") and "reason=no_match" in messages[1]
