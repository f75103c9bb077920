"""Tests for the submission audit hook."""

import logging

from backend.hooks.audit_hooks import log_submission


def _log(**overrides):
    kwargs = dict(
        client_folder="Acme-Co--2026-03-02",
        overall_score=41,
        total_systems=9,
        total_skills=12,
        automation_coverage=55,
        submitted_at="2026-03-02T10:00:00+00:00",
    )
    kwargs.update(overrides)
    return log_submission(**kwargs)


class TestLogSubmission:
    def test_entry_contents(self):
        entry = _log(session_token="c" * 64)
        assert entry == {
            "client_folder": "Acme-Co--2026-03-02",
            "overall_score": 41,
            "total_systems": 9,
            "total_skills": 12,
            "automation_coverage": 55,
            "submitted_at": "2026-03-02T10:00:00+00:00",
            "has_session": True,
        }

    def test_no_session(self):
        assert _log()["has_session"] is False

    def test_logs_summary_at_info(self, caplog):
        with caplog.at_level(logging.INFO, logger="backend.hooks.audit_hooks"):
            _log()
        messages = [r.getMessage() for r in caplog.records]
        assert "Submission processed: Acme-Co--2026-03-02" in messages
        assert "Overall Score: 41/100" in messages
        assert "Automation coverage: 55%" in messages
