"""
Tests for purging long-expired report links
"""
from datetime import datetime, timedelta

from academy.cleanup import purge_expired_report_tokens
from academy.models import ReportToken
from academy.report_tokens import issue_token

from payloads import make_assessment

NOW = datetime(2026, 6, 1, 12, 0, 0)


def test_only_tokens_past_retention_are_purged(db):
    assessment = make_assessment(db)
    old_token = issue_token(db, "analysis", assessment.id, now=NOW - timedelta(days=400)).token
    recent_token = issue_token(db, "analysis", assessment.id, now=NOW - timedelta(days=100)).token

    removed = purge_expired_report_tokens(db, now=NOW)

    assert removed == 1
    assert db.get(ReportToken, old_token) is None
    assert db.get(ReportToken, recent_token) is not None


def test_disabled_retention_keeps_everything(db, monkeypatch):
    from academy.settings import settings

    monkeypatch.setattr(settings, "report_token_retention_days", 0)
    assessment = make_assessment(db)
    issue_token(db, "analysis", assessment.id, now=NOW - timedelta(days=4000))

    assert purge_expired_report_tokens(db, now=NOW) == 0
    assert db.query(ReportToken).count() == 1
