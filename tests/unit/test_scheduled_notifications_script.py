from __future__ import annotations

from datetime import timedelta
from unittest.mock import MagicMock, patch

from chon.db import models
from chon.db.repositories import notifications as notification_repo
from chon.utils.feature_flags import refresh_feature_flag_cache
from scripts import process_scheduled_notifications as script


def _pending(db_session, **overrides):
    fields = {"title": "t", "message": "m", "status": "pending"}
    fields.update(overrides)
    return notification_repo.create_notification(db_session, fields=fields)


def _express_client(result):
    client = MagicMock()
    client.send_notification.return_value = result
    return client


def test_dry_run_sends_nothing(db_session):
    notification = _pending(db_session)
    client = _express_client({"success": True, "data": {}, "status_code": 200})

    with patch("chon.workers.notification_jobs.get_express_api_client", return_value=client):
        assert script.main(["--dry-run"]) == 0

    client.send_notification.assert_not_called()
    db_session.expire_all()
    assert notification_repo.get_notification(db_session, notification_id=notification.id).status == "pending"


def test_due_notifications_are_sent_before_exit_in_thread_mode(db_session, monkeypatch):
    monkeypatch.setenv("JOB_DISPATCH_MODE", "thread")
    now = models.now_utc()
    due = _pending(db_session, scheduled_at=now - timedelta(minutes=1))
    later = _pending(db_session, scheduled_at=now + timedelta(hours=1))
    client = _express_client({"success": True, "data": {"id": "n-1"}, "status_code": 200})

    with patch("chon.workers.notification_jobs.get_express_api_client", return_value=client):
        assert script.main([]) == 0

    assert client.send_notification.call_count == 1
    db_session.expire_all()
    sent = notification_repo.get_notification(db_session, notification_id=due.id)
    assert sent.status == "sent"
    assert sent.sent_at is not None
    assert notification_repo.get_notification(db_session, notification_id=later.id).status == "pending"


def test_failed_send_returns_non_zero(db_session):
    notification = _pending(db_session)
    client = _express_client({"success": False, "error": "bad gateway", "status_code": 502})

    with patch("chon.workers.notification_jobs.get_express_api_client", return_value=client):
        assert script.main([]) == 1

    db_session.expire_all()
    assert notification_repo.get_notification(db_session, notification_id=notification.id).status == "failed"


def test_send_exception_is_retried_then_reported(db_session):
    _pending(db_session)
    client = MagicMock()
    client.send_notification.side_effect = RuntimeError("connection reset")

    with patch("chon.workers.notification_jobs.get_express_api_client", return_value=client):
        assert script.main([]) == 1

    assert client.send_notification.call_count == 3


def test_disabled_flag_short_circuits(db_session, monkeypatch):
    _pending(db_session)
    monkeypatch.setenv("SCHEDULED_NOTIFICATIONS_ENABLED", "false")
    refresh_feature_flag_cache()
    calls = []
    monkeypatch.setattr(script, "process", lambda dry_run: calls.append(dry_run))

    assert script.main([]) == 0
    assert calls == []


def test_failure_returns_non_zero(monkeypatch):
    def broken(dry_run):
        raise RuntimeError("db down")

    monkeypatch.setattr(script, "process", broken)
    assert script.main([]) == 1
