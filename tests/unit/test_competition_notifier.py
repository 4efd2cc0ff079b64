from datetime import timedelta
from unittest.mock import MagicMock

import pytest

from chon.db import models
from chon.services.competition_notifier import CompetitionNotifier
from chon.utils.feature_flags import refresh_feature_flag_cache

OK = {"success": True, "data": {}, "status_code": 200}
FAILED = {"success": False, "error": "boom", "status_code": 500}


@pytest.fixture
def notifications_on(monkeypatch):
    monkeypatch.setenv("COMPETITION_NOTIFICATIONS_ENABLED", "true")
    refresh_feature_flag_cache()


@pytest.fixture
def api_client():
    client = MagicMock()
    client.send_notification.return_value = OK
    return client


def _notifications(db_session):
    db_session.expire_all()
    return db_session.query(models.Notification).order_by(models.Notification.id).all()


def test_created_sends_and_schedules_reminder(db_session, competition_factory, api_client, notifications_on):
    competition = competition_factory(name="Friday Cup")
    CompetitionNotifier(db_session, api_client).competition_created(competition)

    payload = api_client.send_notification.call_args.args[0]
    assert payload["title"] == "New Competition Available! 🏆"
    assert payload["message"] == '"Friday Cup" created by Admin - Weekly quiz'
    assert payload["data"]["competitionId"] == competition.id
    assert payload["data"]["entryFee"] == "5.00"
    assert payload["data"]["creator"] == {"id": "admin", "nickname": "Admin"}

    sent, reminder = _notifications(db_session)
    assert sent.status == "sent"
    assert sent.title_kurdish == "پێشبڕکێکی نوێ! 🏆"
    assert reminder.status == "pending"
    assert reminder.title == "Competition Starting Soon! ⏰"
    assert reminder.scheduled_at == competition.start_time - timedelta(minutes=5)


def test_no_reminder_when_start_is_imminent(db_session, competition_factory, api_client, notifications_on):
    now = models.now_utc()
    competition = competition_factory(
        open_time=now + timedelta(minutes=1),
        start_time=now + timedelta(minutes=3),
        end_time=now + timedelta(hours=1),
    )
    CompetitionNotifier(db_session, api_client).competition_created(competition)
    assert [n.status for n in _notifications(db_session)] == ["sent"]


def test_failed_send_is_recorded_as_failed(db_session, competition_factory, api_client, notifications_on):
    api_client.send_notification.return_value = FAILED
    competition = competition_factory()
    CompetitionNotifier(db_session, api_client).competition_created(competition)
    assert _notifications(db_session)[0].status == "failed"
    assert _notifications(db_session)[0].api_response == FAILED


def test_exceptions_never_escape(db_session, competition_factory, api_client, notifications_on):
    api_client.send_notification.side_effect = RuntimeError("network down")
    competition = competition_factory()
    CompetitionNotifier(db_session, api_client).competition_created(competition)
    # the reminder is independent of the failed broadcast
    assert [n.status for n in _notifications(db_session)] == ["pending"]


def test_disabled_flag_skips_everything(db_session, competition_factory, api_client):
    competition = competition_factory()
    CompetitionNotifier(db_session, api_client).competition_created(competition)
    api_client.send_notification.assert_not_called()
    assert _notifications(db_session) == []


def test_open_time_change_announces_registration(db_session, competition_factory, api_client, notifications_on):
    competition = competition_factory(status="open", name="Quiz Night")
    notifier = CompetitionNotifier(db_session, api_client)

    notifier.competition_updated(competition, open_time_changed=False, start_time_changed=True)
    api_client.send_notification.assert_not_called()

    notifier.competition_updated(competition, open_time_changed=True, start_time_changed=False)
    payload = api_client.send_notification.call_args.args[0]
    assert payload["title"] == "Competition Registration Open! 🎯"
    assert payload["message"] == '"Quiz Night" is now open for registration! Join now!'


def test_start_time_change_sends_started_in_batches(
    db_session, competition_factory, player_factory, api_client, notifications_on
):
    for _ in range(3):
        player_factory()
    competition = competition_factory(status="active")
    CompetitionNotifier(db_session, api_client).competition_updated(
        competition, open_time_changed=False, start_time_changed=True
    )
    payload, user_ids = api_client.send_notification.call_args.args
    assert payload["title"] == "Competition Started! 🚀"
    assert "entryFee" not in payload["data"]
    assert len(user_ids) == 3

    (recorded,) = _notifications(db_session)
    assert recorded.status == "sent"
    assert recorded.api_response["total_users"] == 3


def test_batches_count_failures(db_session, player_factory, api_client):
    ids = [player_factory().id for _ in range(3)]
    api_client.send_notification.side_effect = [OK, FAILED]
    summary = CompetitionNotifier(db_session, api_client).send_to_all_players_in_batches({"title": "t"}, batch_size=2)

    assert [call.args[1] for call in api_client.send_notification.call_args_list] == [ids[:2], ids[2:]]
    assert summary["success"] is False
    assert (summary["total_users"], summary["successful"], summary["failed"]) == (3, 2, 1)


def test_batches_without_players_broadcast(db_session, api_client):
    summary = CompetitionNotifier(db_session, api_client).send_to_all_players_in_batches({"title": "t"})
    assert api_client.send_notification.call_args.args == ({"title": "t"},)
    assert summary["success"] is True
    assert summary["total_users"] == 0
    assert summary["successful"] == 1
    assert "note" in summary
