from unittest.mock import MagicMock

from chon.db import models, schemas
from chon.services.notification_service import NotificationService, parse_user_ids

SENT = {"success": True, "data": {"message_id": "m-1", "topic": "all_users"}, "status_code": 200}


def _fcm(result=SENT):
    fcm = MagicMock()
    fcm.send_notification.return_value = result
    return fcm


def _inbox_owners(db_session, notification_id):
    db_session.expire_all()
    rows = (
        db_session.query(models.PlayerNotification)
        .filter(models.PlayerNotification.notification_id == notification_id)
        .order_by(models.PlayerNotification.player_id)
        .all()
    )
    return [row.player_id for row in rows]


def test_parse_user_ids_drops_non_numeric():
    assert parse_user_ids("1, 2,abc,,3 ") == [1, 2, 3]
    assert parse_user_ids(None) == []
    assert parse_user_ids("") == []


def test_broadcast_sends_to_topic_and_fans_out(db_session, player_factory):
    players = [player_factory() for _ in range(2)]
    fcm = _fcm()
    payload = schemas.NotificationCreate(title="Hello", message="World", data={"promo": True})

    notification = NotificationService(db_session, fcm).create_notification(payload)

    sent_payload = fcm.send_notification.call_args.args[0]
    assert sent_payload["data"] == {"promo": "true"}
    assert len(fcm.send_notification.call_args.args) == 1
    assert notification.status == "sent"
    assert notification.sent_at is not None
    assert notification.api_response == SENT
    assert _inbox_owners(db_session, notification.id) == [p.id for p in players]


def test_targeted_send_uses_player_tokens(db_session, player_factory):
    target = player_factory(fcm_token="device-1")
    player_factory(fcm_token="device-2")
    fcm = _fcm()
    payload = schemas.NotificationCreate(title="Hi", message="Only you", user_ids=f"{target.id}")

    notification = NotificationService(db_session, fcm).create_notification(payload)

    assert fcm.send_notification.call_args.args[1] == ["device-1"]
    assert _inbox_owners(db_session, notification.id) == [target.id]


def test_targeted_send_without_tokens_fails(db_session, player_factory):
    target = player_factory()
    fcm = _fcm()
    payload = schemas.NotificationCreate(title="Hi", message="m", user_ids=str(target.id))

    notification = NotificationService(db_session, fcm).create_notification(payload)

    fcm.send_notification.assert_not_called()
    assert notification.status == "failed"
    assert notification.sent_at is None
    assert notification.api_response["status_code"] == 404
    assert _inbox_owners(db_session, notification.id) == []


def test_push_exception_marks_failed(db_session):
    fcm = MagicMock()
    fcm.send_notification.side_effect = RuntimeError("fcm exploded")
    notification = NotificationService(db_session, fcm).create_notification(
        schemas.NotificationCreate(title="t", message="m")
    )
    assert notification.status == "failed"
    assert notification.api_response == {"success": False, "error": "fcm exploded"}


def test_deferred_notification_stays_pending(db_session, player_factory):
    player_factory()
    fcm = _fcm()
    notification = NotificationService(db_session, fcm).create_notification(
        schemas.NotificationCreate(title="Later", message="m", send_immediately=False)
    )
    fcm.send_notification.assert_not_called()
    assert notification.status == "pending"
    assert _inbox_owners(db_session, notification.id) == []
