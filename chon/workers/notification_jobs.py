"""
Background jobs for notification fan-out.

Each job opens its own session because it may run on a worker thread after
the originating request has finished. Failures are logged and re-raised so
``chon.workers.jobs.run_with_retries`` can retry them.
"""
import logging
from typing import Iterable, Optional

from chon.db import database, models
from chon.db.repositories import notifications as notification_repo
from chon.db.repositories import players as player_repo
from chon.services.express_api_client import get_express_api_client

logger = logging.getLogger(__name__)

RECORD_CHUNK_SIZE = 500


def create_player_notification_records(
    notification_id: int,
    target_user_ids: Optional[Iterable[int]] = None,
    chunk_size: int = RECORD_CHUNK_SIZE,
) -> int:
    """Give every targeted player (or every player) an inbox row for the notification.

    Players that already have a row for this notification are skipped.
    Returns the number of rows inserted.
    """
    only_ids = [int(player_id) for player_id in target_user_ids] if target_user_ids else None
    db = database.SessionLocal()
    try:
        notification = notification_repo.get_notification(db, notification_id=notification_id)
        if notification is None:
            logger.warning("player_notification_records_missing_notification: notification_id=%s", notification_id)
            return 0

        inserted = 0
        for batch in player_repo.iter_player_id_batches(db, batch_size=chunk_size, only_ids=only_ids):
            existing = notification_repo.existing_recipients(db, notification_id=notification_id, player_ids=batch)
            now = models.now_utc()
            rows = [
                {
                    "player_id": player_id,
                    "notification_id": notification_id,
                    "received_at": now,
                    "delivery_data": {"sent_via": "fcm", "sent_at": now.isoformat(), "queued": True},
                    "created_at": now,
                    "updated_at": now,
                }
                for player_id in batch
                if player_id not in existing
            ]
            inserted += notification_repo.bulk_insert_player_notifications(db, rows=rows)

        logger.info(
            "player_notification_records_created: notification_id=%s inserted=%d targeted=%s",
            notification_id,
            inserted,
            len(only_ids) if only_ids else "all",
        )
        return inserted
    except Exception as exc:
        db.rollback()
        logger.error("player_notification_records_failed: notification_id=%s error=%s", notification_id, exc)
        raise
    finally:
        db.close()


def send_scheduled_notification(notification_id: int) -> bool:
    """Broadcast a pending notification through the Express API and record the outcome."""
    db = database.SessionLocal()
    try:
        notification = notification_repo.get_notification(db, notification_id=notification_id)
        if notification is None:
            logger.warning("scheduled_notification_missing: notification_id=%s", notification_id)
            return False

        try:
            result = get_express_api_client().send_notification(
                {
                    "title": notification.title,
                    "message": notification.message,
                    "type": notification.type,
                    "priority": notification.priority,
                    "data": notification.data or {},
                }
            )
        except Exception as exc:
            notification.mark_failed({"error": str(exc)})
            db.commit()
            logger.error("scheduled_notification_exception: notification_id=%s error=%s", notification_id, exc)
            raise

        if result.get("success"):
            notification.mark_sent(result)
        else:
            notification.mark_failed(result)
        db.commit()

        if not result.get("success"):
            logger.error(
                "scheduled_notification_failed: notification_id=%s error=%s",
                notification_id,
                result.get("error"),
            )
            return False
        logger.info("scheduled_notification_sent: notification_id=%s", notification_id)
        return True
    finally:
        db.close()
