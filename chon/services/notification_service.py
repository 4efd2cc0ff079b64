"""
Notification service: admin-created notifications and their push delivery.

Immediate notifications are pushed through FCM (to the targeted players'
device tokens, or to the broadcast topic), stored with the delivery result,
and then fanned out into per-player inbox rows by a background job. Deferred
notifications are stored as pending and picked up by the scheduled processor.
"""
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from chon.db import models, schemas
from chon.db.models.notifications import STATUS_FAILED, STATUS_PENDING, STATUS_SENT
from chon.db.repositories import notifications as notification_repo
from chon.db.repositories import players as player_repo
from chon.services.fcm_service import FcmNotificationService, clean_data_for_fcm, get_fcm_service
from chon.workers import jobs
from chon.workers.notification_jobs import create_player_notification_records

logger = logging.getLogger(__name__)


def parse_user_ids(raw: Optional[str]) -> List[int]:
    """Turn ``"1, 2,abc,3"`` into ``[1, 2, 3]``; non-numeric entries are dropped."""
    if not raw:
        return []
    ids = []
    for part in str(raw).split(","):
        part = part.strip()
        if part.isdigit():
            ids.append(int(part))
    return ids


class NotificationService:
    """Create admin notifications and deliver them."""

    def __init__(self, db: Session, fcm_service: Optional[FcmNotificationService] = None):
        self.db = db
        self.fcm_service = fcm_service or get_fcm_service()

    def _push(self, payload: schemas.NotificationCreate, user_ids: List[int]) -> Dict[str, Any]:
        notification_data = {
            "title": payload.title,
            "title_kurdish": payload.title_kurdish,
            "message": payload.message,
            "message_kurdish": payload.message_kurdish,
            "type": payload.type,
            "priority": payload.priority,
            "data": clean_data_for_fcm(payload.data or {}),
        }
        if not user_ids:
            logger.info("notification_broadcast_requested: title=%s", payload.title)
            return self.fcm_service.send_notification(notification_data)

        tokens = player_repo.fcm_tokens_for(self.db, player_ids=user_ids)
        logger.info("notification_targeted_requested: players=%d tokens=%d", len(user_ids), len(tokens))
        if not tokens:
            return {"success": False, "error": "No FCM tokens found for the selected players", "status_code": 404}
        return self.fcm_service.send_notification(notification_data, tokens)

    def create_notification(self, payload: schemas.NotificationCreate) -> models.Notification:
        fields = payload.model_dump(exclude={"send_immediately", "user_ids"})
        user_ids = parse_user_ids(payload.user_ids)

        if payload.send_immediately:
            try:
                result = self._push(payload, user_ids)
            except Exception as exc:
                logger.error("notification_push_exception: error=%s", exc)
                result = {"success": False, "error": str(exc)}
            fields["status"] = STATUS_SENT if result.get("success") else STATUS_FAILED
            fields["api_response"] = result
            fields["sent_at"] = models.now_utc() if result.get("success") else None
            if not result.get("success"):
                logger.error("notification_push_failed: error=%s", result.get("error"))
        else:
            fields["status"] = STATUS_PENDING

        notification = notification_repo.create_notification(self.db, fields=fields)
        logger.info("notification_created: id=%s status=%s", notification.id, notification.status)

        if notification.status == STATUS_SENT:
            jobs.dispatch(create_player_notification_records, notification.id, user_ids or None)
        return notification
