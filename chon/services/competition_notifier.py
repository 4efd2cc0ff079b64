"""
Lifecycle notifications for competitions.

Called by ``CompetitionService`` after a competition has been committed:

* created: broadcast "new competition" and schedule a reminder five minutes
  before the start
* open_time changed while the competition is open: "registration open"
* start_time changed while the competition is active: "started", sent to
  every player in id-ordered batches

Every send is recorded as a ``Notification`` row. Failures are logged and
never propagate into the save that triggered them.
"""
import logging
from datetime import timedelta
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from chon.db import models
from chon.db.models.notifications import STATUS_FAILED, STATUS_PENDING, STATUS_SENT
from chon.db.repositories import notifications as notification_repo
from chon.db.repositories import players as player_repo
from chon.services.express_api_client import ExpressApiClient, get_express_api_client
from chon.utils.feature_flags import competition_notifications_enabled

logger = logging.getLogger(__name__)

PLAYER_BATCH_SIZE = 1000
REMINDER_LEAD = timedelta(minutes=5)
ADMIN_CREATOR = {"id": "admin", "nickname": "Admin"}


def _iso(value) -> Optional[str]:
    return value.isoformat() if value is not None else None


def _competition_data(competition: models.Competition, *, include_fee: bool = True) -> Dict[str, Any]:
    data: Dict[str, Any] = {
        "competitionId": competition.id,
        "competitionName": competition.name,
    }
    if include_fee:
        data["entryFee"] = str(competition.entry_fee) if competition.entry_fee is not None else "0"
    data["startTime"] = _iso(competition.start_time)
    data["gameType"] = competition.game_type
    data["creator"] = dict(ADMIN_CREATOR)
    return data


class CompetitionNotifier:
    def __init__(self, db: Session, api_client: Optional[ExpressApiClient] = None):
        self.db = db
        self.api_client = api_client or get_express_api_client()

    # === entry points ===

    def competition_created(self, competition: models.Competition) -> None:
        if not competition_notifications_enabled():
            return
        self._guarded("created", competition, self._send_new_competition)
        self._guarded("reminder", competition, self._schedule_reminder)

    def competition_updated(
        self,
        competition: models.Competition,
        *,
        open_time_changed: bool,
        start_time_changed: bool,
    ) -> None:
        if not competition_notifications_enabled():
            return
        if open_time_changed and competition.is_open():
            self._guarded("open", competition, self._send_registration_open)
        if start_time_changed and competition.is_active():
            self._guarded("started", competition, self._send_started)

    def _guarded(self, event: str, competition: models.Competition, handler) -> None:
        try:
            handler(competition)
        except Exception as exc:
            self.db.rollback()
            logger.error(
                "competition_notification_failed: event=%s competition_id=%s error=%s",
                event,
                competition.id,
                exc,
            )

    # === individual notifications ===

    def _record(self, notification_data: Dict[str, Any], result: Dict[str, Any], success: bool) -> models.Notification:
        return notification_repo.create_notification(
            self.db,
            fields={
                "title": notification_data["title"],
                "title_kurdish": notification_data.get("title_kurdish"),
                "message": notification_data["message"],
                "message_kurdish": notification_data.get("message_kurdish"),
                "type": notification_data["type"],
                "priority": notification_data["priority"],
                "data": notification_data["data"],
                "status": STATUS_SENT if success else STATUS_FAILED,
                "api_response": result,
                "sent_at": models.now_utc(),
            },
        )

    def _send_new_competition(self, competition: models.Competition) -> None:
        description = competition.description or ""
        notification_data = {
            "title": "New Competition Available! 🏆",
            "title_kurdish": "پێشبڕکێکی نوێ! 🏆",
            "message": f'"{competition.name}" created by Admin - {description}',
            "message_kurdish": f'"{competition.name}" لەلایەن ئەدمین دروست کرا - {description}',
            "type": "competition",
            "priority": "high",
            "data": _competition_data(competition),
        }
        result = self.api_client.send_notification(notification_data)
        self._record(notification_data, result, bool(result.get("success")))

    def _schedule_reminder(self, competition: models.Competition) -> Optional[models.Notification]:
        reminder_at = competition.start_time - REMINDER_LEAD
        if reminder_at <= models.now_utc():
            return None
        return notification_repo.create_notification(
            self.db,
            fields={
                "title": "Competition Starting Soon! ⏰",
                "message": f'"{competition.name}" starts in 5 minutes! Join now!',
                "type": "competition",
                "priority": "high",
                "data": {
                    "competitionId": competition.id,
                    "competitionName": competition.name,
                    "startTime": _iso(competition.start_time),
                    "creator": dict(ADMIN_CREATOR),
                },
                "scheduled_at": reminder_at,
                "status": STATUS_PENDING,
            },
        )

    def _send_registration_open(self, competition: models.Competition) -> None:
        notification_data = {
            "title": "Competition Registration Open! 🎯",
            "title_kurdish": "خۆت تۆمار بکە بۆ پێشبڕکێ! 🎯",
            "message": f'"{competition.name}" is now open for registration! Join now!',
            "message_kurdish": f'خۆت تۆمار بکە بۆ "{competition.name}"! ئێستا دەستپێکرد!',
            "type": "competition",
            "priority": "high",
            "data": _competition_data(competition),
        }
        result = self.api_client.send_notification(notification_data)
        self._record(notification_data, result, bool(result.get("success")))

    def _send_started(self, competition: models.Competition) -> None:
        notification_data = {
            "title": "Competition Started! 🚀",
            "title_kurdish": "پێشبڕکێ دەستپێکرد! 🚀",
            "message": f'"{competition.name}" has started! Good luck to all participants!',
            "message_kurdish": f'"{competition.name}" دەستپێکرد! سەردەمی باش بۆ هەموو بەشداربووان!',
            "type": "competition",
            "priority": "normal",
            "data": _competition_data(competition, include_fee=False),
        }
        summary = self.send_to_all_players_in_batches(notification_data)
        self._record(notification_data, summary, summary["failed"] == 0)

    def send_to_all_players_in_batches(
        self,
        notification_data: Dict[str, Any],
        batch_size: int = PLAYER_BATCH_SIZE,
    ) -> Dict[str, Any]:
        """Send to every player id in ascending batches; broadcast when there are no players."""
        total = 0
        successful = 0
        failed = 0
        responses: List[Dict[str, Any]] = []

        for batch in player_repo.iter_player_id_batches(self.db, batch_size=batch_size):
            total += len(batch)
            result = self.api_client.send_notification(notification_data, batch)
            responses.append(result)
            if result.get("success") is True:
                successful += len(batch)
            else:
                failed += len(batch)

        if total == 0:
            result = self.api_client.send_notification(notification_data)
            responses.append(result)
            ok = bool(result.get("success"))
            return {
                "success": ok,
                "total_users": 0,
                "successful": 1 if ok else 0,
                "failed": 0 if ok else 1,
                "batch_responses": responses,
                "note": "No players found; broadcasted via send_immediately",
            }

        logger.info(
            "competition_started_batches_sent: total=%d successful=%d failed=%d batches=%d",
            total,
            successful,
            failed,
            len(responses),
        )
        return {
            "success": failed == 0,
            "total_users": total,
            "successful": successful,
            "failed": failed,
            "batch_responses": responses,
        }
