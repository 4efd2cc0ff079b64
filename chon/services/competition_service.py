"""
Admin-side competition management.

Schedule timestamps without an offset are interpreted in the competition
timezone (``COMPETITION_TIMEZONE``) and stored as UTC. Once registration
opens a competition can no longer be edited or deleted.
"""
import logging
from datetime import UTC, datetime
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from chon.db import models, schemas
from chon.db.repositories import competitions as competition_repo
from chon.services.competition_notifier import CompetitionNotifier
from chon.utils.runtime import competition_timezone

logger = logging.getLogger(__name__)

SCHEDULE_FIELDS = ("open_time", "start_time", "end_time")


class CompetitionLockedError(ValueError):
    """Raised when a competition that is no longer upcoming is edited or deleted."""


def to_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=competition_timezone())
    return value.astimezone(UTC)


class CompetitionService:
    def __init__(self, db: Session, notifier: Optional[CompetitionNotifier] = None):
        self.db = db
        self.notifier = notifier or CompetitionNotifier(db)

    def create_competition(self, payload: schemas.CompetitionCreate) -> models.Competition:
        fields = payload.model_dump(exclude={"question_ids"})
        for name in SCHEDULE_FIELDS:
            fields[name] = to_utc(fields[name])
        competition = models.Competition(**fields)
        competition.validate_schedule()
        competition.questions = competition_repo.get_questions(self.db, question_ids=payload.question_ids)

        self.db.add(competition)
        self.db.commit()
        self.db.refresh(competition)
        logger.info("competition_created: id=%s name=%s", competition.id, competition.name)

        self.notifier.competition_created(competition)
        return competition

    def update_competition(
        self,
        competition: models.Competition,
        payload: schemas.CompetitionUpdate,
    ) -> models.Competition:
        if not competition.is_upcoming():
            raise CompetitionLockedError("Competition can only be edited before registration opens")

        changes = payload.model_dump(exclude_unset=True, exclude={"question_ids"})
        for name in SCHEDULE_FIELDS:
            if name in changes:
                changes[name] = to_utc(changes[name])

        open_time_changed = "open_time" in changes and changes["open_time"] != competition.open_time
        start_time_changed = "start_time" in changes and changes["start_time"] != competition.start_time

        for field, value in changes.items():
            setattr(competition, field, value)
        if payload.question_ids is not None:
            competition.questions = competition_repo.get_questions(self.db, question_ids=payload.question_ids)

        try:
            competition.validate_schedule()
        except ValueError:
            self.db.rollback()
            raise

        self.db.commit()
        self.db.refresh(competition)
        logger.info("competition_updated: id=%s fields=%s", competition.id, sorted(changes))

        self.notifier.competition_updated(
            competition,
            open_time_changed=open_time_changed,
            start_time_changed=start_time_changed,
        )
        return competition

    def delete_competition(self, competition: models.Competition) -> None:
        if not competition.can_delete():
            raise CompetitionLockedError("Only upcoming competitions can be deleted")
        self.db.delete(competition)
        self.db.commit()
        logger.info("competition_deleted: id=%s", competition.id)

    def statistics(self, now: Optional[datetime] = None) -> Dict[str, Any]:
        counts = competition_repo.status_counts(self.db, now=now)
        return {
            "open_competitions": counts["open"],
            "active_competitions": counts["active"],
            "upcoming_competitions": counts["upcoming"],
            "completed_competitions": counts["completed"],
            "average_entry_fee": str(competition_repo.average_active_entry_fee(self.db, now=now)),
            "most_popular_game_type": competition_repo.most_popular_game_type(self.db),
        }
