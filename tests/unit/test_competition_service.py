from datetime import datetime, timedelta, UTC
from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from chon.db import models, schemas
from chon.services.competition_service import CompetitionLockedError, CompetitionService, to_utc


@pytest.fixture
def notifier():
    return MagicMock()


def _create_payload(**overrides):
    now = datetime.now(UTC)
    fields = {
        "name": "Spring Cup",
        "entry_fee": Decimal("2.50"),
        "open_time": now + timedelta(hours=1),
        "start_time": now + timedelta(hours=2),
        "end_time": now + timedelta(hours=3),
    }
    fields.update(overrides)
    return schemas.CompetitionCreate(**fields)


def test_naive_times_use_competition_timezone(monkeypatch):
    monkeypatch.setenv("COMPETITION_TIMEZONE", "Asia/Baghdad")
    assert to_utc(datetime(2025, 5, 1, 12, 0)) == datetime(2025, 5, 1, 9, 0, tzinfo=UTC)
    aware = datetime(2025, 5, 1, 12, 0, tzinfo=UTC)
    assert to_utc(aware) == aware
    assert to_utc(None) is None


def test_create_attaches_questions_and_notifies(db_session, notifier):
    question = models.Question(question_text="Q?", options=["a", "b"], correct_answer="a")
    db_session.add(question)
    db_session.commit()

    competition = CompetitionService(db_session, notifier).create_competition(
        _create_payload(question_ids=[question.id])
    )

    assert competition.id is not None
    assert [q.id for q in competition.questions] == [question.id]
    notifier.competition_created.assert_called_once_with(competition)


def test_create_rejects_bad_schedule(db_session, notifier):
    now = datetime.now(UTC)
    payload = _create_payload(start_time=now, open_time=now + timedelta(hours=1))
    with pytest.raises(models.CompetitionScheduleError):
        CompetitionService(db_session, notifier).create_competition(payload)
    notifier.competition_created.assert_not_called()


def test_update_reports_changed_schedule_fields(db_session, competition_factory, notifier):
    competition = competition_factory()
    new_open = competition.open_time + timedelta(minutes=30)

    CompetitionService(db_session, notifier).update_competition(
        competition,
        schemas.CompetitionUpdate(open_time=new_open, start_time=competition.start_time, name="Renamed"),
    )

    assert competition.name == "Renamed"
    notifier.competition_updated.assert_called_once_with(
        competition, open_time_changed=True, start_time_changed=False
    )


def test_update_rolls_back_invalid_schedule(db_session, competition_factory, notifier):
    competition = competition_factory(name="Keep")
    with pytest.raises(models.CompetitionScheduleError):
        CompetitionService(db_session, notifier).update_competition(
            competition,
            schemas.CompetitionUpdate(name="Lost", end_time=competition.open_time),
        )
    db_session.expire_all()
    assert db_session.get(models.Competition, competition.id).name == "Keep"


def test_started_competitions_are_locked(db_session, competition_factory, notifier):
    service = CompetitionService(db_session, notifier)
    competition = competition_factory(status="open")
    with pytest.raises(CompetitionLockedError):
        service.update_competition(competition, schemas.CompetitionUpdate(name="x"))
    with pytest.raises(CompetitionLockedError):
        service.delete_competition(competition)


def test_statistics(db_session, competition_factory, notifier):
    competition_factory(status="upcoming", entry_fee=Decimal("10"), game_type="trivia")
    competition_factory(status="open", entry_fee=Decimal("4"), game_type="trivia")
    competition_factory(status="active", entry_fee=Decimal("2"), game_type="speed")
    competition_factory(status="completed", entry_fee=Decimal("100"), game_type="speed")

    stats = CompetitionService(db_session, notifier).statistics()

    assert stats["upcoming_competitions"] == 1
    assert stats["open_competitions"] == 1
    assert stats["active_competitions"] == 1
    assert stats["completed_competitions"] == 1
    assert stats["average_entry_fee"] == "2.00"
    assert stats["most_popular_game_type"] in ("Trivia", "Speed")


def test_statistics_without_competitions(db_session, notifier):
    stats = CompetitionService(db_session, notifier).statistics()
    assert stats["most_popular_game_type"] == "None"
    assert stats["open_competitions"] == 0
