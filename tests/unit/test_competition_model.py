from datetime import datetime, timedelta, UTC
from decimal import Decimal

import pytest

from chon.db import models
from chon.db.models.competitions import (
    STATUS_ACTIVE,
    STATUS_COMPLETED,
    STATUS_OPEN,
    STATUS_UPCOMING,
)

OPEN = datetime(2025, 3, 1, 10, 0, tzinfo=UTC)
START = OPEN + timedelta(hours=2)
END = START + timedelta(hours=1)


@pytest.mark.parametrize(
    "now,expected",
    [
        (OPEN - timedelta(seconds=1), STATUS_UPCOMING),
        (OPEN, STATUS_OPEN),
        (START - timedelta(seconds=1), STATUS_OPEN),
        (START, STATUS_ACTIVE),
        (END - timedelta(seconds=1), STATUS_ACTIVE),
        (END, STATUS_COMPLETED),
    ],
)
def test_status_boundaries(now, expected):
    assert models.competition_status(OPEN, START, END, now) == expected


def _competition(**overrides):
    fields = dict(name="Cup", open_time=OPEN, start_time=START, end_time=END, entry_fee=Decimal("5"))
    fields.update(overrides)
    return models.Competition(**fields)


def test_only_upcoming_competitions_are_editable():
    competition = _competition()
    before = OPEN - timedelta(minutes=1)
    assert competition.can_delete(before)
    assert competition.can_edit_field("name", before)
    assert not competition.can_delete(OPEN)
    assert not competition.can_edit_field("name", START)
    assert competition.is_completed(END + timedelta(days=1))


def test_validate_schedule_rejects_start_before_open():
    competition = _competition(start_time=OPEN)
    with pytest.raises(models.CompetitionScheduleError, match="Start time must be after registration open time"):
        competition.validate_schedule()


def test_validate_schedule_rejects_end_before_start():
    competition = _competition(end_time=START - timedelta(minutes=1))
    with pytest.raises(models.CompetitionScheduleError, match="End time must be after start time"):
        competition.validate_schedule()


def test_validate_schedule_clamps_negative_fee():
    competition = _competition(entry_fee=Decimal("-3"))
    competition.validate_schedule()
    assert competition.entry_fee == Decimal("0")


def test_invalid_schedule_is_rejected_on_insert(db_session):
    db_session.add(_competition(end_time=START))
    with pytest.raises(models.CompetitionScheduleError):
        db_session.commit()
    db_session.rollback()
    assert db_session.query(models.Competition).count() == 0


def test_prize_tier_descriptions():
    cash = models.PrizeTier(rank_from=1, rank_to=1, prize_type="cash", prize_value=Decimal("500.00"))
    points = models.PrizeTier(rank_from=2, rank_to=5, prize_type="points", prize_value=Decimal("12.50"))
    item = models.PrizeTier(
        rank_from=6,
        rank_to=10,
        prize_type="item",
        item_details={"type": "smartphone", "quantity": 2},
    )
    assert cash.rank_range_description() == "Rank 1"
    assert cash.prize_description() == "IQD 500"
    assert points.rank_range_description() == "Ranks 2 - 5"
    assert points.prize_description() == "12.50 points"
    assert item.prize_description() == "2x Smartphone"
    assert points.covers_rank(5) and not points.covers_rank(6)


def test_registration_status_transitions():
    registration = models.CompetitionRegistration(registration_status="pending_payment")
    assert registration.is_pending_payment()
    assert registration.status_label == "Pending Payment"
    registration.mark_registered()
    assert registration.is_registered()
    assert registration.registered_at is not None
    registration.cancel("player request")
    assert registration.is_cancelled()
    assert registration.notes == "player request"


def test_registration_payment_failure_and_expiry():
    registration = models.CompetitionRegistration(
        registration_status="pending_payment",
        expires_at=OPEN + timedelta(minutes=15),
    )
    assert not registration.is_expired(OPEN)
    assert registration.is_expired(OPEN + timedelta(minutes=16))

    registration.mark_payment_failed("card declined")
    assert registration.has_payment_failed()
    assert registration.notes == "card declined"

    registration.mark_expired()
    assert registration.is_expired(OPEN)


def test_question_locked_while_competition_open_or_active():
    question = models.Question(question_text="2 + 2?", correct_answer="4", options=["3", "4"])
    question.competitions.append(_competition())
    assert question.can_edit(OPEN - timedelta(minutes=1))
    assert not question.can_edit(OPEN)
    assert not question.can_edit(START)
    assert question.can_edit(END)
