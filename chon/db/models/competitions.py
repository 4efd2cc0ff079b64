"""
Competitions, their question sets, registrations, prize tiers and leaderboards.

Competition status is never stored; it is derived from the three schedule
timestamps each time it is needed.
"""
from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import (
    Column, Integer, String, Text, Numeric, Boolean, ForeignKey, Index, Table, UniqueConstraint, event,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import relationship

from .base import Base, now_utc
from .translations import TranslatableMixin
from chon.db.types import UTCDateTime


STATUS_UPCOMING = "upcoming"
STATUS_OPEN = "open"
STATUS_ACTIVE = "active"
STATUS_COMPLETED = "completed"


class CompetitionScheduleError(ValueError):
    """Raised when a competition's timestamps are out of order."""


def competition_status(open_time: datetime, start_time: datetime, end_time: datetime, now: Optional[datetime] = None) -> str:
    current = now or now_utc()
    if current < open_time:
        return STATUS_UPCOMING
    if current < start_time:
        return STATUS_OPEN
    if current < end_time:
        return STATUS_ACTIVE
    return STATUS_COMPLETED


competitions_questions = Table(
    'competitions_questions',
    Base.metadata,
    Column('competition_id', Integer, ForeignKey('competitions.id', ondelete='CASCADE'), primary_key=True),
    Column('question_id', Integer, ForeignKey('questions.id', ondelete='CASCADE'), primary_key=True),
    Column('created_at', UTCDateTime, default=now_utc),
)


class Competition(TranslatableMixin, Base):
    __tablename__ = 'competitions'
    __translatable_fields__ = ("name", "description")
    __translation_markers__ = ("name", "description")

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    name_kurdish = Column(String(255), nullable=True)
    name_arabic = Column(String(255), nullable=True)
    name_kurmanji = Column(String(255), nullable=True)
    description = Column(Text, nullable=True)
    description_kurdish = Column(Text, nullable=True)
    description_arabic = Column(Text, nullable=True)
    description_kurmanji = Column(Text, nullable=True)
    entry_fee = Column(Numeric(10, 2), nullable=False, default=0)
    open_time = Column(UTCDateTime, nullable=False)
    start_time = Column(UTCDateTime, nullable=False)
    end_time = Column(UTCDateTime, nullable=False)
    max_users = Column(Integer, nullable=False, default=100)
    game_type = Column(String(50), nullable=True)
    created_at = Column(UTCDateTime, default=now_utc, nullable=False)
    updated_at = Column(UTCDateTime, default=now_utc, onupdate=now_utc, nullable=False)

    questions = relationship("Question", secondary=competitions_questions, back_populates="competitions")
    registrations = relationship("CompetitionRegistration", back_populates="competition", cascade="all, delete-orphan")
    prize_tiers = relationship(
        "PrizeTier",
        back_populates="competition",
        cascade="all, delete-orphan",
        order_by="PrizeTier.rank_from",
    )
    leaderboard = relationship("CompetitionLeaderboard", back_populates="competition", cascade="all, delete-orphan")
    player_answers = relationship("CompetitionPlayerAnswer", back_populates="competition", cascade="all, delete-orphan")

    __table_args__ = (
        Index('idx_competitions_schedule', 'open_time', 'start_time', 'end_time'),
        Index('idx_competitions_game_type', 'game_type'),
    )

    def get_status(self, now: Optional[datetime] = None) -> str:
        return competition_status(self.open_time, self.start_time, self.end_time, now)

    def is_upcoming(self, now: Optional[datetime] = None) -> bool:
        return self.get_status(now) == STATUS_UPCOMING

    def is_open(self, now: Optional[datetime] = None) -> bool:
        return self.get_status(now) == STATUS_OPEN

    def is_active(self, now: Optional[datetime] = None) -> bool:
        return self.get_status(now) == STATUS_ACTIVE

    def is_completed(self, now: Optional[datetime] = None) -> bool:
        return self.get_status(now) == STATUS_COMPLETED

    def can_delete(self, now: Optional[datetime] = None) -> bool:
        return self.is_upcoming(now)

    def can_edit_field(self, field: str, now: Optional[datetime] = None) -> bool:
        # Once registration opens every field is frozen
        return self.is_upcoming(now)

    def validate_schedule(self) -> None:
        """Enforce open < start < end and clamp a negative entry fee to zero."""
        if self.open_time is None or self.start_time is None or self.end_time is None:
            raise CompetitionScheduleError("open_time, start_time and end_time are required")
        if self.start_time <= self.open_time:
            raise CompetitionScheduleError("Start time must be after registration open time")
        if self.end_time <= self.start_time:
            raise CompetitionScheduleError("End time must be after start time")
        if self.entry_fee is not None and Decimal(str(self.entry_fee)) < 0:
            self.entry_fee = Decimal("0")


@event.listens_for(Competition, "before_insert")
@event.listens_for(Competition, "before_update")
def _validate_competition_before_save(mapper, connection, target):
    target.validate_schedule()


REGISTRATION_PENDING_PAYMENT = "pending_payment"
REGISTRATION_PAYMENT_PROCESSING = "payment_processing"
REGISTRATION_REGISTERED = "registered"
REGISTRATION_PAYMENT_FAILED = "payment_failed"
REGISTRATION_CANCELLED = "cancelled"
REGISTRATION_REFUNDED = "refunded"
REGISTRATION_EXPIRED = "expired"

REGISTRATION_STATUS_LABELS = {
    REGISTRATION_PENDING_PAYMENT: "Pending Payment",
    REGISTRATION_PAYMENT_PROCESSING: "Payment Processing",
    REGISTRATION_REGISTERED: "Registered",
    REGISTRATION_PAYMENT_FAILED: "Payment Failed",
    REGISTRATION_CANCELLED: "Cancelled",
    REGISTRATION_REFUNDED: "Refunded",
    REGISTRATION_EXPIRED: "Expired",
}

REGISTRATION_SOURCES = ("mobile_app", "web", "admin")


class CompetitionRegistration(Base):
    __tablename__ = 'competition_registrations'

    id = Column(Integer, primary_key=True, autoincrement=True)
    competition_id = Column(Integer, ForeignKey('competitions.id', ondelete='CASCADE'), nullable=False)
    player_id = Column(Integer, ForeignKey('players.id', ondelete='CASCADE'), nullable=False)
    transaction_id = Column(Integer, ForeignKey('transactions.id', ondelete='SET NULL'), nullable=True)
    registration_status = Column(String(30), nullable=False, default=REGISTRATION_PENDING_PAYMENT)
    entry_fee_paid = Column(Numeric(10, 2), nullable=False, default=0)
    is_free_entry = Column(Boolean, nullable=False, default=False)
    registered_at = Column(UTCDateTime, nullable=True)
    expires_at = Column(UTCDateTime, nullable=True)
    registration_source = Column(String(20), nullable=False, default='mobile_app')
    notes = Column(Text, nullable=True)
    created_at = Column(UTCDateTime, default=now_utc, nullable=False)
    updated_at = Column(UTCDateTime, default=now_utc, onupdate=now_utc, nullable=False)

    competition = relationship("Competition", back_populates="registrations")
    player = relationship("Player")
    transaction = relationship("Transaction")

    __table_args__ = (
        UniqueConstraint('competition_id', 'player_id', name='uq_competition_registrations_player'),
        Index('idx_competition_registrations_status', 'competition_id', 'registration_status'),
    )

    def is_registered(self) -> bool:
        return self.registration_status == REGISTRATION_REGISTERED

    def is_pending_payment(self) -> bool:
        return self.registration_status == REGISTRATION_PENDING_PAYMENT

    def has_payment_failed(self) -> bool:
        return self.registration_status == REGISTRATION_PAYMENT_FAILED

    def is_cancelled(self) -> bool:
        return self.registration_status == REGISTRATION_CANCELLED

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        if self.registration_status == REGISTRATION_EXPIRED:
            return True
        return self.expires_at is not None and self.expires_at < (now or now_utc())

    def mark_registered(self) -> None:
        self.registration_status = REGISTRATION_REGISTERED
        self.registered_at = now_utc()
        self.expires_at = None

    def mark_payment_failed(self, reason: Optional[str] = None) -> None:
        self.registration_status = REGISTRATION_PAYMENT_FAILED
        self.notes = reason

    def mark_expired(self) -> None:
        self.registration_status = REGISTRATION_EXPIRED

    def cancel(self, reason: Optional[str] = None) -> None:
        self.registration_status = REGISTRATION_CANCELLED
        self.notes = reason

    @property
    def status_label(self) -> str:
        return REGISTRATION_STATUS_LABELS.get(self.registration_status, self.registration_status.replace("_", " ").title())


PRIZE_TYPES = {
    "cash": "Cash",
    "item": "Item",
    "points": "Points",
}

ITEM_TYPES = {
    "smartphone": "Smartphone",
    "laptop": "Laptop",
    "tablet": "Tablet",
    "car": "Car",
    "watch": "Watch",
    "gift_card": "Gift Card",
    "gaming_console": "Gaming Console",
    "other": "Other",
}


def _format_amount(value) -> str:
    # 500.00 -> "500", 12.50 -> "12.50"
    amount = Decimal(str(value if value is not None else 0))
    if amount == amount.to_integral_value():
        return str(amount.quantize(Decimal(1)))
    return f"{amount:.2f}"


class PrizeTier(Base):
    __tablename__ = 'prize_tiers'

    id = Column(Integer, primary_key=True, autoincrement=True)
    competition_id = Column(Integer, ForeignKey('competitions.id', ondelete='CASCADE'), nullable=False)
    rank_from = Column(Integer, nullable=False)
    rank_to = Column(Integer, nullable=False)
    prize_type = Column(String(20), nullable=False, default='cash')
    prize_value = Column(Numeric(12, 2), nullable=True)
    item_details = Column(JSONB, nullable=True)
    created_at = Column(UTCDateTime, default=now_utc, nullable=False)

    competition = relationship("Competition", back_populates="prize_tiers")

    def covers_rank(self, rank: int) -> bool:
        return self.rank_from <= rank <= self.rank_to

    def rank_range_description(self) -> str:
        if self.rank_from == self.rank_to:
            return f"Rank {self.rank_from}"
        return f"Ranks {self.rank_from} - {self.rank_to}"

    def prize_description(self) -> str:
        if self.prize_type == "item":
            details = self.item_details or {}
            name = details.get("name") or ""
            item_type = details.get("type") or "other"
            quantity = int(details.get("quantity") or 1)
            label = name or ITEM_TYPES.get(item_type, item_type.capitalize())
            if quantity > 1:
                return f"{quantity}x {label}"
            return label
        if self.prize_type == "cash":
            return f"IQD {_format_amount(self.prize_value)}"
        if self.prize_type == "points":
            return f"{_format_amount(self.prize_value)} points"
        type_label = PRIZE_TYPES.get(self.prize_type, self.prize_type.capitalize())
        return f"{type_label}: {_format_amount(self.prize_value)}"


class CompetitionLeaderboard(Base):
    __tablename__ = 'competition_leaderboards'

    id = Column(Integer, primary_key=True, autoincrement=True)
    competition_id = Column(Integer, ForeignKey('competitions.id', ondelete='CASCADE'), nullable=False)
    player_id = Column(Integer, ForeignKey('players.id', ondelete='CASCADE'), nullable=False)
    score = Column(Integer, nullable=False, default=0)
    rank = Column(Integer, nullable=True)
    created_at = Column(UTCDateTime, default=now_utc, nullable=False)
    updated_at = Column(UTCDateTime, default=now_utc, onupdate=now_utc, nullable=False)

    competition = relationship("Competition", back_populates="leaderboard")
    player = relationship("Player")

    __table_args__ = (
        UniqueConstraint('competition_id', 'player_id', name='uq_competition_leaderboards_player'),
        Index('idx_competition_leaderboards_rank', 'competition_id', 'rank'),
    )

    def prize_tier(self) -> Optional[PrizeTier]:
        if self.rank is None:
            return None
        for tier in self.competition.prize_tiers:
            if tier.covers_rank(self.rank):
                return tier
        return None

    def prize_description(self) -> Optional[str]:
        tier = self.prize_tier()
        return tier.prize_description() if tier else None


class CompetitionPlayerAnswer(Base):
    """One player's answer to one question of a competition."""

    __tablename__ = 'competition_player_answers'

    id = Column(Integer, primary_key=True, autoincrement=True)
    player_id = Column(Integer, ForeignKey('players.id', ondelete='CASCADE'), nullable=False)
    competition_id = Column(Integer, ForeignKey('competitions.id', ondelete='CASCADE'), nullable=False)
    question_id = Column(Integer, ForeignKey('questions.id', ondelete='CASCADE'), nullable=False)
    player_answer = Column(Text, nullable=False)
    correct_answer = Column(Text, nullable=False)
    is_correct = Column(Boolean, nullable=False)
    answered_at = Column(UTCDateTime, nullable=False, default=now_utc)
    created_at = Column(UTCDateTime, default=now_utc, nullable=False)
    updated_at = Column(UTCDateTime, default=now_utc, onupdate=now_utc, nullable=False)

    competition = relationship("Competition", back_populates="player_answers")
    player = relationship("Player")
    question = relationship("Question")

    __table_args__ = (
        UniqueConstraint('player_id', 'competition_id', 'question_id', name='uq_competition_player_answers_question'),
        Index('idx_player_answers_comp_time_player', 'competition_id', 'answered_at', 'player_id'),
    )
