"""
Cash side of the platform: wallets, payment methods and money transactions.

Amounts are ``Numeric`` columns and are handled as ``Decimal`` in Python.
"""
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from sqlalchemy import Column, Integer, String, Text, Numeric, Boolean, ForeignKey, Index, UniqueConstraint
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import object_session, relationship

from .base import Base, now_utc
from .translations import TranslatableMixin
from chon.db.types import UTCDateTime


TWO_PLACES = Decimal("0.01")


def to_decimal(value) -> Decimal:
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


class InsufficientFundsError(ValueError):
    def __init__(self, message: str = "Insufficient wallet balance"):
        super().__init__(message)


class PlayerWallet(Base):
    __tablename__ = 'player_wallets'

    player_id = Column(Integer, ForeignKey('players.id', ondelete='CASCADE'), primary_key=True)
    balance = Column(Numeric(12, 2), nullable=False, default=0)
    last_updated = Column(UTCDateTime, default=now_utc, onupdate=now_utc, nullable=False)

    player = relationship("Player")

    def add_balance(self, amount) -> None:
        self.balance = to_decimal(self.balance) + to_decimal(amount)

    def subtract_balance(self, amount) -> None:
        if not self.has_sufficient_balance(amount):
            raise InsufficientFundsError()
        self.balance = to_decimal(self.balance) - to_decimal(amount)

    def has_sufficient_balance(self, amount) -> bool:
        return to_decimal(self.balance) >= to_decimal(amount)


class PaymentMethod(TranslatableMixin, Base):
    __tablename__ = 'payment_methods'
    __translatable_fields__ = ("name", "instructions")
    __translation_markers__ = ("name", "instructions")

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    name_kurdish = Column(String(255), nullable=True)
    name_arabic = Column(String(255), nullable=True)
    name_kurmanji = Column(String(255), nullable=True)
    code = Column(String(50), nullable=False, unique=True)
    provider = Column(String(100), nullable=True)
    icon = Column(String(255), nullable=True)
    config = Column(JSONB, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    supports_deposit = Column(Boolean, nullable=False, default=True)
    supports_withdrawal = Column(Boolean, nullable=False, default=False)
    min_amount = Column(Numeric(12, 2), nullable=False, default=0)
    max_amount = Column(Numeric(12, 2), nullable=True)
    fee_fixed = Column(Numeric(12, 2), nullable=False, default=0)
    fee_percentage = Column(Numeric(5, 2), nullable=False, default=0)
    processing_time_hours = Column(Integer, nullable=True)
    instructions = Column(Text, nullable=True)
    instructions_kurdish = Column(Text, nullable=True)
    instructions_arabic = Column(Text, nullable=True)
    instructions_kurmanji = Column(Text, nullable=True)
    created_at = Column(UTCDateTime, default=now_utc, nullable=False)
    updated_at = Column(UTCDateTime, default=now_utc, onupdate=now_utc, nullable=False)

    def calculate_fee(self, amount) -> Decimal:
        fee = to_decimal(self.fee_fixed) + to_decimal(amount) * to_decimal(self.fee_percentage) / Decimal(100)
        return fee.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)

    def calculate_total_with_fee(self, amount) -> Decimal:
        return to_decimal(amount) + self.calculate_fee(amount)

    def is_available_for(self, transaction_type: str, amount) -> bool:
        if not self.is_active:
            return False
        if transaction_type == "deposit" and not self.supports_deposit:
            return False
        if transaction_type == "withdrawal" and not self.supports_withdrawal:
            return False
        value = to_decimal(amount)
        if value < to_decimal(self.min_amount):
            return False
        if self.max_amount is not None and value > to_decimal(self.max_amount):
            return False
        return True


class PlayerPaymentMethod(Base):
    """A payment method a player has saved, with provider token and masked details."""

    __tablename__ = 'player_payment_methods'

    id = Column(Integer, primary_key=True, autoincrement=True)
    player_id = Column(Integer, ForeignKey('players.id', ondelete='CASCADE'), nullable=False)
    payment_method_id = Column(Integer, ForeignKey('payment_methods.id', ondelete='CASCADE'), nullable=False)
    token = Column(String(255), nullable=True)
    external_id = Column(String(255), nullable=True)
    nickname = Column(String(255), nullable=True)
    details = Column(JSONB, nullable=True)
    is_default = Column(Boolean, nullable=False, default=False)
    last_used_at = Column(UTCDateTime, nullable=True)
    created_at = Column(UTCDateTime, default=now_utc, nullable=False)
    updated_at = Column(UTCDateTime, default=now_utc, onupdate=now_utc, nullable=False)

    player = relationship("Player")
    payment_method = relationship("PaymentMethod")

    __table_args__ = (
        UniqueConstraint('player_id', 'payment_method_id', 'token', name='uq_player_payment_methods_token'),
    )

    def mark_used(self) -> None:
        self.last_used_at = now_utc()

    def set_as_default(self) -> None:
        """Make this the player's only default method; caller commits."""
        session = object_session(self)
        if session is not None:
            (
                session.query(PlayerPaymentMethod)
                .filter(
                    PlayerPaymentMethod.player_id == self.player_id,
                    PlayerPaymentMethod.id != self.id,
                    PlayerPaymentMethod.is_default.is_(True),
                )
                .update({"is_default": False}, synchronize_session="fetch")
            )
        self.is_default = True

    @property
    def display_name(self) -> str:
        if self.nickname:
            return self.nickname
        name = self.payment_method.name if self.payment_method else ""
        details = self.details or {}
        if details.get("last4"):
            return f"{name} ending in {details['last4']}"
        if details.get("email"):
            return f"{name} ({details['email']})"
        if details.get("account_number"):
            return f"{name} ending in {str(details['account_number'])[-4:]}"
        return name


TRANSACTION_ENTRY_FEE = "entry_fee"
TRANSACTION_PRIZE = "prize"
TRANSACTION_BONUS = "bonus"
TRANSACTION_REFUND = "refund"

POSITIVE_TRANSACTION_TYPES = (TRANSACTION_PRIZE, TRANSACTION_BONUS, TRANSACTION_REFUND)

TRANSACTION_PENDING = "pending"
TRANSACTION_COMPLETED = "completed"
TRANSACTION_FAILED = "failed"
TRANSACTION_CANCELLED = "cancelled"
TRANSACTION_REFUNDED = "refunded"


class Transaction(Base):
    __tablename__ = 'transactions'

    id = Column(Integer, primary_key=True, autoincrement=True)
    player_id = Column(Integer, ForeignKey('players.id', ondelete='CASCADE'), nullable=False)
    competition_id = Column(Integer, ForeignKey('competitions.id', ondelete='SET NULL'), nullable=True)
    amount = Column(Numeric(12, 2), nullable=False)
    transaction_type = Column(String(20), nullable=False)
    status = Column(String(20), nullable=False, default=TRANSACTION_PENDING)
    payment_method = Column(String(50), nullable=True)
    payment_provider = Column(String(100), nullable=True)
    payment_details = Column(JSONB, nullable=True)
    reference_id = Column(String(100), nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(UTCDateTime, default=now_utc, nullable=False)
    updated_at = Column(UTCDateTime, default=now_utc, onupdate=now_utc, nullable=False)

    player = relationship("Player")
    competition = relationship("Competition")
    logs = relationship("TransactionLog", back_populates="transaction", cascade="all, delete-orphan")

    __table_args__ = (
        Index('idx_transactions_player_created', 'player_id', 'created_at'),
        Index('idx_transactions_type_status', 'transaction_type', 'status'),
    )

    def is_completed(self) -> bool:
        return self.status == TRANSACTION_COMPLETED

    def is_pending(self) -> bool:
        return self.status == TRANSACTION_PENDING

    def signed_amount(self) -> Decimal:
        amount = to_decimal(self.amount)
        return amount if self.transaction_type in POSITIVE_TRANSACTION_TYPES else -amount

    def log_action(self, action: str, reason: Optional[str] = None, metadata: Optional[dict] = None) -> "TransactionLog":
        entry = TransactionLog(action=action, reason=reason, metadata_json=metadata)
        self.logs.append(entry)
        return entry

    def mark_completed(self, reason: Optional[str] = None) -> None:
        """Complete the transaction and stamp the player's saved method as used."""
        self.status = TRANSACTION_COMPLETED
        self.log_action("completed", reason)
        saved = self.saved_payment_method()
        if saved is not None:
            saved.mark_used()

    def saved_payment_method(self) -> Optional[PlayerPaymentMethod]:
        session = object_session(self)
        if session is None or not self.payment_method:
            return None
        return (
            session.query(PlayerPaymentMethod)
            .join(PaymentMethod, PlayerPaymentMethod.payment_method_id == PaymentMethod.id)
            .filter(
                PlayerPaymentMethod.player_id == self.player_id,
                PaymentMethod.code == self.payment_method,
            )
            .first()
        )

    def mark_failed(self, reason: Optional[str] = None) -> None:
        self.status = TRANSACTION_FAILED
        self.log_action("failed", reason)


class TransactionLog(Base):
    __tablename__ = 'transaction_logs'

    id = Column(Integer, primary_key=True, autoincrement=True)
    transaction_id = Column(Integer, ForeignKey('transactions.id', ondelete='CASCADE'), nullable=False)
    action = Column(String(50), nullable=False)
    reason = Column(Text, nullable=True)
    metadata_json = Column('metadata', JSONB, nullable=True)
    created_at = Column(UTCDateTime, default=now_utc, nullable=False)

    transaction = relationship("Transaction", back_populates="logs")
