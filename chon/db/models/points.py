from sqlalchemy import Column, Integer, String, Text, Boolean, ForeignKey, Index
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import relationship

from .base import Base, now_utc
from chon.db.types import UTCDateTime


TYPE_PURCHASE = "purchase"
TYPE_SPEND = "spend"
TYPE_ADMIN_CREDIT = "admin_credit"
TYPE_REFUND = "refund"

CREDIT_TYPES = (TYPE_PURCHASE, TYPE_ADMIN_CREDIT, TYPE_REFUND)
DEBIT_TYPES = (TYPE_SPEND,)

TYPE_LABELS = {
    TYPE_PURCHASE: "Purchase",
    TYPE_SPEND: "Spend",
    TYPE_ADMIN_CREDIT: "Admin Credit",
    TYPE_REFUND: "Refund",
}

REF_COMPETITION = "competition"
REF_PACKAGE_PURCHASE = "package_purchase"
REF_ADMIN_ACTION = "admin_action"

REFERENCE_TYPE_LABELS = {
    REF_COMPETITION: "Competition",
    REF_PACKAGE_PURCHASE: "Package Purchase",
    REF_ADMIN_ACTION: "Admin Action",
}


class InsufficientPointsError(ValueError):
    def __init__(self, message: str = "Insufficient points balance"):
        super().__init__(message)


class PlayerPointsBalance(Base):
    __tablename__ = 'player_points_balance'

    player_id = Column(Integer, ForeignKey('players.id', ondelete='CASCADE'), primary_key=True)
    current_balance = Column(Integer, nullable=False, default=0)
    total_earned = Column(Integer, nullable=False, default=0)
    total_spent = Column(Integer, nullable=False, default=0)
    created_at = Column(UTCDateTime, default=now_utc, nullable=False)
    updated_at = Column(UTCDateTime, default=now_utc, onupdate=now_utc, nullable=False)

    player = relationship("Player")

    def add_points(self, amount: int) -> None:
        self.current_balance = (self.current_balance or 0) + amount
        self.total_earned = (self.total_earned or 0) + amount

    def deduct_points(self, amount: int) -> None:
        if (self.current_balance or 0) < amount:
            raise InsufficientPointsError()
        self.current_balance -= amount
        self.total_spent = (self.total_spent or 0) + amount

    def has_enough_points(self, amount: int) -> bool:
        return (self.current_balance or 0) >= amount


class PointsTransaction(Base):
    __tablename__ = 'points_transactions'

    id = Column(Integer, primary_key=True, autoincrement=True)
    player_id = Column(Integer, ForeignKey('players.id', ondelete='CASCADE'), nullable=False)
    type = Column(String(20), nullable=False)
    amount = Column(Integer, nullable=False)
    balance_before = Column(Integer, nullable=False)
    balance_after = Column(Integer, nullable=False)
    reference_type = Column(String(30), nullable=True)
    reference_id = Column(String(255), nullable=True)
    metadata_json = Column('metadata', JSONB, nullable=True)
    created_at = Column(UTCDateTime, default=now_utc, nullable=False)

    player = relationship("Player")

    __table_args__ = (
        Index('idx_points_transactions_player_created', 'player_id', 'created_at'),
        Index('idx_points_transactions_reference', 'reference_type', 'reference_id'),
    )

    def is_credit(self) -> bool:
        return self.type in CREDIT_TYPES

    def is_debit(self) -> bool:
        return self.type in DEBIT_TYPES

    @property
    def type_label(self) -> str:
        return TYPE_LABELS.get(self.type, self.type.capitalize())

    @property
    def reference_type_label(self):
        if not self.reference_type:
            return None
        return REFERENCE_TYPE_LABELS.get(self.reference_type, self.reference_type.replace("_", " ").capitalize())


class PointsPackage(Base):
    __tablename__ = 'points_packages'

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    points_amount = Column(Integer, nullable=False)
    price_iqd = Column(Integer, nullable=False)
    active = Column(Boolean, nullable=False, default=True)
    sort_order = Column(Integer, nullable=False, default=0)
    created_at = Column(UTCDateTime, default=now_utc, nullable=False)
    updated_at = Column(UTCDateTime, default=now_utc, onupdate=now_utc, nullable=False)

    @property
    def formatted_price(self) -> str:
        return f"{self.price_iqd:,} IQD"

    @property
    def price_per_point(self) -> float:
        if not self.points_amount:
            return 0.0
        return round(self.price_iqd / self.points_amount, 2)
