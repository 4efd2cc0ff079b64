from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy import Column, Integer, String, Text, ForeignKey, Index, UniqueConstraint
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import relationship

from .base import Base, now_utc
from chon.db.types import UTCDateTime


NOTIFICATION_TYPES = ("general", "competition", "announcement", "maintenance", "update")
NOTIFICATION_PRIORITIES = ("low", "normal", "high")

STATUS_PENDING = "pending"
STATUS_SENT = "sent"
STATUS_FAILED = "failed"

RECENT_WINDOW = timedelta(days=30)


class Notification(Base):
    __tablename__ = 'notifications'

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(255), nullable=False)
    title_kurdish = Column(String(255), nullable=True)
    title_arabic = Column(String(255), nullable=True)
    title_kurmanji = Column(String(255), nullable=True)
    message = Column(Text, nullable=False)
    message_kurdish = Column(Text, nullable=True)
    message_arabic = Column(Text, nullable=True)
    message_kurmanji = Column(Text, nullable=True)
    type = Column(String(20), nullable=False, default='general')
    priority = Column(String(10), nullable=False, default='normal')
    data = Column(JSONB, nullable=True)
    scheduled_at = Column(UTCDateTime, nullable=True)
    sent_at = Column(UTCDateTime, nullable=True)
    status = Column(String(10), nullable=False, default=STATUS_PENDING)
    api_response = Column(JSONB, nullable=True)
    created_at = Column(UTCDateTime, default=now_utc, nullable=False)
    updated_at = Column(UTCDateTime, default=now_utc, onupdate=now_utc, nullable=False)

    player_notifications = relationship("PlayerNotification", back_populates="notification", cascade="all, delete-orphan")

    __table_args__ = (
        Index('idx_notifications_status_scheduled', 'status', 'scheduled_at'),
        Index('idx_notifications_type', 'type'),
    )

    def is_ready_to_send(self, now: Optional[datetime] = None) -> bool:
        if self.status != STATUS_PENDING:
            return False
        return self.scheduled_at is None or self.scheduled_at <= (now or now_utc())

    def mark_sent(self, response: Optional[dict] = None) -> None:
        self.status = STATUS_SENT
        self.sent_at = now_utc()
        if response is not None:
            self.api_response = response

    def mark_failed(self, response: Optional[dict] = None) -> None:
        self.status = STATUS_FAILED
        if response is not None:
            self.api_response = response


class PlayerNotification(Base):
    __tablename__ = 'player_notifications'

    id = Column(Integer, primary_key=True, autoincrement=True)
    player_id = Column(Integer, ForeignKey('players.id', ondelete='CASCADE'), nullable=False)
    notification_id = Column(Integer, ForeignKey('notifications.id', ondelete='CASCADE'), nullable=False)
    received_at = Column(UTCDateTime, default=now_utc, nullable=False)
    read_at = Column(UTCDateTime, nullable=True)
    delivery_data = Column(JSONB, nullable=True)
    created_at = Column(UTCDateTime, default=now_utc, nullable=False)
    updated_at = Column(UTCDateTime, default=now_utc, onupdate=now_utc, nullable=False)

    player = relationship("Player", back_populates="notifications")
    notification = relationship("Notification", back_populates="player_notifications")

    __table_args__ = (
        UniqueConstraint('player_id', 'notification_id', name='uq_player_notifications_pair'),
        Index('idx_player_notifications_player_received', 'player_id', 'received_at'),
        Index('idx_player_notifications_player_read', 'player_id', 'read_at'),
    )

    def is_read(self) -> bool:
        return self.read_at is not None

    def is_unread(self) -> bool:
        return self.read_at is None

    def mark_read(self) -> None:
        if self.read_at is None:
            self.read_at = now_utc()

