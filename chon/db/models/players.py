from sqlalchemy import Column, Integer, String, Text, Boolean, ForeignKey, Index
from sqlalchemy.orm import relationship
from .base import Base, now_utc
from chon.db.types import UTCDateTime


OTP_PURPOSES = ("login", "registration", "verification")


class Player(Base):
    __tablename__ = 'players'

    id = Column(Integer, primary_key=True, autoincrement=True)
    whatsapp_number = Column(String(32), nullable=False, unique=True)
    nickname = Column(String(100), nullable=True)
    total_score = Column(Integer, nullable=False, default=0)
    level = Column(Integer, nullable=False, default=1)
    experience_points = Column(Integer, nullable=False, default=0)
    language = Column(String(5), nullable=False, default='en')
    fcm_token = Column(Text, nullable=True)
    joined_at = Column(UTCDateTime, default=now_utc, nullable=False)
    updated_at = Column(UTCDateTime, default=now_utc, onupdate=now_utc, nullable=False)

    otps = relationship("PlayerOtp", back_populates="player", cascade="all, delete-orphan")
    notifications = relationship("PlayerNotification", back_populates="player", cascade="all, delete-orphan")

    __table_args__ = (
        Index('idx_players_total_score', 'total_score'),
    )


class PlayerOtp(Base):
    __tablename__ = 'player_otps'

    id = Column(Integer, primary_key=True, autoincrement=True)
    player_id = Column(Integer, ForeignKey('players.id', ondelete='CASCADE'), nullable=False)
    otp_code = Column(String(10), nullable=False)
    purpose = Column(String(20), nullable=False, default='login')
    is_verified = Column(Boolean, nullable=False, default=False)
    expires_at = Column(UTCDateTime, nullable=False)
    created_at = Column(UTCDateTime, default=now_utc, nullable=False)

    player = relationship("Player", back_populates="otps")

    __table_args__ = (
        Index('idx_player_otps_player_purpose', 'player_id', 'purpose'),
    )
