from sqlalchemy import Column, Integer, String, Text, ForeignKey, Index
from sqlalchemy.orm import relationship
from .base import Base, now_utc
from chon.db.types import UTCDateTime


class User(Base):
    """Back-office account; only ``role == 'admin'`` may use the admin API."""

    __tablename__ = 'users'

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    email = Column(String(320), nullable=False, unique=True, index=True)
    role = Column(String(20), nullable=False, default='editor')
    created_at = Column(UTCDateTime, default=now_utc)
    updated_at = Column(UTCDateTime, default=now_utc, onupdate=now_utc)

    tokens = relationship("PersonalAccessToken", back_populates="user", cascade="all, delete-orphan")

    @property
    def is_admin(self) -> bool:
        return self.role == 'admin'


class PersonalAccessToken(Base):
    __tablename__ = 'personal_access_tokens'

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey('users.id', ondelete='CASCADE'), nullable=False)

    # Token identity and secret hash (never store raw secret)
    token_id = Column(String(64), nullable=False, unique=True)
    token_hash = Column(Text, nullable=False)
    name = Column(String(100), nullable=False)
    last_four = Column(String(4), nullable=True)

    created_at = Column(UTCDateTime, default=now_utc, nullable=False)
    last_used_at = Column(UTCDateTime, nullable=True)
    revoked_at = Column(UTCDateTime, nullable=True)

    user = relationship("User", back_populates="tokens")

    __table_args__ = (
        Index('idx_pat_user_created', 'user_id', 'created_at'),
    )
