from sqlalchemy import Column, Integer, String, Text, Boolean, Index, UniqueConstraint

from .base import Base, now_utc
from chon.db.types import UTCDateTime


PLATFORMS = ("ios", "android")


class AppVersion(Base):
    __tablename__ = 'app_versions'

    id = Column(Integer, primary_key=True, autoincrement=True)
    platform = Column(String(10), nullable=False)
    version = Column(String(20), nullable=False)
    build_number = Column(Integer, nullable=False)
    app_store_url = Column(String(500), nullable=True)
    release_notes = Column(Text, nullable=True)
    is_force_update = Column(Boolean, nullable=False, default=False)
    is_active = Column(Boolean, nullable=False, default=True)
    released_at = Column(UTCDateTime, nullable=True)
    created_at = Column(UTCDateTime, default=now_utc, nullable=False)
    updated_at = Column(UTCDateTime, default=now_utc, onupdate=now_utc, nullable=False)

    __table_args__ = (
        UniqueConstraint('platform', 'version', name='uq_app_versions_platform_version'),
        Index('idx_app_versions_platform_active_build', 'platform', 'is_active', 'build_number'),
    )
