import re
from urllib.parse import urlparse

from sqlalchemy import Column, Integer, String, Boolean, Index

from .base import Base, now_utc
from chon.db.types import UTCDateTime


_STORAGE_PREFIX = re.compile(r"^advertisements/")


def _is_absolute_url(value: str) -> bool:
    parsed = urlparse(value)
    return bool(parsed.scheme and parsed.netloc)


class Advertising(Base):
    __tablename__ = 'advertisements'

    id = Column(Integer, primary_key=True, autoincrement=True)
    company_name = Column(String(255), nullable=False)
    phone_number = Column(String(32), nullable=True)
    image = Column(String(500), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(UTCDateTime, default=now_utc, nullable=False)
    updated_at = Column(UTCDateTime, default=now_utc, onupdate=now_utc, nullable=False)

    __table_args__ = (
        Index('idx_advertisements_active_created', 'is_active', 'created_at'),
    )

    def image_url(self, base_url: str) -> str:
        """Public URL for the stored image; absolute URLs pass through."""
        if not self.image:
            return ""
        if _is_absolute_url(self.image):
            return self.image
        path = _STORAGE_PREFIX.sub("", self.image)
        return f"{base_url.rstrip('/')}/storage/advertisements/{path}"
