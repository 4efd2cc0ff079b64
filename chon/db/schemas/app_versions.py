from datetime import datetime
from typing import Literal, Optional
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field, field_validator


Platform = Literal["ios", "android"]


def _validate_url(value: Optional[str]) -> Optional[str]:
    if value is None or value == "":
        return None
    parsed = urlparse(value)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValueError("The app store url must be a valid URL.")
    return value


class AppUpdateCheckRequest(BaseModel):
    platform: Platform
    current_version: str
    current_build_number: int
    app_version: str


class AppVersionBase(BaseModel):
    platform: Platform
    version: str = Field(max_length=20)
    build_number: int = Field(ge=1)
    app_store_url: Optional[str] = Field(default=None, max_length=500)
    release_notes: Optional[str] = Field(default=None, max_length=1000)
    is_force_update: bool = False
    is_active: bool = True
    released_at: Optional[datetime] = None

    @field_validator("app_store_url")
    @classmethod
    def check_app_store_url(cls, value):
        return _validate_url(value)


class AppVersionCreate(AppVersionBase):
    pass


class AppVersionUpdate(BaseModel):
    platform: Optional[Platform] = None
    version: Optional[str] = Field(default=None, max_length=20)
    build_number: Optional[int] = Field(default=None, ge=1)
    app_store_url: Optional[str] = Field(default=None, max_length=500)
    release_notes: Optional[str] = Field(default=None, max_length=1000)
    is_force_update: Optional[bool] = None
    is_active: Optional[bool] = None
    released_at: Optional[datetime] = None

    @field_validator("app_store_url")
    @classmethod
    def check_app_store_url(cls, value):
        return _validate_url(value)


class AppVersion(AppVersionBase):
    id: int
    created_at: datetime
    updated_at: datetime
    model_config = ConfigDict(from_attributes=True)
