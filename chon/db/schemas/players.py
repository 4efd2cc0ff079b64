from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class FcmTokenUpdate(BaseModel):
    fcm_token: str = Field(max_length=1000)
    device_type: Optional[Literal["android", "ios", "web"]] = None
    app_version: Optional[str] = Field(default=None, max_length=20)
    player_id: Optional[int] = None
    whatsapp_number: Optional[str] = None


class Player(BaseModel):
    id: int
    whatsapp_number: str
    nickname: Optional[str] = None
    total_score: int
    level: int
    experience_points: int
    language: str
    joined_at: datetime
    model_config = ConfigDict(from_attributes=True)
