from datetime import datetime
from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


NotificationType = Literal["general", "competition", "announcement", "maintenance", "update"]
NotificationPriority = Literal["low", "normal", "high"]


class NotificationBase(BaseModel):
    title: str = Field(max_length=255)
    title_kurdish: Optional[str] = Field(default=None, max_length=255)
    title_arabic: Optional[str] = Field(default=None, max_length=255)
    title_kurmanji: Optional[str] = Field(default=None, max_length=255)
    message: str
    message_kurdish: Optional[str] = None
    message_arabic: Optional[str] = None
    message_kurmanji: Optional[str] = None
    type: NotificationType = "general"
    priority: NotificationPriority = "normal"
    data: Optional[Dict[str, Any]] = None
    scheduled_at: Optional[datetime] = None


class NotificationCreate(NotificationBase):
    send_immediately: bool = True
    # Comma separated player ids; empty means every player
    user_ids: Optional[str] = None


class Notification(NotificationBase):
    id: int
    status: str
    sent_at: Optional[datetime] = None
    api_response: Optional[Dict[str, Any]] = None
    created_at: datetime
    model_config = ConfigDict(from_attributes=True)


class PlayerLookup(BaseModel):
    whatsapp_number: str


class MarkAsReadRequest(PlayerLookup):
    notification_id: int
