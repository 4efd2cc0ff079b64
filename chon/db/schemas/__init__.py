"""
Domain-split Pydantic schemas with an aggregating namespace.
"""

from .app_versions import (
    AppUpdateCheckRequest,
    AppVersionBase,
    AppVersionCreate,
    AppVersionUpdate,
    AppVersion,
)
from .players import FcmTokenUpdate, Player
from .notifications import (
    NotificationBase,
    NotificationCreate,
    Notification,
    PlayerLookup,
    MarkAsReadRequest,
)
from .competitions import (
    CompetitionBase,
    CompetitionCreate,
    CompetitionUpdate,
    Competition,
    PrizeTier,
)
from .points import PointsTransactionCreate, PointsTransaction, PlayerPointsBalance

__all__ = [
    "AppUpdateCheckRequest",
    "AppVersionBase",
    "AppVersionCreate",
    "AppVersionUpdate",
    "AppVersion",
    "FcmTokenUpdate",
    "Player",
    "NotificationBase",
    "NotificationCreate",
    "Notification",
    "PlayerLookup",
    "MarkAsReadRequest",
    "CompetitionBase",
    "CompetitionCreate",
    "CompetitionUpdate",
    "Competition",
    "PrizeTier",
    "PointsTransactionCreate",
    "PointsTransaction",
    "PlayerPointsBalance",
]
