"""
Domain-split SQLAlchemy models with an aggregating namespace.

Import from ``chon.db.models`` rather than the individual modules so every
table is registered on ``Base.metadata`` before use.
"""

from .base import Base, now_utc  # re-export

from .users import User, PersonalAccessToken
from .players import Player, PlayerOtp
from .competitions import (
    Competition,
    CompetitionRegistration,
    CompetitionLeaderboard,
    CompetitionPlayerAnswer,
    PrizeTier,
    CompetitionScheduleError,
    competition_status,
    competitions_questions,
)
from .questions import Question
from .points import PlayerPointsBalance, PointsTransaction, PointsPackage, InsufficientPointsError
from .wallets import (
    PlayerWallet,
    PaymentMethod,
    PlayerPaymentMethod,
    Transaction,
    TransactionLog,
    InsufficientFundsError,
)
from .notifications import Notification, PlayerNotification
from .app_versions import AppVersion
from .advertising import Advertising

__all__ = [
    # base
    "Base",
    "now_utc",
    # accounts
    "User",
    "PersonalAccessToken",
    "Player",
    "PlayerOtp",
    # competitions
    "Competition",
    "CompetitionRegistration",
    "CompetitionLeaderboard",
    "CompetitionPlayerAnswer",
    "PrizeTier",
    "CompetitionScheduleError",
    "competition_status",
    "competitions_questions",
    "Question",
    # ledgers
    "PlayerPointsBalance",
    "PointsTransaction",
    "PointsPackage",
    "InsufficientPointsError",
    "PlayerWallet",
    "PaymentMethod",
    "PlayerPaymentMethod",
    "Transaction",
    "TransactionLog",
    "InsufficientFundsError",
    # notifications
    "Notification",
    "PlayerNotification",
    # app content
    "AppVersion",
    "Advertising",
]
