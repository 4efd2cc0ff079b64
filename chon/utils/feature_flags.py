"""Feature flag helpers for runtime configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Dict, Literal, TypedDict, cast


FeatureFlagKey = Literal[
    "competition_notifications_enabled",
    "scheduled_notifications_enabled",
]


class FeatureFlagValues(TypedDict):
    competition_notifications_enabled: bool
    scheduled_notifications_enabled: bool


@dataclass(frozen=True)
class FeatureFlagDefinition:
    env_var: str
    default: bool


_FEATURE_FLAG_DEFINITIONS: Dict[FeatureFlagKey, FeatureFlagDefinition] = {
    "competition_notifications_enabled": FeatureFlagDefinition("COMPETITION_NOTIFICATIONS_ENABLED", True),
    "scheduled_notifications_enabled": FeatureFlagDefinition("SCHEDULED_NOTIFICATIONS_ENABLED", True),
}


def normalize_bool(value: str | None, default: bool = True) -> bool:
    """Return normalized boolean from environment-style value."""
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"", "0", "false", "no", "off"}:
        return False
    if normalized in {"1", "true", "yes", "on"}:
        return True
    return default


@lru_cache(maxsize=None)
def get_feature_flags() -> FeatureFlagValues:
    """Return the cached feature flag state sourced from the environment."""
    values: Dict[FeatureFlagKey, bool] = {}
    for key, definition in _FEATURE_FLAG_DEFINITIONS.items():
        values[key] = normalize_bool(os.getenv(definition.env_var), default=definition.default)
    return cast(FeatureFlagValues, values)


def is_feature_enabled(flag: FeatureFlagKey) -> bool:
    return get_feature_flags()[flag]


def competition_notifications_enabled() -> bool:
    """Push lifecycle notifications when competitions are created or change phase."""
    return is_feature_enabled("competition_notifications_enabled")


def scheduled_notifications_enabled() -> bool:
    """Allow the scheduled-notification processor to dispatch sends."""
    return is_feature_enabled("scheduled_notifications_enabled")


def refresh_feature_flag_cache() -> None:
    """Invalidate cached feature flag values (useful for tests)."""
    get_feature_flags.cache_clear()
