import pytest

from chon.utils.feature_flags import (
    FeatureFlagKey,
    get_feature_flags,
    is_feature_enabled,
    normalize_bool,
    refresh_feature_flag_cache,
)

_ENV_FLAG_MAPPING = {
    "COMPETITION_NOTIFICATIONS_ENABLED": "competition_notifications_enabled",
    "SCHEDULED_NOTIFICATIONS_ENABLED": "scheduled_notifications_enabled",
}


@pytest.fixture(autouse=True)
def reset_flags(monkeypatch):
    """Clear env + cached values for each test to avoid cross-contamination."""
    for env_name in _ENV_FLAG_MAPPING:
        monkeypatch.delenv(env_name, raising=False)
    refresh_feature_flag_cache()
    yield
    refresh_feature_flag_cache()


def test_get_feature_flags_defaults_true():
    assert get_feature_flags() == {
        "competition_notifications_enabled": True,
        "scheduled_notifications_enabled": True,
    }


@pytest.mark.parametrize("env_name,flag_key", list(_ENV_FLAG_MAPPING.items()))
def test_individual_flag_disabled_via_env(monkeypatch, env_name: str, flag_key: FeatureFlagKey):
    monkeypatch.setenv(env_name, "off")
    refresh_feature_flag_cache()
    assert is_feature_enabled(flag_key) is False


@pytest.mark.parametrize("raw_value,expected", [("yes", True), ("0", False), ("", False), ("maybe", True)])
def test_normalize_bool(raw_value, expected):
    assert normalize_bool(raw_value) is expected


def test_refresh_feature_flag_cache_forces_reload(monkeypatch):
    monkeypatch.setenv("SCHEDULED_NOTIFICATIONS_ENABLED", "false")
    refresh_feature_flag_cache()
    assert get_feature_flags()["scheduled_notifications_enabled"] is False

    # Update env without clearing cache – still should read stale value
    monkeypatch.setenv("SCHEDULED_NOTIFICATIONS_ENABLED", "true")
    assert get_feature_flags()["scheduled_notifications_enabled"] is False

    refresh_feature_flag_cache()
    assert get_feature_flags()["scheduled_notifications_enabled"] is True
