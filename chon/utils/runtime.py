"""Runtime environment helpers shared by the API, services and jobs."""

import os
from typing import List
from zoneinfo import ZoneInfo

DEFAULT_PUBLIC_BASE_URL = "http://chonapp.net"
DEFAULT_COMPETITION_TIMEZONE = "Asia/Baghdad"

_DEFAULT_CORS_ORIGINS: List[str] = [
    "http://localhost",
    "http://localhost:3000",
    "http://localhost:8000",
    "http://chonapp.net",
    "https://chonapp.net",
]


def env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def public_base_url() -> str:
    """Host that serves uploaded advertisement images."""
    return os.getenv("ADVERTISING_PUBLIC_BASE_URL", DEFAULT_PUBLIC_BASE_URL).rstrip("/")


def competition_timezone() -> ZoneInfo:
    """Zone used to interpret naive schedule timestamps entered by admins."""
    return ZoneInfo(os.getenv("COMPETITION_TIMEZONE", DEFAULT_COMPETITION_TIMEZONE))


def cors_origins() -> List[str]:
    origins = list(_DEFAULT_CORS_ORIGINS)
    extra = os.getenv("CORS_ALLOWED_ORIGINS", "")
    for origin in extra.split(","):
        origin = origin.strip()
        if origin and origin not in origins:
            origins.append(origin)
    return origins


def job_dispatch_mode() -> str:
    """``thread`` (default) runs jobs in a daemon thread, ``sync`` runs them inline."""
    mode = os.getenv("JOB_DISPATCH_MODE", "thread").strip().lower()
    return mode if mode in ("thread", "sync") else "thread"
