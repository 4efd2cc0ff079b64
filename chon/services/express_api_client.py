"""Client for the companion Express API that fans notifications out to players."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Optional

import requests

from chon.utils.runtime import env_float

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:8000"


@dataclass(frozen=True)
class ExpressApiConfig:
    base_url: str = DEFAULT_BASE_URL
    admin_token: Optional[str] = None
    timeout_seconds: float = 10.0

    @classmethod
    def from_environment(cls) -> "ExpressApiConfig":
        return cls(
            base_url=(os.getenv("EXPRESS_API_BASE_URL") or DEFAULT_BASE_URL).rstrip("/"),
            admin_token=os.getenv("EXPRESS_API_ADMIN_TOKEN"),
            timeout_seconds=env_float("EXPRESS_API_TIMEOUT_SECONDS", 10.0),
        )


def _error_message(response: requests.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return "Unknown error"
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return "Unknown error"


def _json_or_none(response: requests.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return None


class ExpressApiClient:
    """Targeted or broadcast notification sends over HTTP.

    Never raises for transport or HTTP errors; every call returns a result
    dict with ``success`` and ``status_code`` plus ``data`` or ``error``.
    """

    def __init__(self, config: Optional[ExpressApiConfig] = None):
        self.config = config or ExpressApiConfig.from_environment()

    def _headers(self) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "API-Version": "v1",
            "Authorization": f"Bearer {self.config.admin_token or ''}",
        }

    def send_notification(
        self,
        notification_data: Dict[str, Any],
        user_ids: Optional[Iterable[Any]] = None,
    ) -> Dict[str, Any]:
        """Send to the given player ids, or broadcast immediately when none are given."""
        ids = [str(user_id) for user_id in (user_ids or [])]
        if ids:
            url = f"{self.config.base_url}/api/v1/notifications/send-to-player"
            payload = {**notification_data, "userIds": ids}
        else:
            url = f"{self.config.base_url}/api/v1/notifications"
            payload = {**notification_data, "send_immediately": True}

        try:
            response = requests.post(url, json=payload, headers=self._headers(), timeout=self.config.timeout_seconds)
        except requests.RequestException as exc:
            logger.error("express_api_send_exception: url=%s error=%s", url, exc)
            return {"success": False, "error": str(exc), "status_code": 500}

        if response.ok:
            logger.info(
                "express_api_send_ok: url=%s recipients=%s status=%s",
                url,
                len(ids) or "broadcast",
                response.status_code,
            )
            return {"success": True, "data": _json_or_none(response), "status_code": response.status_code}

        error = _error_message(response)
        logger.error("express_api_send_failed: url=%s status=%s error=%s", url, response.status_code, error)
        return {"success": False, "error": error, "status_code": response.status_code}

    def test_connection(self) -> Dict[str, Any]:
        url = f"{self.config.base_url}/api/health"
        try:
            response = requests.get(url, headers=self._headers(), timeout=self.config.timeout_seconds)
        except requests.RequestException as exc:
            return {"success": False, "error": str(exc), "status_code": 500}
        if response.ok:
            return {"success": True, "message": "Connection successful", "status_code": response.status_code}
        return {"success": False, "error": "API endpoint not responding", "status_code": response.status_code}


_express_api_client: Optional[ExpressApiClient] = None


def get_express_api_client() -> ExpressApiClient:
    global _express_api_client
    if _express_api_client is None:
        _express_api_client = ExpressApiClient()
    return _express_api_client


def reset_express_api_client_for_tests() -> None:
    global _express_api_client
    _express_api_client = None
