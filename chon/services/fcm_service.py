"""
Firebase Cloud Messaging delivery over the HTTP v1 API.

Messages go out one device token at a time (or once to the ``all_users``
topic when no tokens are given); per-token outcomes are collected so a single
bad token never aborts the batch.
"""

from __future__ import annotations

import json
import logging
import os
import threading
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

from google.auth.exceptions import GoogleAuthError
from google.auth.transport import requests as google_requests
from google.oauth2 import service_account
import requests

from chon.utils.runtime import env_float

logger = logging.getLogger(__name__)

FCM_SEND_URL = "https://fcm.googleapis.com/v1/projects/{project_id}/messages:send"
FCM_SCOPE = "https://www.googleapis.com/auth/firebase.messaging"
IID_BATCH_URL = "https://iid.googleapis.com/iid/v1:{action}"
BROADCAST_TOPIC = "all_users"
ANDROID_CHANNEL_ID = "chon_notifications"

_ANDROID_PRIORITIES = {
    "urgent": "high",
    "high": "high",
    "normal": "normal",
    "low": "normal",
}


class FcmError(Exception):
    """Raised internally when FCM rejects a request."""


@dataclass(frozen=True)
class FcmConfig:
    """Where FCM credentials come from.

    ``credentials_file`` points at a Firebase service account JSON key; access
    tokens are minted from it and refreshed as they expire. ``access_token`` is
    a fixed bearer token for local development and is ignored when a service
    account is configured. ``project_id`` defaults to the service account's
    project.
    """

    project_id: Optional[str] = None
    credentials_file: Optional[str] = None
    access_token: Optional[str] = None
    timeout_seconds: float = 10.0

    @classmethod
    def from_environment(cls) -> "FcmConfig":
        return cls(
            project_id=os.getenv("FCM_PROJECT_ID"),
            credentials_file=os.getenv("FCM_CREDENTIALS_FILE") or os.getenv("GOOGLE_APPLICATION_CREDENTIALS"),
            access_token=os.getenv("FCM_ACCESS_TOKEN"),
            timeout_seconds=env_float("FCM_TIMEOUT_SECONDS", 10.0),
        )

    def is_configured(self) -> bool:
        return not self.validate()

    def validate(self) -> List[str]:
        errors = []
        if not self.credentials_file and not self.access_token:
            errors.append("FCM_CREDENTIALS_FILE (or FCM_ACCESS_TOKEN) is required")
        if not self.project_id and not self.credentials_file:
            errors.append("FCM_PROJECT_ID is required")
        return errors


def android_priority(priority: Optional[str]) -> str:
    return _ANDROID_PRIORITIES.get((priority or "normal").lower(), "normal")


def clean_data_for_fcm(data: Any) -> Dict[str, str]:
    """FCM data payloads only carry string values."""
    if not isinstance(data, dict):
        return {}
    cleaned: Dict[str, str] = {}
    for key, value in data.items():
        if isinstance(value, bool):
            cleaned[str(key)] = "true" if value else "false"
        elif value is None:
            cleaned[str(key)] = ""
        elif isinstance(value, (dict, list, tuple)):
            cleaned[str(key)] = json.dumps(value, ensure_ascii=False, default=str)
        else:
            cleaned[str(key)] = str(value)
    return cleaned


def build_message(notification_data: Dict[str, Any]) -> Dict[str, Any]:
    """Platform-specific message body shared by token and topic sends."""
    title = str(notification_data.get("title") or "")
    body = str(notification_data.get("message") or "")
    data = clean_data_for_fcm(notification_data.get("data"))

    message: Dict[str, Any] = {
        "notification": {"title": title, "body": body},
        "android": {
            "priority": android_priority(notification_data.get("priority")),
            "notification": {
                "title": title,
                "body": body,
                "icon": "ic_notification",
                "sound": "default",
                "channel_id": ANDROID_CHANNEL_ID,
            },
        },
        "apns": {
            "payload": {
                "aps": {
                    "alert": {"title": title, "body": body},
                    "sound": "default",
                    "badge": 1,
                    "category": ANDROID_CHANNEL_ID,
                }
            }
        },
        "webpush": {
            "notification": {
                "title": title,
                "body": body,
                "icon": "/images/notification-icon.png",
                "badge": "/images/badge-icon.png",
                "data": data,
            }
        },
    }
    if data:
        message["data"] = data
    return message


class FcmNotificationService:
    def __init__(self, config: Optional[FcmConfig] = None):
        self.config = config or FcmConfig.from_environment()
        self._credentials: Optional[service_account.Credentials] = None
        # jobs send from worker threads; one refresh at a time
        self._credentials_lock = threading.Lock()

    def _service_account(self) -> service_account.Credentials:
        if self._credentials is None:
            try:
                self._credentials = service_account.Credentials.from_service_account_file(
                    self.config.credentials_file, scopes=[FCM_SCOPE]
                )
            except (OSError, ValueError) as exc:
                raise FcmError(f"Cannot load FCM service account: {exc}") from exc
        return self._credentials

    def _access_token(self) -> str:
        if not self.config.credentials_file:
            return self.config.access_token or ""
        with self._credentials_lock:
            credentials = self._service_account()
            if not credentials.valid:
                try:
                    credentials.refresh(google_requests.Request())
                except GoogleAuthError as exc:
                    raise FcmError(f"Cannot refresh FCM access token: {exc}") from exc
                logger.info("fcm_access_token_refreshed: expiry=%s", credentials.expiry)
            return credentials.token

    def _project_id(self) -> str:
        if self.config.project_id:
            return self.config.project_id
        return str(getattr(self._service_account(), "project_id", "") or "")

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self._access_token()}",
            "Content-Type": "application/json",
        }

    def _send(self, message: Dict[str, Any]) -> str:
        if not self.config.is_configured():
            raise FcmError("; ".join(self.config.validate()))
        url = FCM_SEND_URL.format(project_id=self._project_id())
        try:
            response = requests.post(
                url,
                json={"message": message},
                headers=self._headers(),
                timeout=self.config.timeout_seconds,
            )
        except requests.RequestException as exc:
            raise FcmError(str(exc)) from exc
        if not response.ok:
            raise FcmError(self._error_text(response))
        try:
            return str(response.json().get("name", ""))
        except ValueError:
            return ""

    @staticmethod
    def _error_text(response: requests.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return f"HTTP {response.status_code}"
        error = body.get("error") if isinstance(body, dict) else None
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        return f"HTTP {response.status_code}"

    def send_notification(
        self,
        notification_data: Dict[str, Any],
        fcm_tokens: Optional[Sequence[str]] = None,
    ) -> Dict[str, Any]:
        tokens = [token for token in (fcm_tokens or []) if token]
        if not tokens:
            return self.send_to_topic(notification_data)

        message = build_message(notification_data)
        results = []
        success_count = 0
        failure_count = 0
        for token in tokens:
            try:
                message_id = self._send({**message, "token": token})
            except FcmError as exc:
                logger.error("fcm_token_send_failed: token=%s... error=%s", token[:12], exc)
                results.append({"success": False, "error": str(exc), "token": token})
                failure_count += 1
                continue
            results.append({"success": True, "message_id": message_id, "token": token})
            success_count += 1

        logger.info("fcm_notification_sent: total=%d success=%d failed=%d", len(tokens), success_count, failure_count)
        return {
            "success": success_count > 0,
            "data": {
                "total_sent": success_count,
                "total_failed": failure_count,
                "results": results,
            },
            "status_code": 200,
        }

    def send_to_topic(self, notification_data: Dict[str, Any], topic: str = BROADCAST_TOPIC) -> Dict[str, Any]:
        try:
            message_id = self._send({**build_message(notification_data), "topic": topic})
        except FcmError as exc:
            logger.error("fcm_topic_send_failed: topic=%s error=%s", topic, exc)
            return {"success": False, "error": str(exc), "status_code": 500}
        logger.info("fcm_topic_sent: topic=%s message_id=%s", topic, message_id)
        return {
            "success": True,
            "data": {"message_id": message_id, "topic": topic},
            "status_code": 200,
        }

    def test_connection(self) -> Dict[str, Any]:
        errors = self.config.validate()
        if errors:
            return {"success": False, "error": "; ".join(errors), "status_code": 500}
        try:
            self._access_token()
            project_id = self._project_id()
        except FcmError as exc:
            logger.error("fcm_connection_test_failed: error=%s", exc)
            return {"success": False, "error": str(exc), "status_code": 500}
        build_message({"title": "Test", "message": "Test message", "type": "general", "priority": "normal"})
        return {
            "success": True,
            "message": "Firebase credentials loaded and message building works",
            "project_id": project_id,
            "status_code": 200,
        }

    def _topic_membership(self, action: str, tokens: Sequence[str], topic: str) -> Dict[str, Any]:
        try:
            if not self.config.is_configured():
                raise FcmError("; ".join(self.config.validate()))
            response = requests.post(
                IID_BATCH_URL.format(action=action),
                json={"to": f"/topics/{topic}", "registration_tokens": list(tokens)},
                headers={**self._headers(), "access_token_auth": "true"},
                timeout=self.config.timeout_seconds,
            )
            if not response.ok:
                raise FcmError(self._error_text(response))
            data = response.json()
        except (FcmError, requests.RequestException, ValueError) as exc:
            logger.error("fcm_topic_%s_failed: topic=%s tokens=%d error=%s", action, topic, len(tokens), exc)
            return {"success": False, "error": str(exc), "status_code": 500}
        return {"success": True, "data": data, "status_code": 200}

    def subscribe_to_topic(self, tokens: Sequence[str], topic: str) -> Dict[str, Any]:
        return self._topic_membership("batchAdd", tokens, topic)

    def unsubscribe_from_topic(self, tokens: Sequence[str], topic: str) -> Dict[str, Any]:
        return self._topic_membership("batchRemove", tokens, topic)


_fcm_service: Optional[FcmNotificationService] = None


def get_fcm_service() -> FcmNotificationService:
    global _fcm_service
    if _fcm_service is None:
        _fcm_service = FcmNotificationService()
    return _fcm_service


def reset_fcm_service_for_tests() -> None:
    global _fcm_service
    _fcm_service = None
