"""Business logic services package with public HTTP client helpers."""

from .express_api_client import (
    ExpressApiClient,
    ExpressApiConfig,
    get_express_api_client,
    reset_express_api_client_for_tests,
)
from .fcm_service import (
    FcmConfig,
    FcmNotificationService,
    get_fcm_service,
    reset_fcm_service_for_tests,
)

__all__ = [
    "ExpressApiClient",
    "ExpressApiConfig",
    "get_express_api_client",
    "reset_express_api_client_for_tests",
    "FcmConfig",
    "FcmNotificationService",
    "get_fcm_service",
    "reset_fcm_service_for_tests",
]
