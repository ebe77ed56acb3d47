"""Service exports."""

from .auth import AuthSession
from .http_client import ApiClient, request_key
from .location_api import UserLocationService
from .profile_store import ProfileStore
from .session import CookieJar, LocalStorage, Navigator

__all__ = [
    "ApiClient",
    "AuthSession",
    "CookieJar",
    "LocalStorage",
    "Navigator",
    "ProfileStore",
    "UserLocationService",
    "request_key",
]
