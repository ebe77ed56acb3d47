"""Authentication gate: cookie + stored token, destructive logout, global 401 handling."""

from typing import Callable, Dict, Optional

import httpx

from config import (
    HOST_APP_URL,
    TOKEN_STORAGE_KEY,
    USER_ID_COOKIE,
    USER_ID_COOKIE_MAX_AGE_DAYS,
    WIZARD_HOSTNAME,
)
from services.http_client import ApiClient
from services.session import CookieJar, LocalStorage, Navigator
from utils.logger import get_logger, mask_token

logger = get_logger(__name__)


class AuthSession:
    """
    One per user session. Authenticated iff both the userId cookie and the stored token exist.
    Logout wipes all local storage and every cookie, then hands the browser back to the host app.
    """

    def __init__(
        self,
        storage: LocalStorage,
        cookies: CookieJar,
        navigator: Navigator,
        host_app_url: str = HOST_APP_URL,
        cookie_domain: str = WIZARD_HOSTNAME,
    ) -> None:
        self.storage = storage
        self.cookies = cookies
        self.navigator = navigator
        self.host_app_url = host_app_url
        self.cookie_domain = cookie_domain
        self.is_authenticated = False
        self.user: Optional[Dict[str, str]] = None

        user_id = cookies.get(USER_ID_COOKIE)
        token = storage.get_item(TOKEN_STORAGE_KEY)
        logger.info("Initial auth check: userId=%s token=%s", bool(user_id), bool(token))
        self._set_state(user_id, token)

    def _set_state(self, user_id: Optional[str], token: Optional[str]) -> bool:
        self.is_authenticated = bool(user_id and token)
        self.user = {"userId": user_id, "token": token} if self.is_authenticated else None
        return self.is_authenticated

    def check_auth_status(self) -> bool:
        user_id = self.cookies.get(USER_ID_COOKIE)
        token = self.storage.get_item(TOKEN_STORAGE_KEY)
        is_auth = bool(user_id and token)
        if is_auth != self.is_authenticated:
            logger.info("Auth status changed: userId=%s token=%s", bool(user_id), bool(token))
            self._set_state(user_id, token)
        return is_auth

    def _clear_everything(self) -> None:
        self.storage.clear()
        for name in list(self.cookies.get_all().keys()):
            self.cookies.remove(name, path="/")
            self.cookies.remove(name, path="/", domain=self.cookie_domain)
        self._set_state(None, None)

    def logout(self) -> None:
        """Unconditional: clear storage and cookies, replace history, go to the host application."""
        logger.info("Performing secure logout")
        self._clear_everything()
        self.navigator.replace_state(self.host_app_url)
        self.navigator.replace(self.host_app_url)

    def install_interceptor(self, client: ApiClient) -> Callable[[], None]:
        """Log out on any 401 seen while authenticated. Returns a function that ejects the hook."""

        def on_error_response(response: httpx.Response) -> None:
            if response.status_code == 401 and self.is_authenticated:
                logger.warning("401 error detected, logging out")
                self.logout()

        client.add_response_hook(on_error_response)
        return lambda: client.remove_response_hook(on_error_response)

    def handle_storage_change(self, key: str, new_value: Optional[str]) -> None:
        """Token removed from another session while we are logged in: leave immediately."""
        if key == TOKEN_STORAGE_KEY and not new_value and self.is_authenticated:
            logger.info("Token removed elsewhere, logging out")
            self._set_state(None, None)
            self.navigator.replace(self.host_app_url)

    def sync_storage(self) -> None:
        """Pick up a token another session wrote or removed since the last check."""
        token = self.storage.get_item(TOKEN_STORAGE_KEY)
        known = self.user["token"] if self.user else None
        if token != known:
            self.handle_storage_change(TOKEN_STORAGE_KEY, token)

    async def bootstrap(self, client: ApiClient, user_id: str) -> Optional[str]:
        """
        Exchange the user id for a token, then persist token and userId cookie (7 days).
        Returns the token, or None when the backend does not provide one.
        """
        data = await client.post("/auth/generate-token", json={"userId": user_id})
        token = data.get("token") if isinstance(data, dict) else None
        if not token:
            logger.error("Failed to obtain token for user %s", user_id)
            return None

        self.storage.set_item(TOKEN_STORAGE_KEY, token)
        self.cookies.set(
            USER_ID_COOKIE,
            user_id,
            expires_days=USER_ID_COOKIE_MAX_AGE_DAYS,
            secure=self.host_app_url.startswith("https:"),
            same_site="lax",
        )
        logger.info("Token generated and stored: %s", mask_token(token))
        self.check_auth_status()
        return token

