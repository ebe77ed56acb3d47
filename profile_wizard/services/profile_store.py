"""Session-scoped profile cache over the profile API (loading / error state for the UI)."""

from typing import Any, Awaitable, Callable, Dict, Optional

from config import TOKEN_STORAGE_KEY, USER_ID_COOKIE
from services import profile_api
from services.http_client import ApiClient
from services.session import CookieJar, LocalStorage
from utils.errors import ApiError, ProfileWizardError
from utils.logger import get_logger, mask_token

logger = get_logger(__name__)


class ProfileStore:
    """
    Holds the transient copy of the user's profile for this session.
    Reads return None on failure; mutations record `error` and re-raise.
    """

    def __init__(self, client: ApiClient, storage: LocalStorage, cookies: CookieJar) -> None:
        self._client = client
        self._storage = storage
        self._cookies = cookies
        self.profile: Optional[Dict[str, Any]] = None
        self.fetched_user_id: Optional[str] = None
        self.loading = False
        self.error: Optional[str] = None

    def has_token(self) -> bool:
        return bool(self._storage.get_item(TOKEN_STORAGE_KEY))

    def user_id_from_cookie(self) -> Optional[str]:
        return self._cookies.get(USER_ID_COOKIE)

    async def fetch_profile(self, user_id: Optional[str]) -> Optional[Dict[str, Any]]:
        if not user_id or not self.has_token():
            logger.error(
                "Cannot fetch profile: %s",
                "No user ID provided" if not user_id else "No authentication token available",
            )
            return None
        if self.profile and self.fetched_user_id == user_id:
            logger.info("Using cached profile for user %s", user_id)
            return self.profile

        self.loading = True
        try:
            logger.info(
                "Fetching profile for user %s with token: %s",
                user_id,
                mask_token(self._storage.get_item(TOKEN_STORAGE_KEY)),
            )
            data = await profile_api.get_profile(self._client, user_id)
            if data:
                logger.info("Profile data successfully fetched: %s", data.get("_id") if isinstance(data, dict) else "")
                self.profile = data
                self.fetched_user_id = user_id
                self.error = None
            else:
                logger.info("No profile data returned from API")
            return data
        except ApiError as e:
            logger.error("Error fetching profile: %s", e)
            self.error = e.message
            return None
        finally:
            self.loading = False

    async def get_profile(self, user_id: Optional[str] = None) -> Optional[Dict[str, Any]]:
        """Profile of `user_id`, or of the user in the userId cookie."""
        return await self.fetch_profile(user_id or self.user_id_from_cookie())

    async def _mutate(self, call: Callable[[], Awaitable[Any]], keep: bool = True) -> Any:
        self.loading = True
        try:
            result = await call()
            self.profile = result if keep else None
            self.error = None
            return result
        except ProfileWizardError as e:
            self.error = e.message
            raise
        finally:
            self.loading = False

    async def create_profile(self, profile_data: Dict[str, Any]) -> Dict[str, Any]:
        return await self._mutate(lambda: profile_api.create_profile(self._client, profile_data))

    async def update_profile(self, profile_id: str, profile_data: Dict[str, Any]) -> Dict[str, Any]:
        logger.info("Sending profile update for %s", profile_id)
        return await self._mutate(lambda: profile_api.update_profile(self._client, profile_id, profile_data))

    async def update_basic_info(self, profile_id: str, basic_info: Dict[str, Any]) -> Dict[str, Any]:
        return await self._mutate(lambda: profile_api.update_basic_info(self._client, profile_id, basic_info))

    async def update_experience(self, profile_id: str, experience: list) -> Dict[str, Any]:
        return await self._mutate(lambda: profile_api.update_experience(self._client, profile_id, experience))

    async def update_skills(self, profile_id: str, skills: Dict[str, Any]) -> Dict[str, Any]:
        return await self._mutate(lambda: profile_api.update_skills(self._client, profile_id, skills))

    async def update_language_assessment(self, profile_id: str, language: Any, proficiency: str, results: Any) -> Dict[str, Any]:
        return await self._mutate(
            lambda: profile_api.update_language_assessment(self._client, profile_id, language, proficiency, results)
        )

    async def add_assessment(self, profile_id: str, assessment: Dict[str, Any]) -> Dict[str, Any]:
        return await self._mutate(lambda: profile_api.add_assessment(self._client, profile_id, assessment))

    async def add_contact_center_assessment(self, profile_id: str, assessment: Dict[str, Any]) -> Dict[str, Any]:
        return await self._mutate(
            lambda: profile_api.add_contact_center_assessment(self._client, profile_id, assessment)
        )

    async def delete_profile(self) -> None:
        await self._mutate(lambda: profile_api.delete_profile(self._client), keep=False)
