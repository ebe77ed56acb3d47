"""Page routing: pick the import or editor page from the user's profile state."""

from typing import Any, Dict, Optional

import config
from config import EDITOR_ROUTE, IMPORT_ROUTE, LEGACY_ROUTE
from services.auth import AuthSession
from services.http_client import ApiClient
from services.profile_store import ProfileStore
from utils.errors import ProfileWizardError
from utils.logger import get_logger

logger = get_logger(__name__)

KNOWN_ROUTES = (IMPORT_ROUTE, EDITOR_ROUTE)


def resolve_route(path: Optional[str]) -> str:
    """Legacy and unknown paths land on the import page."""
    path = (path or "").rstrip("/") or "/"
    if path == LEGACY_ROUTE:
        return IMPORT_ROUTE
    if path in KNOWN_ROUTES:
        return path
    return IMPORT_ROUTE


class ProfileRouter:
    """
    Initializes the session once, then navigates once based on the fetched profile:
    completed profile -> dashboard, named profile -> editor, anything else -> import.
    """

    def __init__(
        self,
        client: ApiClient,
        auth: AuthSession,
        profile_store: ProfileStore,
        current_path: str = IMPORT_ROUTE,
    ) -> None:
        self._client = client
        self._auth = auth
        self._profile_store = profile_store
        self.current_path = resolve_route(current_path)
        self.is_initializing = True
        self.init_attempted = False
        self.has_navigated = False
        self.profile_data: Optional[Dict[str, Any]] = None
        self.generated_summary = ""
        self.external_url: Optional[str] = None

    def navigate(self, path: str) -> None:
        if self.current_path != path:
            logger.info("Location changed to: %s", path)
        self.current_path = resolve_route(path)

    def _user_id(self) -> Optional[str]:
        if config.is_standalone():
            return config.STANDALONE_USER_ID or None
        return self._auth.cookies.get(config.USER_ID_COOKIE)

    def _route_for(self, profile: Optional[Dict[str, Any]]) -> None:
        if self.has_navigated:
            logger.info("Navigation already happened, skipping route change")
            return
        self.has_navigated = True

        if profile and profile.get("isBasicProfileCompleted"):
            target = config.orchestrator_url()
            logger.info("Profile complete, redirecting to dashboard: %s", target)
            self.external_url = target
            self._auth.navigator.replace(target)
        elif profile and (profile.get("personalInfo") or {}).get("name"):
            logger.info("Profile exists but incomplete, navigating to editor")
            self.navigate(EDITOR_ROUTE)
        else:
            logger.info("New profile, navigating to import page")
            self.navigate(IMPORT_ROUTE)

    async def initialize(self) -> None:
        """Runs at most once per router; later calls return immediately."""
        if self.init_attempted:
            return
        self.init_attempted = True
        try:
            user_id = self._user_id()
            if not user_id:
                logger.error("No user ID found in cookies")
                return
            logger.info("Starting initialization for user: %s", user_id)

            token = await self._auth.bootstrap(self._client, user_id)
            if not token:
                return

            profile = await self._profile_store.get_profile(user_id)
            logger.info("Profile fetched: %s", "Success" if profile else "Not found")
            if profile:
                self.profile_data = profile
            self._route_for(profile)
        except ProfileWizardError as e:
            logger.error("Initialization error: %s", e.message)
        finally:
            self.is_initializing = False

    def handle_profile_data(self, data: Dict[str, Any]) -> None:
        """Profile created or updated: keep it, split off the generated summary, go to the editor."""
        profile = dict(data)
        self.generated_summary = profile.pop("generatedSummary", "") or ""
        self.profile_data = profile
        self.has_navigated = True
        self.navigate(EDITOR_ROUTE)
