"""IP geolocation endpoints and a per-user cached location lookup."""

from typing import Any, Callable, Dict, List, Optional

from pydantic import ValidationError

from schemas.location import UserLocation
from services.http_client import ApiClient
from utils.country import create_country_from_location_info
from utils.errors import ApiError
from utils.logger import get_logger

logger = get_logger(__name__)


async def get_user_latest_location(client: ApiClient, user_id: str) -> Dict[str, Any]:
    logger.info("Fetching latest location for user: %s", user_id)
    return await client.get(f"/ip/user/{user_id}/latest")


async def get_user_location_history(client: ApiClient, user_id: str) -> List[Dict[str, Any]]:
    logger.info("Fetching location history for user: %s", user_id)
    return await client.get(f"/ip/user/{user_id}/history")


async def get_ip_location_info(client: ApiClient, ip_address: str) -> Dict[str, Any]:
    logger.info("Fetching location info for IP: %s", ip_address)
    return await client.get(f"/ip/info/{ip_address}")


class UserLocationService:
    """Latest IP location of a user, fetched once per user id and cached."""

    def __init__(
        self,
        client: ApiClient,
        has_token: Callable[[], bool],
        default_user_id: Optional[Callable[[], Optional[str]]] = None,
    ) -> None:
        self._client = client
        self._has_token = has_token
        self._default_user_id = default_user_id
        self.location_data: Optional[UserLocation] = None
        self.fetched_user_id: Optional[str] = None
        self.loading = False
        self.error: Optional[str] = None

    async def get_user_location(self, user_id: Optional[str] = None) -> Optional[UserLocation]:
        """Returns None (and records `error`) instead of raising."""
        user_id = user_id or (self._default_user_id() if self._default_user_id else None)
        if not user_id or not self._has_token():
            logger.error(
                "Cannot fetch location: %s",
                "No user ID provided" if not user_id else "No authentication token available",
            )
            return None
        if self.location_data is not None and self.fetched_user_id == user_id:
            logger.info("Using cached location data for user %s", user_id)
            return self.location_data

        self.loading = True
        self.error = None
        try:
            data = await get_user_latest_location(self._client, user_id)
            location = UserLocation.model_validate(data) if isinstance(data, dict) else None
            if location is not None and location.location_info is not None:
                self.location_data = location
                self.fetched_user_id = user_id
                return location
            logger.info("No location data returned from IP endpoint")
            return None
        except ApiError as e:
            logger.error("Error fetching user location: %s", e)
            self.error = e.message or "Failed to fetch location data"
            return None
        except ValidationError as e:
            logger.error("Unexpected location payload: %s", e)
            self.error = "Failed to fetch location data"
            return None
        finally:
            self.loading = False

    @property
    def location_info(self) -> Optional[Dict[str, Any]]:
        return self.location_data.location_dict() if self.location_data else None

    @property
    def country_code(self) -> Optional[str]:
        return (self.location_info or {}).get("countryCode")

    @property
    def country_object(self) -> Optional[Dict[str, Any]]:
        return create_country_from_location_info(self.location_info)
