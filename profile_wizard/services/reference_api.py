"""Reference data: languages, timezones, skills, industries, activities."""

from typing import Any, Dict, List

from services.http_client import ApiClient
from utils.errors import ApiError
from utils.logger import get_logger

logger = get_logger(__name__)


def _data(payload: Any) -> Any:
    """Reference endpoints answer {"data": [...]}."""
    if isinstance(payload, dict) and "data" in payload:
        return payload["data"]
    return payload


async def get_all_languages(client: ApiClient) -> List[Dict[str, Any]]:
    try:
        return _data(await client.get("/languages")) or []
    except ApiError as e:
        logger.error("Error fetching languages: %s", e)
        raise ApiError("Failed to fetch languages", e.status_code, e.payload, "/languages") from e


async def get_language_by_code(client: ApiClient, code: str) -> Dict[str, Any]:
    endpoint = f"/languages/{code}"
    try:
        language = _data(await client.get(endpoint))
    except ApiError as e:
        logger.error("Error fetching language by code %s: %s", code, e)
        raise ApiError(f"Failed to fetch language with code: {code}", e.status_code, e.payload, endpoint) from e
    if not isinstance(language, dict):
        raise ApiError(f"Failed to fetch language with code: {code}", payload=language, url=endpoint)
    return language


def search_languages(languages: List[Dict[str, Any]], search_term: str) -> List[Dict[str, Any]]:
    """Local filter over name, code and native name. A blank term returns everything."""
    if not (search_term or "").strip():
        return languages
    term = search_term.strip().lower()
    return [
        lang for lang in languages
        if term in (lang.get("name") or "").lower()
        or term in (lang.get("code") or "").lower()
        or term in (lang.get("nativeName") or "").lower()
    ]


async def get_timezones(client: ApiClient) -> List[Dict[str, Any]]:
    logger.info("Fetching timezones from API")
    return _data(await client.get("/timezones")) or []


async def get_skills(client: ApiClient, category: str) -> List[Dict[str, Any]]:
    """Skill catalogue for one category (technical, professional, soft)."""
    return _data(await client.get(f"/skills/{category}")) or []


async def get_industries(client: ApiClient) -> List[Dict[str, Any]]:
    return _data(await client.get("/industries")) or []


async def get_activities(client: ApiClient) -> List[Dict[str, Any]]:
    return _data(await client.get("/activities")) or []
