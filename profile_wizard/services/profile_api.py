"""Profile resource and AI extraction endpoints."""

from typing import Any, Dict, List, Optional

from services.http_client import ApiClient
from utils.errors import ApiError
from utils.logger import get_logger
from utils.text_processing import parse_llm_json

logger = get_logger(__name__)

# AI extraction endpoints, in pipeline order
EXTRACT_BASIC_INFO = "/cv/extract-basic-info"
ANALYZE_EXPERIENCE = "/cv/analyze-experience"
ANALYZE_SKILLS = "/cv/analyze-skills"
ANALYZE_ACHIEVEMENTS = "/cv/analyze-achievements"
ANALYZE_AVAILABILITY = "/cv/analyze-availability"
GENERATE_SUMMARY = "/cv/generate-summary"


def _unwrap(data: Any) -> Any:
    """Some endpoints wrap their payload as {"data": ...}."""
    if isinstance(data, dict) and set(data.keys()) <= {"data", "success", "message"} and "data" in data:
        return data["data"]
    return data


# ----- profile CRUD -----

async def get_profile(client: ApiClient, user_id: Optional[str] = None) -> Optional[Dict[str, Any]]:
    """GET /profiles/{user_id}, or /profiles for the token's own profile."""
    endpoint = f"/profiles/{user_id}" if user_id else "/profiles"
    logger.info("Making API request to: %s", endpoint)
    try:
        return await client.get(endpoint)
    except ApiError as e:
        logger.error("Error fetching profile%s: %s", f" for user {user_id}" if user_id else "", e)
        raise


async def create_profile(client: ApiClient, profile_data: Dict[str, Any]) -> Dict[str, Any]:
    return await client.post("/profiles", json=profile_data)


async def update_profile(client: ApiClient, profile_id: str, profile_data: Dict[str, Any]) -> Dict[str, Any]:
    return await client.put(f"/profiles/{profile_id}", json=profile_data)


async def update_basic_info(client: ApiClient, profile_id: str, basic_info: Dict[str, Any]) -> Dict[str, Any]:
    return await client.put(f"/profiles/{profile_id}/basic-info", json=basic_info)


async def update_experience(client: ApiClient, profile_id: str, experience: List[Dict[str, Any]]) -> Dict[str, Any]:
    return await client.put(f"/profiles/{profile_id}/experience", json={"experience": experience})


async def update_skills(client: ApiClient, profile_id: str, skills: Dict[str, Any]) -> Dict[str, Any]:
    return await client.put(f"/profiles/{profile_id}/skills", json={"skills": skills})


async def update_language_assessment(
    client: ApiClient,
    profile_id: str,
    language: Any,
    proficiency: str,
    results: Any,
) -> Dict[str, Any]:
    payload = {"language": language, "proficiency": proficiency, "results": results}
    return await client.post(f"/profiles/{profile_id}/language-assessment", json=payload)


async def add_assessment(client: ApiClient, profile_id: str, assessment: Dict[str, Any]) -> Dict[str, Any]:
    return await client.post(f"/profiles/{profile_id}/assessment", json=assessment)


async def add_contact_center_assessment(client: ApiClient, profile_id: str, assessment: Dict[str, Any]) -> Dict[str, Any]:
    return await client.post(f"/profiles/{profile_id}/contact-center-assessment", json={"assessment": assessment})


async def delete_profile(client: ApiClient) -> Any:
    return await client.delete("/profiles")


async def check_profile_exists(client: ApiClient, user_id: Optional[str] = None) -> bool:
    """True if the backend has a profile; any failure counts as "no profile"."""
    endpoint = f"/profiles/{user_id}/exists" if user_id else "/profiles/exists"
    logger.info("Checking if profile exists: %s", endpoint)
    try:
        data = await client.get(endpoint)
    except ApiError as e:
        logger.error("Error checking profile existence: %s", e)
        return False
    return bool(isinstance(data, dict) and data.get("exists"))


# ----- AI extraction -----

async def _analyze(client: ApiClient, endpoint: str, content: str) -> Dict[str, Any]:
    raw = _unwrap(await client.post(endpoint, json={"content": content}))
    # answer may come back as raw model text, possibly fenced
    data = parse_llm_json(raw) if isinstance(raw, str) else raw
    if not isinstance(data, dict):
        raise ApiError(f"Unexpected response from {endpoint}", payload=raw, url=endpoint)
    return data


async def extract_basic_info(client: ApiClient, content: str) -> Dict[str, Any]:
    """name, country, email, phone, yearsOfExperience, currentRole."""
    return await _analyze(client, EXTRACT_BASIC_INFO, content)


async def analyze_experience(client: ApiClient, content: str) -> Dict[str, Any]:
    """roles, keyAreas, notableCompanies and technical/professional/soft skills."""
    return await _analyze(client, ANALYZE_EXPERIENCE, content)


async def analyze_skills(client: ApiClient, content: str) -> Dict[str, Any]:
    """Skill categories and languages [{language, iso639_1, proficiency}]."""
    return await _analyze(client, ANALYZE_SKILLS, content)


async def analyze_achievements(client: ApiClient, content: str) -> Dict[str, Any]:
    return await _analyze(client, ANALYZE_ACHIEVEMENTS, content)


async def analyze_availability(client: ApiClient, content: str) -> Dict[str, Any]:
    return await _analyze(client, ANALYZE_AVAILABILITY, content)


async def generate_summary(client: ApiClient, profile_data: Dict[str, Any]) -> Optional[str]:
    """Professional summary text for the combined profile; None when the backend returns nothing."""
    data = await client.post(GENERATE_SUMMARY, json=profile_data)
    if isinstance(data, str):
        return data.strip() or None
    if isinstance(data, dict):
        summary = data.get("summary") or data.get("data")
        if isinstance(summary, str) and summary.strip():
            return summary.strip()
    return None
