"""Match CV language mentions against the /languages reference dataset."""

from typing import Any, Awaitable, Callable, Dict, List, Optional

from pydantic import ValidationError

from cv_pipeline.language_code import get_language_code_from_ai
from schemas.language import ExtractedLanguage, LanguageMatch
from services import reference_api
from services.http_client import ApiClient
from utils.errors import ApiError, NoLanguagesError
from utils.logger import get_logger

logger = get_logger(__name__)

NO_LANGUAGES_IN_CV = (
    "Languages section is required to generate your profile. "
    "Please ensure your CV includes the languages you speak."
)
NO_LANGUAGES_MATCHED = (
    "No languages could be matched with our database. "
    "Please ensure your CV includes common languages."
)

CodeResolver = Callable[[str], Awaitable[str]]


def parse_extracted_languages(raw: Optional[List[Any]]) -> List[ExtractedLanguage]:
    """Accept dicts or plain names from the skills analysis; malformed entries are dropped."""
    result: List[ExtractedLanguage] = []
    if not isinstance(raw, list):
        return result
    for item in raw:
        if isinstance(item, str):
            result.append(ExtractedLanguage(language=item))
        elif isinstance(item, dict):
            try:
                result.append(ExtractedLanguage.model_validate(item))
            except ValidationError as e:
                logger.warning("Skipping malformed language entry %s: %s", item, e)
    return result


async def match_languages(
    client: ApiClient,
    extracted: List[ExtractedLanguage],
    resolve_code: CodeResolver = get_language_code_from_ai,
) -> List[LanguageMatch]:
    """
    Look up each extracted language by ISO code. Unmatched entries are skipped.
    Raises NoLanguagesError when there is nothing to match or nothing matched.
    """
    if not extracted:
        raise NoLanguagesError(NO_LANGUAGES_IN_CV)

    matched: List[LanguageMatch] = []
    seen_codes = set()
    for lang in extracted:
        code = (lang.iso639_1 or "").strip().lower()
        if not code and lang.language:
            code = await resolve_code(lang.language)
        if not code:
            logger.warning("No ISO code for language %s; skipping", lang.language)
            continue
        if code in seen_codes:
            continue
        try:
            db_language: Dict[str, Any] = await reference_api.get_language_by_code(client, code)
        except ApiError as e:
            logger.warning("Could not match language code %s for %s: %s", code, lang.language, e)
            continue
        seen_codes.add(code)
        matched.append(LanguageMatch(language=db_language, proficiency=lang.proficiency))
        logger.info("Matched language: %s (%s) -> %s", lang.language, code, db_language.get("name"))

    if not matched:
        raise NoLanguagesError(NO_LANGUAGES_MATCHED)
    return matched
