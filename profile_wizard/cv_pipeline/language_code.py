"""ISO 639-1 code lookup via LLM for languages the CV analysis could not code."""

import re
from typing import Optional

from openai import AsyncOpenAI

from config import MODEL_NAME, OPENAI_API_KEY
from utils.logger import get_logger

logger = get_logger(__name__)

LANGUAGE_CODE_SYSTEM_PROMPT = """You are a language expert. Given a language name or identifier, return ONLY the corresponding ISO 639-1 two-letter language code.
For example:
- "English" -> "en"
- "français" -> "fr"
- "中文" -> "zh"
- "العربية" -> "ar"
Return ONLY the two-letter code, nothing else."""


async def get_language_code_from_ai(language: str, client: Optional[AsyncOpenAI] = None) -> str:
    """
    Two-letter code for `language`, or "" when the model is unavailable or answers
    anything other than exactly two letters.
    """
    if not language or not language.strip():
        return ""
    if client is None:
        if not OPENAI_API_KEY:
            logger.warning("OPENAI_API_KEY is not set; cannot resolve language code for %s", language)
            return ""
        client = AsyncOpenAI(api_key=OPENAI_API_KEY)
    try:
        response = await client.chat.completions.create(
            model=MODEL_NAME,
            messages=[
                {"role": "system", "content": LANGUAGE_CODE_SYSTEM_PROMPT},
                {"role": "user", "content": language.strip()},
            ],
            temperature=0.1,
            max_tokens=2,
        )
        choice = response.choices[0] if response.choices else None
        if not choice or not choice.message or not choice.message.content:
            return ""
        code = choice.message.content.strip().lower()
        if re.fullmatch(r"[a-z]{2}", code):
            return code
        logger.warning("Invalid language code returned for %s: %s", language, code)
        return ""
    except Exception as e:
        logger.exception("Error getting language code from AI: %s", e)
        return ""
