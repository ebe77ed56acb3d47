"""Text helpers for CV content: chunking, local regex pre-extraction, lenient JSON parsing of AI answers."""

import json
import re
from typing import Any, Dict, List, Optional

from config import CHUNK_MAX_LENGTH
from utils.logger import get_logger

logger = get_logger(__name__)

_PARAGRAPH_SPLIT = re.compile(r"\n\s*\n")
_SENTENCE_SPLIT = re.compile(r"(?<=[.!?])\s+")

_NAME_PATTERN = re.compile(r"\b[A-Z][a-z]+(?:\s+[A-Z][a-z]+)+\b")
_EMAIL_PATTERN = re.compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}")
_LANGUAGE_PATTERN = re.compile(
    r"\b(Arabic|English|French|Spanish|German|Italian|Portuguese|Russian|Chinese|Japanese|Korean)\b",
    re.IGNORECASE,
)
_CERTIFICATION_PATTERN = re.compile(r"(?:Certified|Certification|Certificate)\s[^.,\n]+")
_SKILLS_PATTERN = re.compile(
    r"(?i:Technical Skills|Skills|Competencies|Expertise):\s*([\s\S]*?)(?:\n\n|\n[A-Z]|$)"
)


def chunk_text(text: str, max_length: int = CHUNK_MAX_LENGTH) -> List[str]:
    """
    Split text into chunks of at most max_length characters.
    Paragraphs are kept whole when they fit; longer ones are split by sentence,
    and sentences that still do not fit are split by word. A single word longer
    than max_length becomes its own chunk. Invalid or empty input returns [].
    """
    if not isinstance(text, str) or not text.strip():
        logger.warning("Invalid text provided to chunk_text")
        return []

    chunks: List[str] = []
    current = ""

    def flush() -> None:
        nonlocal current
        if current.strip():
            chunks.append(current.strip())
        current = ""

    paragraphs = [p.strip() for p in _PARAGRAPH_SPLIT.split(text) if p.strip()]
    for paragraph in paragraphs:
        candidate = f"{current}\n\n{paragraph}" if current else paragraph
        if len(candidate) <= max_length:
            current = candidate
            continue

        flush()
        if len(paragraph) <= max_length:
            current = paragraph
            continue

        for sentence in (s for s in _SENTENCE_SPLIT.split(paragraph) if s.strip()):
            candidate = f"{current} {sentence}" if current else sentence
            if len(candidate) <= max_length:
                current = candidate
                continue

            flush()
            if len(sentence) <= max_length:
                current = sentence
                continue

            for word in sentence.split():
                candidate = f"{current} {word}" if current else word
                if len(candidate) <= max_length:
                    current = candidate
                else:
                    flush()
                    current = word

    flush()
    return chunks


def extract_emails(text: str) -> List[str]:
    """Extract email addresses from text, first occurrence order."""
    if not text:
        return []
    return list(dict.fromkeys(_EMAIL_PATTERN.findall(text)))


def extract_basic_info(text: str) -> Dict[str, Any]:
    """
    Regex-only pre-extraction of name, email, languages, certifications and skills.
    Used to back-fill fields the remote extraction leaves empty.
    """
    result: Dict[str, Any] = {
        "name": "",
        "email": "",
        "languages": [],
        "certifications": [],
        "skills": [],
    }
    if not text or not isinstance(text, str):
        return result

    name = _NAME_PATTERN.search(text)
    if name:
        result["name"] = name.group(0)
    emails = extract_emails(text)
    if emails:
        result["email"] = emails[0]
    result["languages"] = list(dict.fromkeys(m.lower() for m in _LANGUAGE_PATTERN.findall(text)))
    result["certifications"] = [
        c for c in _CERTIFICATION_PATTERN.findall(text) if len(c) < 100
    ]

    skills = _SKILLS_PATTERN.search(text)
    if skills and skills.group(1):
        result["skills"] = [
            s.strip() for s in re.split(r"[,;\n]", skills.group(1)) if 0 < len(s.strip()) < 50
        ]
    return result


def parse_llm_json(text: str) -> Optional[dict]:
    """
    Parse the first {...} block in an AI answer, stripping markdown code fences if present.
    Returns None when there is no JSON object to be found.
    """
    raw = (text or "").strip()
    if raw.startswith("```"):
        raw = re.sub(r"^```(?:json)?\s*", "", raw)
        raw = re.sub(r"\s*```$", "", raw)
    match = re.search(r"\{[\s\S]*\}", raw)
    if not match:
        return None
    try:
        parsed = json.loads(match.group(0))
    except json.JSONDecodeError:
        return None
    return parsed if isinstance(parsed, dict) else None

