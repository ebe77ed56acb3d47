"""Validate uploaded CV files and extract their raw text (PDF, DOC/DOCX, TXT). In-memory only."""

import re
import unicodedata
from io import BytesIO
from typing import Optional

from config import ALLOWED_CV_EXTENSIONS, MAX_UPLOAD_BYTES
from utils.errors import FileTooLargeError, UnsupportedFileTypeError
from utils.logger import get_logger

logger = get_logger(__name__)


# NUL, zero-width and no-break characters that PDF and Word exports leave behind
_INVISIBLE = str.maketrans({"\x00": None, "\u200b": None, "\ufeff": None, "\u00a0": " "})


def _normalize_unicode(text: str) -> str:
    return unicodedata.normalize("NFC", text or "").translate(_INVISIBLE)


def _clean_cv_text(text: str) -> str:
    """Remove excessive whitespace and normalize unicode; paragraph breaks are kept."""
    if not text or not text.strip():
        return ""
    t = _normalize_unicode(text)
    t = t.replace("\r\n", "\n").replace("\r", "\n")
    t = re.sub(r"[ \t]+", " ", t)
    t = re.sub(r"\n\s*\n\s*\n", "\n\n", t)
    return t.strip()


def _extension(filename: str) -> str:
    name_lower = (filename or "").lower().strip()
    dot = name_lower.rfind(".")
    return name_lower[dot:] if dot >= 0 else ""


def validate_upload(size: int, filename: str) -> None:
    """Pre-flight checks before any parsing or network call."""
    if size > MAX_UPLOAD_BYTES:
        raise FileTooLargeError(size, MAX_UPLOAD_BYTES)
    if _extension(filename) not in ALLOWED_CV_EXTENSIONS:
        raise UnsupportedFileTypeError(filename, ALLOWED_CV_EXTENSIONS)


def _extract_pdf(bytes_io: BytesIO) -> Optional[str]:
    """Page text via pdfplumber; image-only pages contribute nothing."""
    try:
        import pdfplumber
    except ImportError:
        logger.warning("pdfplumber not installed; install with: pip install pdfplumber")
        return None
    try:
        with pdfplumber.open(bytes_io) as pdf:
            pages = [page.extract_text() or "" for page in pdf.pages]
    except Exception as e:
        logger.exception("PDF extraction failed: %s", e)
        return None
    blank = sum(1 for p in pages if not p.strip())
    if blank:
        logger.info("%s of %s PDF pages had no text layer", blank, len(pages))
    text = "\n\n".join(p for p in pages if p.strip())
    return text or None


def _extract_docx(bytes_io: BytesIO) -> Optional[str]:
    """Extract paragraphs and table cells from DOCX using python-docx."""
    try:
        from docx import Document
    except ImportError:
        logger.warning("python-docx not installed; install with: pip install python-docx")
        return None
    try:
        doc = Document(bytes_io)
    except Exception as e:
        # Legacy binary .doc files land here; python-docx only reads OOXML
        logger.warning("DOC/DOCX could not be opened: %s", e)
        return None
    parts = [p.text for p in doc.paragraphs if p.text.strip()]
    for table in doc.tables:
        for row in table.rows:
            cells = [c.text.strip() for c in row.cells if c.text.strip()]
            if cells:
                parts.append(" | ".join(cells))
    return "\n\n".join(parts) if parts else None


def _extract_txt(file_bytes: bytes) -> Optional[str]:
    for encoding in ("utf-8-sig", "latin-1"):
        try:
            return file_bytes.decode(encoding)
        except UnicodeDecodeError:
            continue
    return None


def extract_text_from_file(file_bytes: bytes, filename: str) -> Optional[str]:
    """
    Extract and clean text from an uploaded CV file.
    File is read from bytes in memory; no disk write.
    Returns cleaned text or None if unsupported type or extraction fails.
    """
    ext = _extension(filename)
    if ext not in ALLOWED_CV_EXTENSIONS:
        logger.warning("Unsupported file type: %s", filename)
        return None

    if ext == ".pdf":
        raw = _extract_pdf(BytesIO(file_bytes))
    elif ext in (".docx", ".doc"):
        raw = _extract_docx(BytesIO(file_bytes))
    else:
        raw = _extract_txt(file_bytes)

    if not raw or not raw.strip():
        return None
    return _clean_cv_text(raw)
