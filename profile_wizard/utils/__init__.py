"""Utility exports."""

from .date_parser import parse_end_date, parse_role_date
from .errors import ProfileWizardError
from .logger import get_logger
from .retry import retry_operation
from .text_processing import chunk_text, extract_basic_info, extract_emails, parse_llm_json

__all__ = [
    "get_logger",
    "ProfileWizardError",
    "retry_operation",
    "chunk_text",
    "extract_basic_info",
    "extract_emails",
    "parse_llm_json",
    "parse_role_date",
    "parse_end_date",
]
