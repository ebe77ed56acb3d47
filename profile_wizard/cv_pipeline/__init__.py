"""CV import pipeline: upload validation, text extraction, remote analysis, language matching."""

from cv_pipeline.importer import CVImportDialog, ImportState, build_profile_payload, phase_label
from cv_pipeline.language_matcher import match_languages
from cv_pipeline.text_extractor import extract_text_from_file, validate_upload

__all__ = [
    "CVImportDialog",
    "ImportState",
    "build_profile_payload",
    "extract_text_from_file",
    "match_languages",
    "phase_label",
    "validate_upload",
]
