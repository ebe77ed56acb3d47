"""
CV import dialog: file upload, text extraction, multi-step remote analysis, profile creation.

Each analysis step is one sequential remote call. Progress only moves forward during a
run and every run rebuilds the step log. Failures leave the dialog open in the ERROR state
with a single user-facing message; parse_profile can simply be called again.
"""

from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional

from pydantic import ValidationError

from config import CHUNK_MAX_LENGTH
from cv_pipeline.language_code import get_language_code_from_ai
from cv_pipeline.language_matcher import (
    NO_LANGUAGES_IN_CV,
    CodeResolver,
    match_languages,
    parse_extracted_languages,
)
from cv_pipeline.text_extractor import extract_text_from_file, validate_upload
from schemas.analysis import AnalysisStep
from schemas.language import LanguageMatch
from schemas.profile import Profile
from services import profile_api
from services.http_client import ApiClient
from services.location_api import UserLocationService
from services.profile_store import ProfileStore
from utils.date_parser import format_role_date, parse_end_date, parse_role_date
from utils.errors import (
    AuthenticationExpiredError,
    ExtractionEmptyError,
    FileTooLargeError,
    NoLanguagesError,
    ProfileWizardError,
    UnsupportedFileTypeError,
)
from utils.logger import get_logger
from utils.retry import retry_operation
from utils.text_processing import chunk_text, extract_basic_info

logger = get_logger(__name__)

AnalyzeCall = Callable[[ApiClient, str], Awaitable[Dict[str, Any]]]

PARSE_FAILED_MESSAGE = "Failed to parse profile. Please try again or use a different file."


class ImportState(str, Enum):
    IDLE = "idle"
    FILE_SELECTED = "file-selected"
    TEXT_EXTRACTED = "text-extracted"
    ANALYZING = "analyzing"
    PROFILE_CREATED = "profile-created"
    CLOSED = "closed"
    ERROR = "error"


class AnalysisPhase(str, Enum):
    BASIC_INFO = "basic-info"
    EXPERIENCE = "experience"
    SKILLS_LANGUAGES = "skills-languages"
    ACHIEVEMENTS = "achievements"
    AVAILABILITY = "availability"
    SUMMARY = "summary-generation"


# Wizard guidance shown before the first upload
WIZARD_STEPS: List[Dict[str, str]] = [
    {
        "title": "Choose Your CV Format",
        "description": "We support PDF, DOC, DOCX, and TXT files. Make sure your CV is up-to-date and includes your key achievements.",
    },
    {
        "title": "Review Content",
        "description": "We'll extract the important information from your CV. You can review and edit before proceeding.",
    },
    {
        "title": "AI Enhancement",
        "description": "Our AI will analyze your CV to create a compelling professional summary and highlight your key skills.",
    },
]


def phase_label(progress: int) -> str:
    """Coarse label for the progress bar."""
    if progress < 25:
        return "Preparing..."
    if progress < 50:
        return "Analyzing CV..."
    if progress < 75:
        return "Extracting information..."
    return "Generating summary..."


def merge_chunk_results(results: List[Dict[str, Any]]) -> Dict[str, Any]:
    """Merge per-chunk analysis results: lists concatenate without duplicates, first non-empty scalar wins."""
    merged: Dict[str, Any] = {}
    for result in results:
        for key, value in (result or {}).items():
            if isinstance(value, list):
                bucket = merged.setdefault(key, [])
                if not isinstance(bucket, list):
                    continue
                for item in value:
                    if item not in bucket:
                        bucket.append(item)
            elif merged.get(key) in (None, "", 0, [], {}):
                merged[key] = value
    return merged


def _as_list(value: Any) -> List[Any]:
    return list(value) if isinstance(value, list) else []


def _dedupe(*lists: List[Any]) -> List[Any]:
    out: List[Any] = []
    for items in lists:
        for item in items:
            if item not in out:
                out.append(item)
    return out


def _years(value: Any) -> int:
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return 0


def _experience_entry(role: Dict[str, Any]) -> Dict[str, Any]:
    end_raw = role.get("endDate")
    end_date = format_role_date(parse_end_date(end_raw)) if end_raw not in (None, "") else None
    return {
        "title": role.get("title") or "",
        "company": role.get("company") or "",
        "startDate": format_role_date(parse_role_date(role.get("startDate"))),
        "endDate": end_date,
        "responsibilities": _as_list(role.get("responsibilities")),
        "achievements": _as_list(role.get("achievements")),
    }


def build_profile_payload(
    basic_info: Dict[str, Any],
    experience: Dict[str, Any],
    skills: Dict[str, Any],
    languages: List[LanguageMatch],
    achievements: Optional[Dict[str, Any]] = None,
    availability: Optional[Dict[str, Any]] = None,
    fallback_country: Any = "",
) -> Dict[str, Any]:
    """Combine the analysis results into the profile body sent to POST /profiles."""
    achievements = achievements or {}
    availability = availability or {}
    payload = {
        "personalInfo": {
            "name": basic_info.get("name") or "",
            "country": basic_info.get("country") or fallback_country or "",
            "email": basic_info.get("email") or "",
            "phone": basic_info.get("phone") or "",
            "languages": [m.to_api() for m in languages],
        },
        "professionalSummary": {
            "yearsOfExperience": _years(basic_info.get("yearsOfExperience")),
            "currentRole": basic_info.get("currentRole") or "",
            "industries": [],
            "activities": [],
            "keyExpertise": _as_list(experience.get("keyAreas")),
            "notableCompanies": _as_list(experience.get("notableCompanies")),
        },
        "availability": {
            "schedule": _as_list(availability.get("schedule")),
            "timeZone": availability.get("timeZone"),
            "flexibility": _as_list(availability.get("flexibility")),
        },
        "skills": {
            "technical": _dedupe(_as_list(experience.get("technicalSkills")), _as_list(skills.get("technical"))),
            "professional": _dedupe(_as_list(experience.get("professionalSkills")), _as_list(skills.get("professional"))),
            "soft": _dedupe(_as_list(experience.get("softSkills")), _as_list(skills.get("soft"))),
        },
        "achievements": _as_list(achievements.get("items") or achievements.get("achievements")),
        "experience": [_experience_entry(r) for r in _as_list(experience.get("roles")) if isinstance(r, dict)],
    }
    try:
        return Profile.model_validate(payload).to_api()
    except ValidationError as e:
        logger.error("Combined profile failed validation: %s", e)
        raise ProfileWizardError(PARSE_FAILED_MESSAGE) from e


class CVImportDialog:
    """State of one import dialog. The UI renders these attributes; nothing here touches Streamlit."""

    def __init__(
        self,
        client: ApiClient,
        profile_store: ProfileStore,
        on_import: Optional[Callable[[Dict[str, Any]], None]] = None,
        on_close: Optional[Callable[[], None]] = None,
        location_service: Optional[UserLocationService] = None,
        resolve_code: CodeResolver = get_language_code_from_ai,
        chunk_max_length: int = CHUNK_MAX_LENGTH,
    ) -> None:
        self._client = client
        self._profile_store = profile_store
        self._on_import = on_import
        self._on_close = on_close
        self._location_service = location_service
        self._resolve_code = resolve_code
        self._chunk_max_length = chunk_max_length

        self.state = ImportState.IDLE
        self.phase: Optional[AnalysisPhase] = None
        self.text = ""
        self.filename = ""
        self.loading = False
        self.error = ""
        self.progress = 0
        self.show_guidance = True
        self.current_step = 1
        self.upload_success = False
        self.analysis_steps: List[AnalysisStep] = []

    @property
    def is_open(self) -> bool:
        return self.state != ImportState.CLOSED

    @property
    def progress_label(self) -> str:
        return phase_label(self.progress)

    def open(self) -> None:
        if self.state == ImportState.CLOSED:
            self.state = ImportState.TEXT_EXTRACTED if self.text else ImportState.IDLE

    def close(self) -> None:
        self.state = ImportState.CLOSED
        if self._on_close:
            self._on_close()

    def add_analysis_step(self, text: str, error: bool = False) -> None:
        self.analysis_steps.append(AnalysisStep(text=text, error=error))

    def _set_progress(self, value: int) -> None:
        self.progress = max(self.progress, value)

    def _fail(self, message: str) -> None:
        self.error = message
        self.state = ImportState.ERROR

    # ----- upload -----

    def handle_file_upload(self, file_bytes: bytes, filename: str) -> Optional[str]:
        """Validate and extract text. Errors are shown in the dialog, not raised."""
        self.state = ImportState.FILE_SELECTED
        self.filename = filename
        try:
            validate_upload(len(file_bytes), filename)
        except (FileTooLargeError, UnsupportedFileTypeError) as e:
            logger.warning("Upload rejected: %s", e.message)
            self._fail(e.message)
            return None

        self.loading = True
        self.progress = 25
        self.show_guidance = False
        try:
            extracted = extract_text_from_file(file_bytes, filename)
            if not extracted or not extracted.strip():
                raise ExtractionEmptyError(filename)
            self.text = extracted
            self.error = ""
            self.progress = 100
            self.upload_success = True
            self.current_step = 2
            self.state = ImportState.TEXT_EXTRACTED
            logger.info("Extracted %s characters from %s", len(extracted), filename)
            return extracted
        except ProfileWizardError as e:
            logger.error("File upload error: %s", e.message)
            self._fail(f"Failed to read file: {e.message}")
            return None
        finally:
            self.loading = False
            self.progress = 0

    # ----- analysis -----

    async def _analyze(self, call: AnalyzeCall, content: str, chunks: List[str]) -> Dict[str, Any]:
        if len(chunks) <= 1:
            return await call(self._client, content)
        results = []
        for chunk in chunks:
            results.append(await call(self._client, chunk))
        return merge_chunk_results(results)

    async def _fallback_country(self) -> Any:
        if self._location_service is None:
            return ""
        await self._location_service.get_user_location()
        return self._location_service.country_code or ""

    async def parse_profile(self, content: Optional[str] = None) -> Dict[str, Any]:
        """
        Run the full analysis on `content` (default: the extracted text) and create the profile.
        Raises the ProfileWizardError that stopped the run after recording it in the dialog.
        """
        content = self.text if content is None else content
        self.loading = True
        self.error = ""
        self.progress = 0
        self.current_step = 3
        self.analysis_steps = []
        self.state = ImportState.ANALYZING

        try:
            if not content or not content.strip():
                raise ProfileWizardError("Please provide some content to process")

            self.add_analysis_step("Starting CV analysis...")
            chunks = chunk_text(content, self._chunk_max_length)

            self.phase = AnalysisPhase.BASIC_INFO
            basic_info = await self._analyze(profile_api.extract_basic_info, content, chunks)
            local = extract_basic_info(content)
            for key in ("name", "email"):
                if not basic_info.get(key) and local[key]:
                    basic_info[key] = local[key]
            self.add_analysis_step("Basic information extracted")
            self._set_progress(20)

            self.phase = AnalysisPhase.EXPERIENCE
            experience = await self._analyze(profile_api.analyze_experience, content, chunks)
            self.add_analysis_step("Work experience analyzed")
            self._set_progress(40)

            self.phase = AnalysisPhase.SKILLS_LANGUAGES
            skills = await self._analyze(profile_api.analyze_skills, content, chunks)
            extracted_languages = parse_extracted_languages(skills.get("languages"))
            logger.info("Languages extracted: %s", [lang.language for lang in extracted_languages])
            if not extracted_languages:
                raise NoLanguagesError(NO_LANGUAGES_IN_CV)
            self.add_analysis_step("Matching languages with database...")
            matched = await match_languages(self._client, extracted_languages, self._resolve_code)
            self.add_analysis_step("Skills categorized and languages matched")
            self._set_progress(60)

            self.phase = AnalysisPhase.ACHIEVEMENTS
            achievements = await self._analyze(profile_api.analyze_achievements, content, chunks)
            self.add_analysis_step("Achievements extracted")
            self._set_progress(80)

            self.phase = AnalysisPhase.AVAILABILITY
            availability = await self._analyze(profile_api.analyze_availability, content, chunks)
            self.add_analysis_step("Availability preferences analyzed")
            self._set_progress(85)

            fallback_country = "" if basic_info.get("country") else await self._fallback_country()
            combined = build_profile_payload(
                basic_info,
                experience,
                skills,
                matched,
                achievements=achievements,
                availability=availability,
                fallback_country=fallback_country,
            )

            self.phase = AnalysisPhase.SUMMARY
            self.add_analysis_step("Generating professional summary")
            self._set_progress(90)
            summary = await retry_operation(
                lambda: profile_api.generate_summary(self._client, combined),
                give_up_on=(AuthenticationExpiredError,),
            )
            combined["professionalSummary"]["profileDescription"] = summary

            self.add_analysis_step("Analysis complete!")
            self._set_progress(100)

            created = await self._profile_store.create_profile(combined)
            self.state = ImportState.PROFILE_CREATED
            logger.info("Profile created: %s", (created or {}).get("_id") if isinstance(created, dict) else "")
            if self._on_import:
                self._on_import({**(created or {}), "generatedSummary": summary})
            self.close()
            return created
        except ProfileWizardError as e:
            logger.error("Profile parsing error: %s", e.message)
            self._fail(e.message or PARSE_FAILED_MESSAGE)
            self.add_analysis_step(f"Error: {e.message}", error=True)
            raise
        except Exception as e:
            logger.exception("Unexpected error while parsing profile: %s", e)
            self._fail(PARSE_FAILED_MESSAGE)
            self.add_analysis_step(f"Error: {PARSE_FAILED_MESSAGE}", error=True)
            raise ProfileWizardError(PARSE_FAILED_MESSAGE, details={"cause": repr(e)}) from e
        finally:
            self.loading = False

    async def retry(self) -> Dict[str, Any]:
        """Re-run the analysis on the last extracted text."""
        return await self.parse_profile()
