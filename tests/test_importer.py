"""Tests for the CV import dialog: upload validation, the analysis run and the profile payload."""

import pytest

from cv_pipeline.importer import (
    CVImportDialog,
    PARSE_FAILED_MESSAGE,
    ImportState,
    build_profile_payload,
    merge_chunk_results,
    phase_label,
)
from cv_pipeline.language_matcher import NO_LANGUAGES_IN_CV, NO_LANGUAGES_MATCHED
from schemas.language import LanguageMatch
from services.profile_store import ProfileStore
from utils import retry as retry_module
from utils.errors import (
    AuthenticationExpiredError,
    InvalidDateError,
    NoLanguagesError,
    ProfileWizardError,
    RetryExhaustedError,
)

CV_TEXT = b"Jane Doe\njane@example.com\n\nCustomer support lead. Fluent in English and French."


async def no_code(language):
    return ""


@pytest.fixture
def analysis_backend(backend):
    """Backend answering every analysis step for a valid CV."""
    backend.on("POST", "/cv/extract-basic-info", {
        "name": "Jane Doe",
        "email": "",
        "country": "FR",
        "phone": "+33 1 23 45 67 89",
        "yearsOfExperience": "6",
        "currentRole": "Customer Support Lead",
    })
    backend.on("POST", "/cv/analyze-experience", {
        "roles": [
            {
                "title": "Support Lead",
                "company": "Acme",
                "startDate": "Jan 2021",
                "endDate": "Present",
                "responsibilities": ["Team of 8"],
            },
            {"title": "Agent", "company": "CallCo", "startDate": "2018-03", "endDate": "12/2020"},
        ],
        "keyAreas": ["Escalations"],
        "notableCompanies": ["Acme"],
        "technicalSkills": ["Zendesk"],
        "softSkills": ["Empathy"],
    })
    backend.on("POST", "/cv/analyze-skills", {
        "technical": ["Zendesk", "Salesforce"],
        "soft": ["Empathy", "Patience"],
        "languages": [
            {"language": "English", "iso639_1": "en", "proficiency": "C2"},
            {"language": "French", "iso639_1": "fr", "proficiency": "Native"},
        ],
    })
    backend.on("GET", "/languages/en", {"data": {"_id": "lang-en", "code": "en", "name": "English"}})
    backend.on("GET", "/languages/fr", {"data": {"_id": "lang-fr", "code": "fr", "name": "French"}})
    backend.on("POST", "/cv/analyze-achievements", {"items": ["Cut handle time by 20%"]})
    backend.on("POST", "/cv/analyze-availability", {"schedule": ["Weekdays"], "timeZone": "Europe/Paris"})
    backend.on("POST", "/cv/generate-summary", {"summary": "Seasoned support lead."})
    backend.on("POST", "/profiles", lambda request: {"_id": "profile-1", **backend.json_of(request)})
    return backend


@pytest.fixture
def imported():
    return []


@pytest.fixture
def dialog(client, storage, cookies, imported):
    store = ProfileStore(client, storage, cookies)
    return CVImportDialog(client, store, on_import=imported.append, resolve_code=no_code)


class TestUpload:
    def test_txt_upload_extracts_text(self, dialog):
        text = dialog.handle_file_upload(CV_TEXT, "cv.txt")

        assert text.startswith("Jane Doe")
        assert dialog.state == ImportState.TEXT_EXTRACTED
        assert dialog.upload_success is True
        assert dialog.current_step == 2
        assert dialog.show_guidance is False
        assert dialog.progress == 0
        assert dialog.error == ""

    def test_file_too_large_is_rejected(self, dialog, backend):
        assert dialog.handle_file_upload(b"x" * (5 * 1024 * 1024 + 1), "cv.pdf") is None

        assert dialog.error == "File size must be less than 5MB"
        assert dialog.state == ImportState.ERROR
        assert backend.requests == []

    def test_unsupported_type_is_rejected(self, dialog):
        dialog.handle_file_upload(b"\x89PNG", "photo.png")
        assert dialog.state == ImportState.ERROR
        assert "Unsupported file type" in dialog.error

    def test_empty_file(self, dialog):
        dialog.handle_file_upload(b"   \n  ", "cv.txt")
        assert dialog.error == "Failed to read file: No text could be extracted from the file"
        assert dialog.text == ""

    def test_open_and_close(self, dialog):
        closed = []
        dialog._on_close = lambda: closed.append(True)
        dialog.close()
        assert dialog.is_open is False
        assert closed == [True]
        dialog.open()
        assert dialog.state == ImportState.IDLE


class TestParseProfile:
    async def test_happy_path_creates_profile(self, dialog, analysis_backend, imported):
        dialog.handle_file_upload(CV_TEXT, "cv.txt")

        created = await dialog.parse_profile()

        assert created["_id"] == "profile-1"
        assert dialog.state == ImportState.CLOSED
        assert dialog.progress == 100
        assert [s.text for s in dialog.analysis_steps][0] == "Starting CV analysis..."
        assert dialog.analysis_steps[-1].text == "Analysis complete!"
        assert imported[0]["generatedSummary"] == "Seasoned support lead."

        (request,) = analysis_backend.calls("POST", "/profiles")
        body = analysis_backend.json_of(request)
        assert body["personalInfo"]["name"] == "Jane Doe"
        assert body["personalInfo"]["email"] == "jane@example.com"
        assert body["personalInfo"]["country"] == "FR"
        assert body["personalInfo"]["languages"] == [
            {"language": {"_id": "lang-en", "code": "en", "name": "English"}, "proficiency": "C2"},
            {"language": {"_id": "lang-fr", "code": "fr", "name": "French"}, "proficiency": "Native"},
        ]
        assert body["professionalSummary"]["yearsOfExperience"] == 6
        assert body["professionalSummary"]["profileDescription"] == "Seasoned support lead."
        assert body["skills"]["technical"] == ["Zendesk", "Salesforce"]
        assert body["skills"]["soft"] == ["Empathy", "Patience"]
        assert body["achievements"] == ["Cut handle time by 20%"]
        assert body["availability"]["timeZone"] == "Europe/Paris"
        assert body["experience"][0]["startDate"] == "2021-01-01"
        assert body["experience"][0]["endDate"] == "present"
        assert body["experience"][1]["endDate"] == "2020-12-01"

    async def test_zero_languages_aborts_before_creation(self, dialog, analysis_backend):
        analysis_backend.on("POST", "/cv/analyze-skills", {"technical": ["Zendesk"], "languages": []})

        with pytest.raises(NoLanguagesError) as exc_info:
            await dialog.parse_profile(CV_TEXT.decode())

        assert exc_info.value.message == NO_LANGUAGES_IN_CV
        assert analysis_backend.calls("POST", "/profiles") == []
        assert analysis_backend.calls("POST", "/cv/generate-summary") == []
        assert dialog.state == ImportState.ERROR
        assert dialog.error == NO_LANGUAGES_IN_CV
        assert dialog.analysis_steps[-1].error is True
        assert dialog.loading is False

    async def test_unmatched_languages_abort(self, dialog, analysis_backend):
        analysis_backend.on("POST", "/cv/analyze-skills", {"languages": [{"language": "Klingon", "iso639_1": "tl"}]})

        with pytest.raises(NoLanguagesError, match="No languages could be matched"):
            await dialog.parse_profile(CV_TEXT.decode())

        assert dialog.error == NO_LANGUAGES_MATCHED
        assert analysis_backend.calls("POST", "/profiles") == []

    async def test_summary_retries_then_fails(self, dialog, analysis_backend, monkeypatch):
        async def no_sleep(seconds):
            return None

        monkeypatch.setattr(retry_module.asyncio, "sleep", no_sleep)
        analysis_backend.on("POST", "/cv/generate-summary", {})

        with pytest.raises(RetryExhaustedError):
            await dialog.parse_profile(CV_TEXT.decode())

        assert len(analysis_backend.calls("POST", "/cv/generate-summary")) == 3
        assert analysis_backend.calls("POST", "/profiles") == []
        assert dialog.state == ImportState.ERROR

    async def test_expired_session_is_not_retried(self, dialog, analysis_backend, monkeypatch):
        sleeps = []

        async def record_sleep(seconds):
            sleeps.append(seconds)

        monkeypatch.setattr(retry_module.asyncio, "sleep", record_sleep)
        analysis_backend.on("POST", "/cv/generate-summary", {"message": "Unauthorized"}, status=401)

        with pytest.raises(AuthenticationExpiredError):
            await dialog.parse_profile(CV_TEXT.decode())

        assert len(analysis_backend.calls("POST", "/cv/generate-summary")) == 1
        assert sleeps == []
        assert analysis_backend.calls("POST", "/profiles") == []
        assert dialog.state == ImportState.ERROR

    @pytest.mark.parametrize(
        "languages",
        [
            [{"language": "English", "iso639_1": "en", "proficiency": None}],
            [{"language": "English", "iso639_1": None, "proficiency": "C1"}, {"language": "French", "iso639_1": "fr"}],
            [{"language": None, "iso639_1": None, "proficiency": None}, {"language": "English", "iso639_1": "en"}],
            [{"language": ["not", "a", "name"]}, {"language": "English", "iso639_1": "en"}],
        ],
    )
    async def test_incomplete_language_entries_still_import(self, dialog, analysis_backend, languages):
        analysis_backend.on("POST", "/cv/analyze-skills", {"technical": ["Zendesk"], "languages": languages})

        created = await dialog.parse_profile(CV_TEXT.decode())

        assert created["_id"] == "profile-1"
        assert dialog.state == ImportState.CLOSED
        body = analysis_backend.json_of(analysis_backend.calls("POST", "/profiles")[0])
        assert body["personalInfo"]["languages"]
        assert all(isinstance(entry["proficiency"], str) for entry in body["personalInfo"]["languages"])

    async def test_unexpected_failure_ends_in_error_state(self, dialog, analysis_backend):
        def crash(request):
            raise RuntimeError("connection reset by peer")

        analysis_backend.on("POST", "/cv/analyze-achievements", crash)

        with pytest.raises(ProfileWizardError) as exc_info:
            await dialog.parse_profile(CV_TEXT.decode())

        assert exc_info.value.message == PARSE_FAILED_MESSAGE
        assert isinstance(exc_info.value.__cause__, RuntimeError)
        assert dialog.state == ImportState.ERROR
        assert dialog.error == PARSE_FAILED_MESSAGE
        assert dialog.analysis_steps[-1].error is True
        assert dialog.loading is False
        assert analysis_backend.calls("POST", "/profiles") == []

    async def test_blank_content(self, dialog, backend):
        with pytest.raises(Exception, match="Please provide some content"):
            await dialog.parse_profile("   ")
        assert backend.requests == []

    async def test_retry_after_failure_rebuilds_steps(self, dialog, analysis_backend):
        dialog.handle_file_upload(CV_TEXT, "cv.txt")
        analysis_backend.on("POST", "/cv/analyze-skills", {"languages": []})
        with pytest.raises(NoLanguagesError):
            await dialog.parse_profile()

        analysis_backend.on("POST", "/cv/analyze-skills", {"languages": ["English"]})
        dialog._resolve_code = lambda language: _code("en")
        created = await dialog.retry()

        assert created["_id"] == "profile-1"
        assert not any(step.error for step in dialog.analysis_steps)

    async def test_long_cv_is_analyzed_per_chunk(self, client, storage, cookies, analysis_backend):
        dialog = CVImportDialog(client, ProfileStore(client, storage, cookies), resolve_code=no_code, chunk_max_length=40)
        text = "Jane Doe worked at Acme for years.\n\nShe speaks English and French fluently."

        await dialog.parse_profile(text)

        assert len(analysis_backend.calls("POST", "/cv/analyze-experience")) == 2
        body = analysis_backend.json_of(analysis_backend.calls("POST", "/profiles")[0])
        # merged per-chunk results keep one copy of each role
        assert len(body["experience"]) == 2


async def _code(value):
    return value


class TestPayload:
    def test_invalid_end_date_raises(self):
        with pytest.raises(InvalidDateError, match="Invalid end date: someday"):
            build_profile_payload(
                {},
                {"roles": [{"title": "Agent", "startDate": "2020", "endDate": "someday"}]},
                {},
                [],
            )

    def test_missing_dates_and_fallback_country(self):
        payload = build_profile_payload(
            {"name": "Jane"},
            {"roles": [{"title": "Agent"}]},
            {},
            [LanguageMatch(language="lang-en", proficiency="B2")],
            fallback_country="MA",
        )
        assert payload["experience"][0]["startDate"] is None
        assert payload["experience"][0]["endDate"] is None
        assert payload["personalInfo"]["country"] == "MA"
        assert payload["personalInfo"]["languages"] == [{"language": "lang-en", "proficiency": "B2"}]

    def test_merge_chunk_results(self):
        merged = merge_chunk_results([
            {"name": "", "skills": ["a", "b"]},
            {"name": "Jane", "skills": ["b", "c"]},
        ])
        assert merged == {"name": "Jane", "skills": ["a", "b", "c"]}


@pytest.mark.parametrize(
    "progress, label",
    [(0, "Preparing..."), (24, "Preparing..."), (25, "Analyzing CV..."), (60, "Extracting information..."), (90, "Generating summary...")],
)
def test_phase_label(progress, label):
    assert phase_label(progress) == label
