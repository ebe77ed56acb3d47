"""Configuration loaded from environment variables."""

import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env: try package dir then project root
_base = Path(__file__).resolve().parent
for _env_path in (_base / ".env", _base.parent / ".env"):
    if load_dotenv(_env_path):
        break
load_dotenv()  # also allow process env

# Backend API
API_URL: str = os.getenv("PROFILE_API_URL", "http://localhost:5000/api").rstrip("/")

# "standalone" runs outside the host application with a fixed user id
RUN_MODE: str = os.getenv("RUN_MODE", "in-app")
STANDALONE_USER_ID: str = os.getenv("STANDALONE_USER_ID", "")

# Where users go once their basic profile is complete
REP_ORCHESTRATOR_URL: str = os.getenv("REP_ORCHESTRATOR_URL", "")
REP_ORCHESTRATOR_URL_STANDALONE: str = os.getenv("REP_ORCHESTRATOR_URL_STANDALONE", "")

# Host application we hand back to on logout
HOST_APP_URL: str = os.getenv("HOST_APP_URL", "http://localhost/app1")

# Domain this wizard is served from; logout also clears cookies scoped to it
WIZARD_HOSTNAME: str = os.getenv("PROFILE_WIZARD_HOSTNAME", "localhost")

# Local session state (token storage + cookies)
STATE_DIR: Path = Path(os.getenv("PROFILE_WIZARD_STATE_DIR", "~/.profile_wizard")).expanduser()

# Optional: AI fallback for language codes – never hardcode
OPENAI_API_KEY: str = os.getenv("OPENAI_API_KEY", "")
MODEL_NAME: str = os.getenv("MODEL_NAME", "gpt-4o-mini")

LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

# HTTP settings
HTTP_TIMEOUT_SECONDS: float = 30.0
DEDUP_WINDOW_SECONDS: float = 0.5  # identical GETs inside this window share one call

# Retry settings (exponential backoff: delay * 2**attempt)
RETRY_MAX_ATTEMPTS: int = 3
RETRY_BASE_DELAY_SECONDS: float = 1.0

# CV upload
MAX_UPLOAD_BYTES: int = 5 * 1024 * 1024
ALLOWED_CV_EXTENSIONS: tuple = (".pdf", ".doc", ".docx", ".txt")
CHUNK_MAX_LENGTH: int = 12000

# Session keys
USER_ID_COOKIE: str = "userId"
TOKEN_STORAGE_KEY: str = "token"
USER_ID_COOKIE_MAX_AGE_DAYS: int = 7

# Routes
IMPORT_ROUTE: str = "/profile-import"
EDITOR_ROUTE: str = "/profile-editor"
LEGACY_ROUTE: str = "/profile-wizard"


def is_standalone() -> bool:
    return RUN_MODE == "standalone"


def orchestrator_url() -> str:
    """Dashboard URL for the current run mode."""
    return REP_ORCHESTRATOR_URL_STANDALONE if is_standalone() else REP_ORCHESTRATOR_URL
