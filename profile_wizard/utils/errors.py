"""Exception hierarchy for the Profile Wizard."""

from typing import Any, Dict, Optional


class ProfileWizardError(Exception):
    """Base error; `message` is safe to show to the user."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }


class FileTooLargeError(ProfileWizardError):
    """Upload exceeds the size limit; raised before any network call."""

    def __init__(self, size: int, limit: int) -> None:
        super().__init__(
            f"File size must be less than {limit // (1024 * 1024)}MB",
            details={"size": size, "limit": limit},
        )


class UnsupportedFileTypeError(ProfileWizardError):
    def __init__(self, filename: str, allowed: tuple) -> None:
        super().__init__(
            f"Unsupported file type: {filename}. Supported: {', '.join(e.lstrip('.').upper() for e in allowed)}",
            details={"filename": filename},
        )


class ExtractionEmptyError(ProfileWizardError):
    def __init__(self, filename: str = "") -> None:
        super().__init__("No text could be extracted from the file", details={"filename": filename})


class ApiError(ProfileWizardError):
    """Remote or transport failure. `payload` is the server's error body when there is one."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        payload: Any = None,
        url: str = "",
    ) -> None:
        super().__init__(message, details={"status_code": status_code, "url": url})
        self.status_code = status_code
        self.payload = payload
        self.url = url


class AuthenticationExpiredError(ApiError):
    """401 from the backend. Never retried; the session logs out."""


class NoLanguagesError(ProfileWizardError):
    """CV has no usable languages (business rule, fatal to the import)."""


class InvalidDateError(ProfileWizardError):
    def __init__(self, value: Any, field: str = "endDate") -> None:
        label = "end date" if field == "endDate" else "start date"
        super().__init__(f"Invalid {label}: {value}", details={"field": field, "value": str(value)})


class RetryExhaustedError(ProfileWizardError):
    def __init__(self, attempts: int, last_error: Optional[BaseException]) -> None:
        reason = str(last_error) if last_error is not None and str(last_error) else "Unknown error"
        super().__init__(
            f"Operation failed after {attempts} attempts: {reason}",
            details={"attempts": attempts},
        )
        self.attempts = attempts
        self.last_error = last_error
