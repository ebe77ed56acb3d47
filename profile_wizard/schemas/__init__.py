"""Schema exports."""

from .analysis import AnalysisStep
from .language import ExtractedLanguage, Language, LanguageMatch
from .location import LocationInfo, UserLocation
from .profile import (
    Availability,
    ExperienceEntry,
    PersonalInfo,
    ProfessionalSummary,
    Profile,
    Skills,
)

__all__ = [
    "AnalysisStep",
    "Availability",
    "ExperienceEntry",
    "ExtractedLanguage",
    "Language",
    "LanguageMatch",
    "LocationInfo",
    "PersonalInfo",
    "ProfessionalSummary",
    "Profile",
    "Skills",
    "UserLocation",
]
