"""Profile schema: the backend-owned record of a user's professional information."""

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from schemas.language import LanguageMatch


class _CamelModel(BaseModel):
    """Accepts both the backend's camelCase keys and snake_case field names; keeps unknown keys."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    def to_api(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")


class PersonalInfo(_CamelModel):
    name: str = Field(default="", description="Full name")
    country: Union[str, Dict[str, Any], None] = Field(default="", description="Country code or country object")
    email: str = Field(default="")
    phone: str = Field(default="")
    languages: List[LanguageMatch] = Field(default_factory=list, description="Spoken languages with proficiency")


class ProfessionalSummary(_CamelModel):
    years_of_experience: int = Field(default=0, alias="yearsOfExperience")
    current_role: str = Field(default="", alias="currentRole")
    industries: List[Any] = Field(default_factory=list)
    activities: List[Any] = Field(default_factory=list)
    key_expertise: List[Any] = Field(default_factory=list, alias="keyExpertise")
    notable_companies: List[Any] = Field(default_factory=list, alias="notableCompanies")
    profile_description: Optional[str] = Field(default=None, alias="profileDescription")


class Skills(_CamelModel):
    technical: List[Any] = Field(default_factory=list)
    professional: List[Any] = Field(default_factory=list)
    soft: List[Any] = Field(default_factory=list)


class Availability(_CamelModel):
    schedule: List[Any] = Field(default_factory=list)
    time_zone: Optional[Any] = Field(default=None, alias="timeZone")
    flexibility: List[Any] = Field(default_factory=list)


class ExperienceEntry(_CamelModel):
    title: str = Field(default="")
    company: str = Field(default="")
    start_date: Optional[str] = Field(default=None, alias="startDate", description="ISO date")
    end_date: Optional[str] = Field(default=None, alias="endDate", description="ISO date or 'present'")
    responsibilities: List[Any] = Field(default_factory=list)
    achievements: List[Any] = Field(default_factory=list)


class Profile(_CamelModel):
    """Full profile as returned by /profiles. Extra backend fields are preserved."""

    id: Optional[str] = Field(default=None, alias="_id")
    user_id: Optional[str] = Field(default=None, alias="userId")
    is_basic_profile_completed: bool = Field(default=False, alias="isBasicProfileCompleted")
    personal_info: PersonalInfo = Field(default_factory=PersonalInfo, alias="personalInfo")
    professional_summary: ProfessionalSummary = Field(default_factory=ProfessionalSummary, alias="professionalSummary")
    skills: Skills = Field(default_factory=Skills)
    availability: Availability = Field(default_factory=Availability)
    experience: List[ExperienceEntry] = Field(default_factory=list)

    def to_api(self) -> Dict[str, Any]:
        """Backend body; identifiers are left out until the backend has assigned them."""
        data = super().to_api()
        for key in ("_id", "userId"):
            if data.get(key) is None:
                data.pop(key, None)
        return data
