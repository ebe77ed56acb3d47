"""Language reference records and CV language matches."""

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Language(BaseModel):
    """Canonical language record from the /languages reference service."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: Optional[str] = Field(default=None, alias="_id")
    code: str = Field(..., description="ISO 639-1 code")
    name: str = Field(default="")
    native_name: str = Field(default="", alias="nativeName")


class ExtractedLanguage(BaseModel):
    """A language mention produced by the skills analysis of a CV."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    language: str = Field(default="", description="Language as written in the CV")
    iso639_1: str = Field(default="", description="Two-letter code if the analysis found one")
    proficiency: str = Field(default="", description="Proficiency level (e.g. B2, Native)")

    @field_validator("language", "iso639_1", "proficiency", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value


class LanguageMatch(BaseModel):
    """Extracted language paired with its reference record."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    language: Any = Field(..., description="Reference Language record (or its id)")
    proficiency: str = Field(default="")

    def to_api(self) -> Dict[str, Any]:
        lang = self.language
        if isinstance(lang, Language):
            lang = lang.model_dump(by_alias=True, exclude_none=True)
        return {"language": lang, "proficiency": self.proficiency}
