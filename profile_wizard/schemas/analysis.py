"""Import analysis progress records."""

from datetime import datetime, timezone

from pydantic import BaseModel, Field


class AnalysisStep(BaseModel):
    """One timestamped progress message of a CV import; error steps are flagged."""

    text: str
    error: bool = False
    timestamp: str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
