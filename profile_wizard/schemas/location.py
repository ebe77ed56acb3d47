"""IP geolocation records."""

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class LocationInfo(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    country_code: Optional[str] = Field(default=None, alias="countryCode")
    country: Optional[str] = Field(default=None)
    region: Optional[str] = Field(default=None)
    city: Optional[str] = Field(default=None)
    timezone: Optional[str] = Field(default=None)


class UserLocation(BaseModel):
    """Latest IP record for a user as returned by /ip/user/{id}/latest."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    ip_address: Optional[str] = Field(default=None, alias="ipAddress")
    location_info: Optional[LocationInfo] = Field(default=None, alias="locationInfo")

    def location_dict(self) -> Optional[Dict[str, Any]]:
        if self.location_info is None:
            return None
        return self.location_info.model_dump(by_alias=True)
