"""Country detection helpers: match IP location info against the timezones country list."""

import re
from typing import Any, Dict, List, Optional, Union

CountryLike = Union[Dict[str, Any], str, None]


def find_country_by_code(countries: Optional[List[Dict[str, Any]]], country_code: Optional[str]) -> Optional[Dict[str, Any]]:
    """Find a country dict by two-letter code (case-insensitive)."""
    if not countries or not country_code:
        return None
    code = country_code.lower()
    for country in countries:
        if country.get("countryCode") and country["countryCode"].lower() == code:
            return country
    return None


def create_country_from_location_info(location_info: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """Build a country dict compatible with the profile from IP location info."""
    if not location_info or not location_info.get("countryCode"):
        return None
    return {
        "countryCode": location_info["countryCode"],
        "countryName": location_info.get("country") or location_info["countryCode"],
        "region": location_info.get("region"),
        "city": location_info.get("city"),
        "timezone": location_info.get("timezone"),
    }


def get_country_code(country: CountryLike) -> Optional[str]:
    if not country:
        return None
    if isinstance(country, str):
        return country
    if isinstance(country, dict) and country.get("countryCode"):
        return country["countryCode"]
    return None


def get_country_name(country: CountryLike) -> Optional[str]:
    if not country:
        return None
    if isinstance(country, str):
        return country
    if isinstance(country, dict) and country.get("countryName"):
        return country["countryName"]
    return None


def are_countries_equal(country1: CountryLike, country2: CountryLike) -> bool:
    code1 = get_country_code(country1)
    code2 = get_country_code(country2)
    return bool(code1 and code2 and code1.lower() == code2.lower())


def is_valid_country_code(country_code: object) -> bool:
    if not country_code or not isinstance(country_code, str):
        return False
    return re.fullmatch(r"[A-Za-z]{2}", country_code.strip()) is not None


def convert_location_to_country_object(
    location_info: Optional[Dict[str, Any]],
    available_countries: Optional[List[Dict[str, Any]]] = None,
) -> Optional[Dict[str, Any]]:
    """Prefer the entry from the available countries list; otherwise build one from the IP info."""
    if not location_info or not location_info.get("countryCode"):
        return None
    existing = find_country_by_code(available_countries or [], location_info["countryCode"])
    if existing:
        return existing
    return create_country_from_location_info(location_info)
