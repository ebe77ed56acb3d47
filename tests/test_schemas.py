"""Tests for the profile and location models."""

from schemas.location import UserLocation
from schemas.profile import Profile


def test_profile_accepts_backend_keys_and_keeps_extras():
    profile = Profile.model_validate({
        "_id": "p1",
        "isBasicProfileCompleted": True,
        "personalInfo": {"name": "Jane Doe", "country": {"countryCode": "MA"}},
        "professionalSummary": {"yearsOfExperience": "4"},
        "status": "active",
    })

    assert profile.id == "p1"
    assert profile.is_basic_profile_completed is True
    assert profile.personal_info.country == {"countryCode": "MA"}
    assert profile.professional_summary.years_of_experience == 4

    body = profile.to_api()
    assert body["_id"] == "p1"
    assert body["status"] == "active"
    assert body["personalInfo"]["name"] == "Jane Doe"


def test_new_profile_body_has_no_identifiers():
    body = Profile.model_validate({"personalInfo": {"name": "Jane"}}).to_api()
    assert "_id" not in body
    assert "userId" not in body
    assert body["skills"] == {"technical": [], "professional": [], "soft": []}


def test_user_location_dict():
    location = UserLocation.model_validate({"ipAddress": "1.2.3.4", "locationInfo": {"countryCode": "MA", "isp": "x"}})
    assert location.location_dict()["countryCode"] == "MA"
    assert location.location_dict()["isp"] == "x"
    assert UserLocation().location_dict() is None
