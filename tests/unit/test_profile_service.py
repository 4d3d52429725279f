import pytest

from saju_client.errors import ValidationError
from saju_client.models.api.profile_request import PartnerForm
from saju_client.models.domain.profile_domain import BirthTime, CalendarSystem, Sex
from saju_client.services.profile_service import (
    parse_birth_time,
    parse_profile_form,
    partial_profile_from,
    profile_from_fortune_info,
)


def _form(**overrides) -> PartnerForm:
    values = {
        "user_name": "",
        "gender": "female",
        "calendar": "lunar",
        "birth_date": "1995-08-30",
        "birth_time": "23:30",
        "birth_city": "광주",
    }
    values.update(overrides)
    return PartnerForm(**values)


def test_parse_form_defaults_name_and_keeps_city():
    profile = parse_profile_form(_form())

    assert profile.display_name == "상대방"
    assert profile.sex is Sex.FEMALE
    assert profile.calendar_system is CalendarSystem.LUNAR
    assert str(profile.birth_date) == "1995-08-30"
    assert profile.birth_time == BirthTime(hour=23, minute=30)
    assert profile.birth_place == "광주"


@pytest.mark.parametrize(
    "field, value",
    [
        ("birth_date", "1995/08/30"),
        ("birth_date", "abcd-08-30"),
        ("birth_date", "1995-00-10"),
        ("birth_time", "24:00"),
        ("birth_time", "12:60"),
        ("birth_time", "noon"),
    ],
)
def test_parse_form_rejects_bad_components(field, value):
    with pytest.raises(ValidationError) as exc_info:
        parse_profile_form(_form(**{field: value}))
    assert exc_info.value.field == field


def test_solar_date_must_exist_but_lunar_30th_is_fine():
    with pytest.raises(ValidationError):
        parse_profile_form(_form(calendar="solar", birth_date="1991-02-30"))

    assert parse_profile_form(_form(calendar="lunar", birth_date="1991-02-30")).is_lunar
    with pytest.raises(ValidationError):
        parse_profile_form(_form(calendar="lunar", birth_date="1991-01-31"))


def test_empty_time_means_unknown():
    assert parse_birth_time("") is None
    profile = parse_profile_form(_form(birth_time=""))
    assert profile.to_wire_fields()["unknown_time"] is True
    assert "birth_hour" not in profile.to_wire_fields()


def test_wire_fields():
    profile = parse_profile_form(_form(user_name="민수", gender="male", calendar="solar"))

    assert profile.to_wire_fields() == {
        "name": "민수",
        "gender": "M",
        "birth_year": 1995,
        "birth_month": 8,
        "birth_day": 30,
        "birth_hour": 23,
        "birth_minute": 30,
        "birth_place": "광주",
        "is_lunar": False,
    }


def test_profile_from_fortune_info():
    profile = profile_from_fortune_info(
        {
            "birth_year": 1990,
            "birth_month": 5,
            "birth_day": 3,
            "birth_hour": None,
            "birth_place": "",
            "is_lunar": True,
            "user": {"gender": "M"},
        },
        "김민지",
    )

    assert profile.display_name == "김민지"
    assert profile.sex is Sex.MALE
    assert profile.birth_time is None
    assert profile.calendar_system is CalendarSystem.LUNAR


def test_partial_profile_from_nothing():
    partial = partial_profile_from("나")

    assert partial.display_name == "나"
    assert partial.sex is None
    assert partial.calendar_system is None


def test_profile_from_fortune_info_tolerates_non_object_user():
    profile = profile_from_fortune_info(
        {"birth_year": 1990, "birth_month": 5, "birth_day": 3, "gender": "M", "user": "unknown"},
        "김민지",
    )

    assert profile.sex is Sex.MALE
    assert profile.birth_time is None


def test_partial_profile_ignores_odd_fields():
    partial = partial_profile_from("나", {"user": ["x"], "gender": 1, "birth_place": 3})

    assert partial == partial_profile_from("나")
