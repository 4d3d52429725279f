"""
Conversions between form input, backend fortune-info payloads and BirthProfile.
"""

from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from saju_client.config import settings
from saju_client.errors import ValidationError
from saju_client.infrastructure.observability.logging import get_logger
from saju_client.models.api.profile_request import ProfileForm
from saju_client.models.domain.profile_domain import (
    BirthDate,
    BirthProfile,
    BirthTime,
    CalendarSystem,
    PartialProfile,
    Sex,
)

logger = get_logger(__name__)

COUNTERPART_PLACEHOLDER_NAME = "상대방"
SELF_PLACEHOLDER_NAME = "나"


def _split_ints(value: str, sep: str, parts: int, field: str) -> list[int]:
    pieces = (value or "").strip().split(sep)
    if len(pieces) != parts:
        raise ValidationError(f"Invalid {field}: {value!r}", field=field)
    try:
        return [int(p) for p in pieces]
    except ValueError as e:
        raise ValidationError(f"Invalid {field}: {value!r}", field=field) from e


def parse_birth_date(value: str) -> BirthDate:
    """Parse "YYYY-MM-DD" into numeric components."""
    year, month, day = _split_ints(value, "-", 3, "birth_date")
    try:
        return BirthDate(year=year, month=month, day=day)
    except PydanticValidationError as e:
        raise ValidationError(f"Invalid birth_date: {value!r}", field="birth_date") from e


def parse_birth_time(value: str) -> BirthTime | None:
    """Parse "HH:MM"; an empty value means the time of birth is unknown."""
    if not (value or "").strip():
        return None
    hour, minute = _split_ints(value, ":", 2, "birth_time")
    try:
        return BirthTime(hour=hour, minute=minute)
    except PydanticValidationError as e:
        raise ValidationError(f"Invalid birth_time: {value!r}", field="birth_time") from e


def parse_profile_form(
    form: ProfileForm, *, default_name: str = COUNTERPART_PLACEHOLDER_NAME
) -> BirthProfile:
    """
    Parse a birth-information form into a BirthProfile.

    Raises:
        ValidationError: date/time fields do not form a valid date and time
    """
    birth_date = parse_birth_date(form.birth_date)
    birth_time = parse_birth_time(form.birth_time)

    try:
        return BirthProfile(
            display_name=form.user_name.strip() or default_name,
            sex=Sex(form.gender),
            calendar_system=CalendarSystem(form.calendar),
            birth_date=birth_date,
            birth_time=birth_time,
            birth_place=form.birth_city.strip() or settings.DEFAULT_BIRTH_PLACE,
        )
    except PydanticValidationError as e:
        # valid components but not a real calendar date (e.g. 1991-02-30)
        raise ValidationError(f"Invalid birth_date: {form.birth_date!r}", field="birth_date") from e


def profile_from_fortune_info(data: dict[str, Any], display_name: str) -> BirthProfile:
    """
    Build a BirthProfile from the backend's GET /fortune/info payload.

    Raises:
        pydantic.ValidationError: the payload lacks a usable birth date
    """
    gender = _wire_gender(data)
    birth_time = None
    if not data.get("unknown_time") and data.get("birth_hour") is not None:
        birth_time = {"hour": data["birth_hour"], "minute": data.get("birth_minute") or 0}

    calendar_system = CalendarSystem.LUNAR if data.get("is_lunar") else CalendarSystem.SOLAR
    return BirthProfile.model_validate(
        {
            "display_name": display_name,
            "sex": Sex.from_wire(gender),
            "calendar_system": calendar_system,
            "birth_date": {
                "year": data.get("birth_year"),
                "month": data.get("birth_month"),
                "day": data.get("birth_day"),
            },
            "birth_time": birth_time,
            "birth_place": data.get("birth_place") or "",
        }
    )


def partial_profile_from(display_name: str, data: dict[str, Any] | None = None) -> PartialProfile:
    """Keep whatever a (possibly incomplete) fortune-info payload provided."""
    if not data:
        return PartialProfile(display_name=display_name)

    gender = _wire_gender(data)
    is_lunar = data.get("is_lunar")
    birth_place = data.get("birth_place")
    return PartialProfile(
        display_name=display_name,
        sex=Sex.from_wire(gender) if gender else None,
        calendar_system=(
            None
            if is_lunar is None
            else CalendarSystem.LUNAR if is_lunar else CalendarSystem.SOLAR
        ),
        birth_place=birth_place if isinstance(birth_place, str) and birth_place else None,
    )


def _wire_gender(data: Mapping[str, Any]) -> str | None:
    """Gender code from the nested user object, falling back to the top level."""
    user = data.get("user")
    candidates = (user.get("gender") if isinstance(user, Mapping) else None, data.get("gender"))
    return next((g for g in candidates if isinstance(g, str) and g), None)
