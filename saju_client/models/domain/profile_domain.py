"""
Birth-profile (saju) domain models.

A BirthProfile is the input the fortune backend needs to chart a person:
calendar date and optional time of birth, sex, calendar system and place.
"""

from datetime import date
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

LUNAR_MAX_DAY = 30  # lunar months are 29 or 30 days long


class Sex(str, Enum):
    MALE = "male"
    FEMALE = "female"

    @property
    def wire_code(self) -> str:
        """Backend gender code ("M" / "F")."""
        return "M" if self is Sex.MALE else "F"

    @classmethod
    def from_wire(cls, code: str | None) -> "Sex":
        return cls.MALE if code == "M" else cls.FEMALE


class CalendarSystem(str, Enum):
    SOLAR = "solar"
    LUNAR = "lunar"


class BirthDate(BaseModel):
    model_config = ConfigDict(frozen=True)

    year: int = Field(..., ge=1, le=9999)
    month: int = Field(..., ge=1, le=12)
    day: int = Field(..., ge=1, le=31)

    def __str__(self) -> str:
        return f"{self.year:04d}-{self.month:02d}-{self.day:02d}"


class BirthTime(BaseModel):
    model_config = ConfigDict(frozen=True)

    hour: int = Field(..., ge=0, le=23)
    minute: int = Field(..., ge=0, le=59)

    def __str__(self) -> str:
        return f"{self.hour:02d}:{self.minute:02d}"


class BirthProfile(BaseModel):
    """Fully specified birth profile for one person."""

    model_config = ConfigDict(frozen=True)

    display_name: str
    sex: Sex
    calendar_system: CalendarSystem
    birth_date: BirthDate
    birth_time: BirthTime | None = None
    birth_place: str = ""

    @model_validator(mode="after")
    def _check_calendar_date(self) -> "BirthProfile":
        d = self.birth_date
        if self.calendar_system is CalendarSystem.SOLAR:
            # raises ValueError for e.g. 1991-02-30
            date(d.year, d.month, d.day)
        elif d.day > LUNAR_MAX_DAY:
            raise ValueError(f"lunar day must be <= {LUNAR_MAX_DAY}, got {d.day}")
        return self

    @property
    def is_lunar(self) -> bool:
        return self.calendar_system is CalendarSystem.LUNAR

    def to_wire_fields(self) -> dict[str, Any]:
        """Profile fields as the backend's register / fortune-info endpoints expect them."""
        fields: dict[str, Any] = {
            "name": self.display_name,
            "gender": self.sex.wire_code,
            "birth_year": self.birth_date.year,
            "birth_month": self.birth_date.month,
            "birth_day": self.birth_date.day,
            "birth_place": self.birth_place,
            "is_lunar": self.is_lunar,
        }
        if self.birth_time is not None:
            fields["birth_hour"] = self.birth_time.hour
            fields["birth_minute"] = self.birth_time.minute
        else:
            fields["unknown_time"] = True
        return fields


class PartialProfile(BaseModel):
    """Degraded self profile used when no complete BirthProfile is available."""

    model_config = ConfigDict(frozen=True)

    display_name: str
    sex: Sex | None = None
    calendar_system: CalendarSystem | None = None
    birth_place: str | None = None
