"""
Saved-record domain models.

RawRecord mirrors an entry of GET /records as the backend returns it.
ClassifiedRecord is the UI-facing view derived from it on every fetch.
"""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator


class RecordType(str, Enum):
    """Backend record types the client knows about."""

    COMPATIBILITY = "compatibility"
    AI_SPOUSE = "ai_spouse"
    TODAY_FORTUNE = "today_fortune"
    SIMILAR_FRIEND = "similar_friend"


class UiCategory(str, Enum):
    """Tabs of the saved-records screen."""

    ALL = "all"
    COMPAT = "compat"
    FUTURE = "future"
    RELATION = "relation"


class RawRecord(BaseModel):
    model_config = ConfigDict(extra="allow", frozen=True)

    id: int | str
    type: str
    content: str = ""
    created_at: datetime | None = None
    # JSON string, object, or nothing depending on who saved the record
    metadata: Any = None
    image_url: str | None = None

    @field_validator("content", mode="before")
    @classmethod
    def _null_content_is_empty(cls, v: Any) -> Any:
        return "" if v is None else v


def _as_number(value: Any) -> float | None:
    """Numeric value of a stored score: numbers and numeric strings, else None."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int | float):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            return None
    return None


class _MetadataBase(BaseModel):
    """
    Decoded metadata object.

    Fields are untyped so a record saved by another client version never
    fails to load; typed reads go through the accessors of each subclass.
    """

    model_config = ConfigDict(extra="allow", frozen=True)

    def as_dict(self) -> dict[str, Any]:
        """Fields as they were stored, without filled-in defaults."""
        data = self.model_dump(exclude_unset=True)
        data.update(self.model_extra or {})
        return data

    def text(self, name: str) -> str:
        value = getattr(self, name, None)
        return value if isinstance(value, str) else ""


class CompatibilityMetadata(_MetadataBase):
    score: Any = None
    user2_name: Any = None
    analysis: Any = None
    communication_analysis: Any = None
    emotion_analysis: Any = None
    lifestyle_analysis: Any = None
    caution_analysis: Any = None

    @property
    def counterpart_name(self) -> str:
        return self.text("user2_name")

    @property
    def numeric_score(self) -> float | None:
        return _as_number(self.score)


class SpouseMetadata(_MetadataBase):
    impression: Any = None
    fashion: Any = None
    mood: Any = None
    job: Any = None
    image_url: Any = None


class GenericMetadata(_MetadataBase):
    """Any other record type; shape unknown."""


RecordMetadata = CompatibilityMetadata | SpouseMetadata | GenericMetadata

METADATA_MODELS: dict[str, type[_MetadataBase]] = {
    RecordType.COMPATIBILITY.value: CompatibilityMetadata,
    RecordType.AI_SPOUSE.value: SpouseMetadata,
}


class ClassifiedRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int | str
    ui_category: UiCategory
    title: str
    created_at: datetime | None = None
    metadata: RecordMetadata | None = None
    source_type: str
    raw: RawRecord
