"""
Where a saved record leads when it is selected on the records screen.
"""

from dataclasses import dataclass, field
from typing import Any

from saju_client.models.domain.record_domain import (
    ClassifiedRecord,
    CompatibilityMetadata,
    RecordType,
)
from saju_client.services.record_classifier import PLACEHOLDER_COUNTERPART_NAME

RESULT_ROUTE = "/result"
FUTURE_PARTNER_ROUTE = "/future-partner"
SIMILAR_FRIEND_ROUTE = "/similar-friend"

ANALYSIS_FIELDS = (
    "analysis",
    "communication_analysis",
    "emotion_analysis",
    "lifestyle_analysis",
    "caution_analysis",
)


@dataclass(slots=True)
class RecordRoute:
    path: str
    state: dict[str, Any] = field(default_factory=dict)


def resolve_record_route(
    record: ClassifiedRecord, self_display_name: str = ""
) -> RecordRoute | None:
    """Route and view state for a selected record; None for types with no detail view."""
    source_type = record.source_type

    if source_type == RecordType.COMPATIBILITY.value:
        if not isinstance(record.metadata, CompatibilityMetadata):
            return None
        return RecordRoute(
            RESULT_ROUTE,
            {
                "compatibility": _compatibility_view(record.metadata),
                "myInfo": {"userName": self_display_name or ""},
                "otherInfo": {
                    "userName": record.metadata.counterpart_name or PLACEHOLDER_COUNTERPART_NAME
                },
            },
        )

    if source_type == RecordType.AI_SPOUSE.value:
        return RecordRoute(FUTURE_PARTNER_ROUTE, _passthrough_state(record))

    if source_type in (RecordType.SIMILAR_FRIEND.value, RecordType.TODAY_FORTUNE.value):
        return RecordRoute(SIMILAR_FRIEND_ROUTE, _passthrough_state(record))

    return None


def _compatibility_view(metadata: CompatibilityMetadata) -> dict[str, Any]:
    view: dict[str, Any] = {"score": metadata.numeric_score or 0}
    for name in ANALYSIS_FIELDS:
        view[name] = metadata.text(name)
    return view


def _passthrough_state(record: ClassifiedRecord) -> dict[str, Any]:
    return {
        "recordData": record.raw.model_dump(mode="json"),
        "metadata": record.metadata.as_dict() if record.metadata is not None else None,
    }
