"""
Record classification for the saved-records screen.

Maps backend records onto the screen's tabs, decodes their metadata,
synthesizes card titles and drops compatibility checks that have no
identifiable counterpart. Pure and deterministic: no I/O, input order is
preserved, and a bad record never fails the batch.
"""

import json
import math
from collections.abc import Iterable
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from saju_client.errors import ClassificationParseError
from saju_client.infrastructure.observability.logging import get_logger
from saju_client.models.domain.record_domain import (
    METADATA_MODELS,
    ClassifiedRecord,
    CompatibilityMetadata,
    GenericMetadata,
    RawRecord,
    RecordMetadata,
    RecordType,
    UiCategory,
)

logger = get_logger(__name__)

CATEGORY_BY_TYPE: dict[str, UiCategory] = {
    RecordType.COMPATIBILITY.value: UiCategory.COMPAT,
    RecordType.AI_SPOUSE.value: UiCategory.FUTURE,
    RecordType.TODAY_FORTUNE.value: UiCategory.RELATION,
    RecordType.SIMILAR_FRIEND.value: UiCategory.RELATION,
}

PLACEHOLDER_COUNTERPART_NAME = "상대방"
SPOUSE_TITLE = "나의 미래 배우자"
SIMILAR_FRIEND_TITLE = "유사 친구"
SHORT_NAME_LENGTH = 2
CONTENT_TITLE_LENGTH = 15
ELLIPSIS = "..."


def classify(raw_records: Iterable[RawRecord]) -> list[ClassifiedRecord]:
    """Classify records in order, dropping the ones that are noise."""
    classified = []
    for raw in raw_records:
        record = classify_record(raw)
        if record is not None:
            classified.append(record)
    return classified


def classify_record(raw: RawRecord) -> ClassifiedRecord | None:
    """Classify a single record; None when the record should not be shown."""
    try:
        metadata = decode_metadata(raw.type, raw.metadata, record_id=raw.id)
    except ClassificationParseError as e:
        logger.warning("Ignoring malformed record metadata", record_id=raw.id, error=str(e))
        metadata = None

    if _is_anonymous_compatibility(raw.type, metadata):
        logger.debug("Dropping compatibility record without counterpart", record_id=raw.id)
        return None

    return ClassifiedRecord(
        id=raw.id,
        ui_category=CATEGORY_BY_TYPE.get(raw.type, UiCategory.ALL),
        title=build_title(raw, metadata),
        created_at=raw.created_at,
        metadata=metadata,
        source_type=raw.type,
        raw=raw.model_copy(deep=True),
    )


def decode_metadata(source_type: str, value: Any, record_id=None) -> RecordMetadata | None:
    """
    Decode a record's metadata into the model for its source type.

    Only the decode itself can fail; field values are kept as stored and
    read through the model's checked accessors.

    Raises:
        ClassificationParseError: metadata is present but unusable
    """
    if value is None or value == "":
        return None

    if isinstance(value, str):
        try:
            value = json.loads(value)
        except ValueError as e:
            raise ClassificationParseError(f"metadata is not valid JSON: {e}", record_id) from e

    if not isinstance(value, dict):
        raise ClassificationParseError(
            f"metadata must be an object, got {type(value).__name__}", record_id
        )

    model = METADATA_MODELS.get(source_type, GenericMetadata)
    try:
        return model.model_validate(value)
    except PydanticValidationError as e:
        raise ClassificationParseError(f"metadata has unexpected shape: {e}", record_id) from e


def _is_anonymous_compatibility(source_type: str, metadata: RecordMetadata | None) -> bool:
    if source_type != RecordType.COMPATIBILITY.value:
        return False
    if not isinstance(metadata, CompatibilityMetadata):
        return False
    name = metadata.counterpart_name.strip()
    return not name or name == PLACEHOLDER_COUNTERPART_NAME


def round_score(score: float | None) -> int | None:
    """Round half up; zero and missing scores are both reported as None."""
    if not score or not math.isfinite(score):
        return None
    rounded = math.floor(score + 0.5)
    return rounded or None


def build_title(raw: RawRecord, metadata: RecordMetadata | None) -> str:
    if raw.type == RecordType.COMPATIBILITY.value and isinstance(metadata, CompatibilityMetadata):
        score = round_score(metadata.numeric_score)
        name = metadata.counterpart_name
        if score is not None and name:
            short_name = name[:SHORT_NAME_LENGTH] if len(name) > SHORT_NAME_LENGTH else name
            return f"{short_name}님 궁합 {score}점"
        if score is not None:
            return f"궁합 {score}점"

    if raw.type == RecordType.AI_SPOUSE.value:
        return SPOUSE_TITLE
    if raw.type in (RecordType.SIMILAR_FRIEND.value, RecordType.TODAY_FORTUNE.value):
        return SIMILAR_FRIEND_TITLE

    return content_title(raw.content)


def content_title(content: str | None) -> str:
    first_line = (content or "").split("\n")[0]
    if len(first_line) > CONTENT_TITLE_LENGTH:
        return first_line[:CONTENT_TITLE_LENGTH] + ELLIPSIS
    return first_line
