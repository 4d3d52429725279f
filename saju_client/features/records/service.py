"""
Saved-records screen: load and classify recent records, filter them by tab
and save new records.
"""

from collections.abc import Sequence

from saju_client.config import settings
from saju_client.errors import SajuClientError
from saju_client.features.records.dispatch import RecordRoute, resolve_record_route
from saju_client.infrastructure.observability.logging import get_logger
from saju_client.models.api.record_request import CreateRecordRequest
from saju_client.models.domain.record_domain import ClassifiedRecord, RecordType, UiCategory
from saju_client.services.fortune_api_service import FortuneBackend
from saju_client.services.record_classifier import SPOUSE_TITLE, classify
from saju_client.services.session_store import SessionStore

logger = get_logger(__name__)


def filter_by_tab(records: Sequence[ClassifiedRecord], tab: UiCategory) -> list[ClassifiedRecord]:
    """The ALL tab shows every record; other tabs only their own category."""
    if tab is UiCategory.ALL:
        return list(records)
    return [record for record in records if record.ui_category is tab]


def build_spouse_record(spouse: dict) -> CreateRecordRequest:
    """Record body for a future-spouse result (image URL + attribute lists)."""
    impression = spouse.get("impression") or []
    fashion = spouse.get("fashion") or []
    mood = spouse.get("mood") or []
    job = spouse.get("job") or []
    image_url = spouse.get("image_url") or ""

    content = "\n".join(
        [
            SPOUSE_TITLE,
            f"인상: {', '.join(impression)}",
            f"패션: {', '.join(fashion)}",
            f"무드: {', '.join(mood)}",
            f"직업: {', '.join(job)}",
        ]
    )
    return CreateRecordRequest(
        type=RecordType.AI_SPOUSE.value,
        content=content,
        image_url=image_url or None,
        metadata={
            "impression": impression,
            "fashion": fashion,
            "mood": mood,
            "job": job,
            "image_url": image_url,
        },
    )


class RecordsService:
    def __init__(self, api: FortuneBackend, session: SessionStore):
        self.api = api
        self.session = session

    async def load_recent_records(self, limit: int | None = None) -> list[ClassifiedRecord]:
        """
        Fetch and classify the most recent records.

        A failed fetch is logged and shows as an empty list, the screen
        stays usable without its records.
        """
        limit = limit or settings.RECENT_RECORDS_LIMIT
        try:
            raw_records = await self.api.list_records(limit)
        except SajuClientError as e:
            logger.warning("Failed to load recent records", error=e.message)
            return []

        records = classify(raw_records)
        logger.info(
            "Recent records loaded", fetched=len(raw_records), shown=len(records), limit=limit
        )
        return records

    def route_for(self, record: ClassifiedRecord) -> RecordRoute | None:
        return resolve_record_route(record, self.session.display_name or "")

    async def save_spouse_record(self, spouse: dict) -> dict:
        request = build_spouse_record(spouse)
        data = await self.api.create_record(request)
        logger.info("Spouse record saved")
        return data
