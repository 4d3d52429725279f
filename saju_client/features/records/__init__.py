"""
Saved-records feature package.

Loading, tab filtering and selection routing for the records screen. The
classification itself lives in saju_client.services.record_classifier.
"""

from saju_client.features.records.dispatch import RecordRoute, resolve_record_route
from saju_client.features.records.service import (
    RecordsService,
    build_spouse_record,
    filter_by_tab,
)

__all__ = [
    "RecordRoute",
    "RecordsService",
    "build_spouse_record",
    "filter_by_tab",
    "resolve_record_route",
]
