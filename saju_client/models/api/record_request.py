# saju_client/models/api/record_request.py
"""
Records API request models.
"""

import json
from typing import Any

from pydantic import BaseModel, Field, field_validator


class CreateRecordRequest(BaseModel):
    """Body for POST /records."""

    type: str = Field(..., min_length=1, description="Record type, e.g. compatibility")
    content: str = Field(..., description="Human-readable record body")
    image_url: str | None = Field(default=None, description="Optional image URL")
    metadata: str | None = Field(default=None, description="JSON-encoded metadata")

    @field_validator("metadata", mode="before")
    @classmethod
    def _encode_metadata(cls, value: Any) -> Any:
        # the backend stores metadata as a JSON string
        if isinstance(value, dict | list):
            return json.dumps(value, ensure_ascii=False)
        return value

    def to_payload(self) -> dict[str, Any]:
        """Request body; empty optional fields are not sent."""
        payload: dict[str, Any] = {"type": self.type, "content": self.content}
        if self.image_url:
            payload["image_url"] = self.image_url
        if self.metadata:
            payload["metadata"] = self.metadata
        return payload
