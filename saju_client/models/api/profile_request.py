# saju_client/models/api/profile_request.py
"""
Birth-information form models.
Raw values as entered on the information screens, before parsing.
"""

from typing import Literal

from pydantic import BaseModel, Field


class ProfileForm(BaseModel):
    """Birth-information form for one person."""

    user_name: str = Field(default="", max_length=50, description="Display name")
    gender: Literal["male", "female"] = Field(default="male", description="male | female")
    calendar: Literal["solar", "lunar"] = Field(default="solar", description="solar | lunar")
    birth_date: str = Field(..., description="YYYY-MM-DD")
    birth_time: str = Field(default="", description="HH:MM, empty when unknown")
    birth_city: str = Field(default="", max_length=100, description="City of birth")


class PartnerForm(ProfileForm):
    """Counterpart's birth information for a compatibility check."""
