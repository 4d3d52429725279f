from typing import Any

from pydantic import BaseModel, ConfigDict

from saju_client.models.domain.profile_domain import BirthProfile, PartialProfile


class CompatibilityResult(BaseModel):
    """
    Compatibility payload as returned by GET /compatibility/calculate.

    Passed through untouched; unknown fields are preserved.
    """

    model_config = ConfigDict(extra="allow", frozen=True)

    score: float | None = None
    analysis: str | None = None
    communication_analysis: str | None = None
    emotion_analysis: str | None = None
    lifestyle_analysis: str | None = None
    caution_analysis: str | None = None


class EphemeralIdentity(BaseModel):
    """Throwaway account the counterpart's profile is attached to."""

    model_config = ConfigDict(frozen=True)

    email: str
    password: str


class CompatibilityRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    self_profile: BirthProfile | PartialProfile
    counterpart_profile: BirthProfile


class NavigationPayload(BaseModel):
    """State handed to the compatibility result view."""

    model_config = ConfigDict(frozen=True)

    compatibility: CompatibilityResult
    self_profile: BirthProfile | PartialProfile
    counterpart_profile: BirthProfile

    @classmethod
    def from_request(
        cls, request: CompatibilityRequest, compatibility: CompatibilityResult
    ) -> "NavigationPayload":
        return cls(
            compatibility=compatibility,
            self_profile=request.self_profile,
            counterpart_profile=request.counterpart_profile,
        )

    def to_view_state(self) -> dict[str, Any]:
        return self.model_dump(mode="json")
