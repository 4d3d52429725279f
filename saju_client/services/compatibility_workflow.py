"""
Compatibility request workflow.

Runs the counterpart compatibility check behind the "save information"
button of the counterpart screen:

    1. parse the counterpart form into a BirthProfile
    2. register a throwaway account carrying that profile
    3. compute compatibility between the signed-in user and that account
    4. resolve the signed-in user's own profile (never blocking)
    5. hand back the payload for the result view

One coordinator serves one screen visit. It accepts a single submission at
a time, goes back to IDLE after a failure so the user can retry, and retires
after a success.
"""

import secrets
import string
import time
from collections.abc import Mapping
from enum import Enum
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from saju_client.config import settings
from saju_client.errors import ProtocolError, RemoteError, SajuClientError, ValidationError
from saju_client.infrastructure.observability.logging import get_logger
from saju_client.models.api.profile_request import PartnerForm
from saju_client.models.domain.compatibility_domain import (
    CompatibilityRequest,
    CompatibilityResult,
    EphemeralIdentity,
    NavigationPayload,
)
from saju_client.models.domain.profile_domain import BirthProfile, PartialProfile
from saju_client.services.fortune_api_service import FortuneBackend
from saju_client.services.presence_timer import PresenceTimer
from saju_client.services.profile_service import (
    SELF_PLACEHOLDER_NAME,
    parse_profile_form,
    partial_profile_from,
    profile_from_fortune_info,
)
from saju_client.services.session_store import SessionStore

logger = get_logger(__name__)

GENERIC_ERROR_MESSAGE = "궁합 계산 중 오류가 발생했습니다. 다시 시도해 주세요."
TEMP_SUFFIX_ALPHABET = string.ascii_lowercase + string.digits
TEMP_SUFFIX_LENGTH = 9


class CoordinatorState(str, Enum):
    IDLE = "idle"
    SUBMITTING = "submitting"
    NAVIGATING_AWAY = "navigating_away"


ALLOWED_TRANSITIONS: dict[CoordinatorState, frozenset[CoordinatorState]] = {
    CoordinatorState.IDLE: frozenset({CoordinatorState.SUBMITTING}),
    CoordinatorState.SUBMITTING: frozenset(
        {CoordinatorState.IDLE, CoordinatorState.NAVIGATING_AWAY}
    ),
    CoordinatorState.NAVIGATING_AWAY: frozenset(),
}


class InvalidTransitionError(SajuClientError):
    """Raised when the coordinator is asked to move along an edge it doesn't have."""

    def __init__(self, current: CoordinatorState, target: CoordinatorState):
        super().__init__(
            f"Cannot move from {current.value} to {target.value}", operation="transition"
        )
        self.current = current
        self.target = target


def generate_ephemeral_identity() -> EphemeralIdentity:
    """temp_<epoch ms>_<9 random chars>@<domain>, unique per call."""
    suffix = "".join(secrets.choice(TEMP_SUFFIX_ALPHABET) for _ in range(TEMP_SUFFIX_LENGTH))
    email = f"temp_{int(time.time() * 1000)}_{suffix}@{settings.TEMP_USER_EMAIL_DOMAIN}"
    return EphemeralIdentity(email=email, password=settings.TEMP_USER_PASSWORD)


def _has_id(value: Any) -> bool:
    return value is not None and value != ""


def extract_entity_id(response: Any) -> int | str | None:
    """New account id from a register response: user.id, then id. 0 is a valid id."""
    if not isinstance(response, Mapping):
        return None
    user = response.get("user")
    if isinstance(user, Mapping) and _has_id(user.get("id")):
        return user["id"]
    entity_id = response.get("id")
    return entity_id if _has_id(entity_id) else None


class CompatibilityWorkflowCoordinator:
    """
    Coordinates one counterpart compatibility submission.

    The presence timer is opened for the whole remote sequence and released
    on both success and failure; the session is only ever read.
    """

    def __init__(self, api: FortuneBackend, session: SessionStore, presence: PresenceTimer):
        self.api = api
        self.session = session
        self.presence = presence
        self.state = CoordinatorState.IDLE
        self.error_message: str | None = None

    def _transition(self, target: CoordinatorState) -> None:
        if target not in ALLOWED_TRANSITIONS[self.state]:
            raise InvalidTransitionError(self.state, target)
        logger.debug("Coordinator transition", source=self.state.value, target=target.value)
        self.state = target

    @property
    def is_submitting(self) -> bool:
        return self.state is CoordinatorState.SUBMITTING

    async def submit_compatibility_request(
        self,
        partner_form: PartnerForm | Mapping[str, Any],
        cached_self_profile: BirthProfile | None = None,
    ) -> NavigationPayload | None:
        """
        Run the compatibility sequence for one user gesture.

        Returns None without doing anything when a submission is already in
        flight or the coordinator has retired.

        Raises:
            ValidationError: the counterpart form does not parse
            ProtocolError: registration returned no identifier
            RemoteError: a remote call failed
        """
        if self.state is not CoordinatorState.IDLE:
            logger.info("Ignoring duplicate compatibility submission", state=self.state.value)
            return None

        self._transition(CoordinatorState.SUBMITTING)
        self.error_message = None
        self.presence.set_requested_open(True)
        succeeded = False
        try:
            payload = await self._run(partner_form, cached_self_profile)
            succeeded = True
        except Exception as e:
            message = e.message if isinstance(e, SajuClientError) else str(e)
            self.error_message = message or GENERIC_ERROR_MESSAGE
            logger.warning(
                "Compatibility submission failed",
                error_type=type(e).__name__,
                error=self.error_message,
            )
            raise
        finally:
            self.presence.set_requested_open(False)
            self._transition(
                CoordinatorState.NAVIGATING_AWAY if succeeded else CoordinatorState.IDLE
            )

        return payload

    async def _run(
        self,
        partner_form: PartnerForm | Mapping[str, Any],
        cached_self_profile: BirthProfile | None,
    ) -> NavigationPayload:
        counterpart = self._parse_partner(partner_form)

        identity = generate_ephemeral_identity()
        logger.info("Registering counterpart account")
        response = await self._call(
            "register_entity", self.api.register_entity, identity, counterpart
        )

        entity_id = extract_entity_id(response)
        if entity_id is None:
            raise ProtocolError(
                "registration returned no identifier", operation="register_entity"
            )

        logger.info("Computing compatibility", entity_id=entity_id)
        result = await self._call(
            "compute_compatibility", self.api.compute_compatibility, entity_id
        )
        if not isinstance(result, CompatibilityResult):
            try:
                result = CompatibilityResult.model_validate(result)
            except PydanticValidationError as e:
                raise ProtocolError(
                    "compatibility response is not an object", operation="compute_compatibility"
                ) from e

        self_profile = await self._resolve_self_profile(cached_self_profile)
        request = CompatibilityRequest(self_profile=self_profile, counterpart_profile=counterpart)
        return NavigationPayload.from_request(request, result)

    def _parse_partner(self, partner_form: PartnerForm | Mapping[str, Any]) -> BirthProfile:
        if not isinstance(partner_form, PartnerForm):
            try:
                partner_form = PartnerForm.model_validate(partner_form)
            except PydanticValidationError as e:
                raise ValidationError(f"Invalid counterpart information: {e}") from e
        return parse_profile_form(partner_form)

    async def _call(self, operation: str, func, *args):
        """Await a remote operation, reporting anything unexpected as RemoteError."""
        try:
            return await func(*args)
        except SajuClientError:
            raise
        except Exception as e:
            raise RemoteError(str(e) or GENERIC_ERROR_MESSAGE, operation=operation) from e

    async def _resolve_self_profile(
        self, cached_self_profile: BirthProfile | None
    ) -> BirthProfile | PartialProfile:
        if cached_self_profile is not None:
            return cached_self_profile

        display_name = self.session.display_name or SELF_PLACEHOLDER_NAME
        try:
            data = await self.api.fetch_own_profile()
        except Exception as e:
            logger.warning("Own profile unavailable, using cached name only", error=str(e))
            return partial_profile_from(display_name)

        if not isinstance(data, Mapping):
            return partial_profile_from(display_name)
        try:
            return profile_from_fortune_info(dict(data), display_name)
        except Exception as e:
            logger.warning(
                "Own profile incomplete, degrading", error_type=type(e).__name__, error=str(e)
            )
        try:
            return partial_profile_from(display_name, dict(data))
        except Exception as e:
            logger.warning("Own profile unusable, using cached name only", error=str(e))
            return partial_profile_from(display_name)
