"""
Fortune backend API client.
Handles auth, saju info, compatibility, fortune and records endpoints over
httpx with bearer authentication from the SessionStore.
"""

import asyncio
import time
from typing import Any, Protocol

import httpx
from pydantic import ValidationError as PydanticValidationError

from saju_client.config import settings
from saju_client.errors import ProtocolError, RemoteError
from saju_client.infrastructure.observability.logging import get_logger, log_api_call
from saju_client.models.api.auth_request import LoginRequest, RegisterRequest
from saju_client.models.api.record_request import CreateRecordRequest
from saju_client.models.domain.compatibility_domain import CompatibilityResult, EphemeralIdentity
from saju_client.models.domain.profile_domain import BirthProfile
from saju_client.models.domain.record_domain import RawRecord
from saju_client.services.session_store import SessionStore

logger = get_logger(__name__)

RETRY_STATUS_CODES = {429, 500, 502, 503, 504}
DEFAULT_RECORDS_LIMIT = 20
DEFAULT_SIMILAR_LIMIT = 10


class FortuneBackend(Protocol):
    """Remote operations the compatibility workflow and records screen depend on."""

    async def register_entity(
        self, identity: EphemeralIdentity, profile: BirthProfile
    ) -> dict[str, Any]: ...

    async def compute_compatibility(self, entity_id: int | str) -> CompatibilityResult: ...

    async def fetch_own_profile(self) -> dict[str, Any]: ...

    async def list_records(self, limit: int = DEFAULT_RECORDS_LIMIT) -> list[RawRecord]: ...

    async def create_record(self, request: CreateRecordRequest) -> dict[str, Any]: ...


class FortuneApiService:
    """
    Client for the fortune backend (/api/v1).

    GET requests are retried with exponential backoff on 429/5xx and transport
    errors; POST requests are sent exactly once since registration and record
    creation are not idempotent.
    """

    def __init__(
        self,
        session: SessionStore,
        *,
        base_url: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        http_config = settings.get_http_config()
        self.session = session
        self.max_retries = max(1, http_config["max_retries"])
        self.backoff_factor = http_config["backoff_factor"]
        self._client = httpx.AsyncClient(
            base_url=base_url or settings.api_root(),
            timeout=httpx.Timeout(http_config["timeout"]),
            transport=transport,
        )

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    def _get_headers(self) -> dict:
        headers = {"Content-Type": "application/json", "Accept": "application/json"}
        if self.session.token:
            headers["Authorization"] = f"Bearer {self.session.token}"
        return headers

    async def _send(self, method: str, path: str, operation: str, **kwargs) -> httpx.Response:
        attempts = self.max_retries if method == "GET" else 1
        for attempt in range(1, attempts + 1):
            started = time.perf_counter()
            try:
                response = await self._client.request(
                    method, path, headers=self._get_headers(), **kwargs
                )
            except httpx.RequestError as e:
                if attempt >= attempts:
                    logger.error(f"Fortune API {operation} request failed", error=str(e))
                    raise RemoteError(
                        f"Network error during {operation}: {e}", operation=operation
                    ) from e
                backoff = self.backoff_factor * (2 ** (attempt - 1))
                logger.debug(
                    "Fortune API request error, retrying",
                    operation=operation,
                    attempt=attempt,
                    error=str(e),
                    backoff_seconds=backoff,
                )
                await asyncio.sleep(backoff)
                continue

            log_api_call(
                method, path, response.status_code, (time.perf_counter() - started) * 1000
            )
            if response.status_code in RETRY_STATUS_CODES and attempt < attempts:
                backoff = self.backoff_factor * (2 ** (attempt - 1))
                logger.debug(
                    "Fortune API retrying request",
                    operation=operation,
                    attempt=attempt,
                    status_code=response.status_code,
                    backoff_seconds=backoff,
                )
                await asyncio.sleep(backoff)
                continue
            return response
        raise RuntimeError("Fortune API retry loop exhausted")

    def _handle_api_response(self, response: httpx.Response, operation: str) -> Any:
        """
        Parse a backend response.

        Raises:
            RemoteError: non-success status
            ProtocolError: success status with a body that is not JSON
        """
        if response.is_success:
            try:
                return response.json() if response.content else {}
            except ValueError as e:
                logger.error(f"Failed to parse Fortune API {operation} response", error=str(e))
                raise ProtocolError(f"Invalid response format: {e}", operation=operation) from e

        try:
            error_data = response.json() if response.content else {}
        except ValueError:
            error_data = {}
        if not isinstance(error_data, dict):
            error_data = {}

        message = (
            error_data.get("error")
            or error_data.get("message")
            or f"HTTP error! status: {response.status_code}"
        )
        logger.error(
            f"Fortune API {operation} failed",
            status_code=response.status_code,
            error_message=message,
        )
        raise RemoteError(
            str(message),
            operation=operation,
            status_code=response.status_code,
            response_data=error_data,
        )

    async def _request(self, method: str, path: str, operation: str, **kwargs) -> Any:
        response = await self._send(method, path, operation, **kwargs)
        return self._handle_api_response(response, operation)

    # ------------------------------------------------------------------
    # Auth
    # ------------------------------------------------------------------

    async def login(self, email: str, password: str) -> dict[str, Any]:
        """Log in, storing the token and caching the display fields."""
        body = LoginRequest(email=email, password=password)
        data = await self._request("POST", "/auth/login", "login", json=body.model_dump())

        if data.get("token"):
            self.session.set_token(data["token"])

        user = data.get("user")
        if user:
            self.session.cache_user(display_name=user.get("name"), email=user.get("email"))
        else:
            self.session.cache_user(email=email)

        logger.info("Logged in", has_user=bool(user))
        return data

    async def register(self, request: RegisterRequest) -> dict[str, Any]:
        """Register the signed-in user's own account and keep its token."""
        data = await self._request(
            "POST", "/auth/register", "register", json=request.model_dump(exclude_none=True)
        )
        if data.get("token"):
            self.session.set_token(data["token"])
        return data

    async def logout(self) -> None:
        """Best-effort server logout; the local session is always cleared."""
        try:
            await self._request("POST", "/auth/logout", "logout")
        finally:
            self.session.clear()

    async def get_me(self) -> dict[str, Any]:
        return await self._request("GET", "/auth/me", "get_me")

    async def get_current_user_id(self) -> int | str | None:
        data = await self.get_me()
        return data.get("user_id") or data.get("id")

    # ------------------------------------------------------------------
    # Compatibility workflow operations
    # ------------------------------------------------------------------

    async def register_entity(
        self, identity: EphemeralIdentity, profile: BirthProfile
    ) -> dict[str, Any]:
        """
        Register a throwaway account carrying `profile`.

        The response token is not stored; the session stays the signed-in user's.
        """
        request = RegisterRequest(
            email=identity.email, password=identity.password, **profile.to_wire_fields()
        )
        return await self._request(
            "POST",
            "/auth/register",
            "register_entity",
            json=request.model_dump(exclude_none=True),
        )

    async def compute_compatibility(self, entity_id: int | str) -> CompatibilityResult:
        data = await self._request(
            "GET",
            "/compatibility/calculate",
            "compute_compatibility",
            params={"user2_id": entity_id},
        )
        if not isinstance(data, dict):
            raise ProtocolError(
                "compatibility response is not an object", operation="compute_compatibility"
            )
        return CompatibilityResult.model_validate(data)

    async def fetch_own_profile(self) -> dict[str, Any]:
        """GET /fortune/info; fails with RemoteError when no saju info is stored."""
        return await self._request("GET", "/fortune/info", "fetch_own_profile")

    # ------------------------------------------------------------------
    # Fortune info
    # ------------------------------------------------------------------

    async def save_fortune_info(self, profile: BirthProfile) -> dict[str, Any]:
        fields = profile.to_wire_fields()
        fields.pop("name", None)
        fields.pop("gender", None)
        return await self._request("POST", "/fortune/info", "save_fortune_info", json=fields)

    async def get_today_fortune(self) -> dict[str, Any]:
        return await self._request("GET", "/fortune/today", "get_today_fortune")

    async def find_similar_friends(self, limit: int = DEFAULT_SIMILAR_LIMIT) -> dict[str, Any]:
        return await self._request(
            "GET", "/fortune/similar", "find_similar_friends", params={"limit": limit}
        )

    async def get_similar_matches(self) -> dict[str, Any]:
        """Most similar, best-matching and worst-matching users."""
        return await self._request("GET", "/fortune/similar-matches", "get_similar_matches")

    # ------------------------------------------------------------------
    # Records
    # ------------------------------------------------------------------

    async def list_records(self, limit: int = DEFAULT_RECORDS_LIMIT) -> list[RawRecord]:
        """Recent records, most recent first. Entries that fail validation are skipped."""
        data = await self._request("GET", "/records", "list_records", params={"limit": limit})
        items = data.get("records") if isinstance(data, dict) else None

        records = []
        for item in items or []:
            try:
                records.append(RawRecord.model_validate(item))
            except PydanticValidationError as e:
                logger.warning("Skipping malformed record", error=str(e))
        return records

    async def create_record(self, request: CreateRecordRequest) -> dict[str, Any]:
        return await self._request("POST", "/records", "create_record", json=request.to_payload())

    async def get_spouse_image(self) -> dict[str, Any]:
        return await self._request("GET", "/records/spouse-image", "get_spouse_image")
