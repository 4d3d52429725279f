"""
Client wiring: one shared session and API client, plus per-screen factories
for the compatibility coordinator and the records service.
"""

from contextlib import asynccontextmanager
from dataclasses import dataclass

from saju_client.config import settings
from saju_client.features.records import RecordsService
from saju_client.infrastructure.observability.logging import get_logger, setup_logging
from saju_client.services.compatibility_workflow import CompatibilityWorkflowCoordinator
from saju_client.services.fortune_api_service import FortuneApiService
from saju_client.services.presence_timer import PresenceTimer
from saju_client.services.session_store import SessionStore

logger = get_logger(__name__)


@dataclass(slots=True)
class ClientContext:
    session: SessionStore
    api: FortuneApiService

    def new_compatibility_coordinator(self) -> CompatibilityWorkflowCoordinator:
        """Fresh coordinator (and overlay timer) for one visit of the counterpart screen."""
        return CompatibilityWorkflowCoordinator(self.api, self.session, PresenceTimer())

    def records_service(self) -> RecordsService:
        return RecordsService(self.api, self.session)


@asynccontextmanager
async def client_context(session: SessionStore | None = None, **api_kwargs):
    """Set up logging and the API client, closing the client on exit."""
    setup_logging(log_level=settings.LOG_LEVEL)
    session = session or SessionStore.from_settings()
    api = FortuneApiService(session, **api_kwargs)
    logger.info(
        "Client starting",
        environment=settings.environment,
        api_root=settings.api_root(),
        authenticated=session.is_authenticated,
    )
    try:
        yield ClientContext(session=session, api=api)
    finally:
        await api.close()
        logger.info("Client closed")
