import pytest

from saju_client.models.domain.compatibility_domain import CompatibilityResult
from saju_client.services.presence_timer import PresenceTimer
from saju_client.services.session_store import SessionStore


class ManualTimeline:
    """Fake monotonic clock plus call_later-style scheduler driven by advance()."""

    def __init__(self):
        self.now_ms = 0.0
        self._pending: list[list] = []  # [due_ms, callback, cancelled]
        self.cancel_calls = 0

    def clock(self) -> float:
        return self.now_ms

    def schedule(self, delay_ms: float, callback):
        entry = [self.now_ms + delay_ms, callback, False]
        self._pending.append(entry)

        def cancel():
            self.cancel_calls += 1
            entry[2] = True

        return cancel

    @property
    def scheduled(self) -> int:
        return len([e for e in self._pending if not e[2]])

    def advance(self, ms: float) -> None:
        target = self.now_ms + ms
        while True:
            due = sorted(
                (e for e in self._pending if not e[2] and e[0] <= target), key=lambda e: e[0]
            )
            if not due:
                break
            entry = due[0]
            self._pending.remove(entry)
            self.now_ms = entry[0]
            entry[1]()
        self.now_ms = target


class FakeFortuneBackend:
    def __init__(self):
        self.calls: list[tuple] = []
        self.register_response: dict = {"user": {"id": 42}}
        self.compatibility = CompatibilityResult(score=91, analysis="잘 맞아요")
        self.own_profile: dict | Exception = {
            "birth_year": 1990,
            "birth_month": 5,
            "birth_day": 3,
            "birth_hour": 7,
            "birth_minute": 30,
            "birth_place": "부산",
            "is_lunar": False,
            "user": {"gender": "F"},
        }
        self.records: list = []

    async def register_entity(self, identity, profile):
        self.calls.append(("register_entity", identity, profile))
        return self.register_response

    async def compute_compatibility(self, entity_id):
        self.calls.append(("compute_compatibility", entity_id))
        return self.compatibility

    async def fetch_own_profile(self):
        self.calls.append(("fetch_own_profile",))
        if isinstance(self.own_profile, Exception):
            raise self.own_profile
        return self.own_profile

    async def list_records(self, limit=20):
        self.calls.append(("list_records", limit))
        return self.records

    async def create_record(self, request):
        self.calls.append(("create_record", request))
        return {"id": 1, **request.to_payload()}

    def count(self, name: str) -> int:
        return len([c for c in self.calls if c[0] == name])


@pytest.fixture
def timeline():
    return ManualTimeline()


@pytest.fixture
def presence(timeline):
    return PresenceTimer(1200, clock=timeline.clock, scheduler=timeline.schedule)


@pytest.fixture
def session():
    store = SessionStore()
    store.set_token("token-123")
    store.cache_user(display_name="김민지", email="minji@example.com")
    return store


@pytest.fixture
def fake_backend():
    return FakeFortuneBackend()


@pytest.fixture
def partner_form():
    return {
        "user_name": "윤성연",
        "gender": "male",
        "calendar": "solar",
        "birth_date": "1991-01-20",
        "birth_time": "01:00",
        "birth_city": "",
    }
