import json

from saju_client.services.session_store import SessionStore


def test_in_memory_session():
    store = SessionStore()
    assert store.is_authenticated is False

    store.set_token("abc")
    store.cache_user(display_name="김민지")
    store.cache_user(email="m@example.com")

    assert store.is_authenticated is True
    assert store.display_name == "김민지"
    assert store.email == "m@example.com"

    store.clear_token()
    assert store.token is None
    assert store.display_name == "김민지"


def test_session_survives_reload(tmp_path):
    path = tmp_path / "nested" / "session.json"
    store = SessionStore(path)
    store.set_token("abc")
    store.cache_user(display_name="김민지", email="m@example.com")

    reloaded = SessionStore(path)

    assert reloaded.token == "abc"
    assert reloaded.display_name == "김민지"
    assert json.loads(path.read_text(encoding="utf-8"))["name"] == "김민지"


def test_clear_is_persisted(tmp_path):
    path = tmp_path / "session.json"
    store = SessionStore(path)
    store.set_token("abc")
    store.clear()

    assert SessionStore(path).token is None


def test_corrupt_session_file_is_ignored(tmp_path):
    path = tmp_path / "session.json"
    path.write_text("{not json", encoding="utf-8")

    store = SessionStore(path)

    assert store.token is None
    assert store.is_authenticated is False
