try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover - fallback for direct execution
    import _bootstrap  # type: ignore # noqa: F401

import json
from datetime import datetime, timezone

import pytest

from aps_mcp.clients.session_store import SessionFileStore
from aps_mcp.models.oauth import InteractiveTokenRecord
from aps_mcp.services.token_cipher import TokenCipherService


def _record() -> InteractiveTokenRecord:
    return InteractiveTokenRecord(
        access_token="user-access",
        refresh_token="user-refresh",
        expires_at=datetime(2024, 5, 1, 13, 0, tzinfo=timezone.utc),
        scope="data:read data:write",
    )


def test_plain_round_trip(tmp_path) -> None:
    store = SessionFileStore(tmp_path / "nested" / "session.json")

    store.save(_record())

    assert store.load() == _record()
    on_disk = json.loads(store.path.read_text(encoding="utf-8"))
    assert on_disk["access_token"] == "user-access"
    assert "encrypted" not in on_disk


def test_encrypted_round_trip(tmp_path) -> None:
    cipher = TokenCipherService(secret="session-secret")
    store = SessionFileStore(tmp_path / "session.json", cipher)

    store.save(_record())

    raw = store.path.read_text(encoding="utf-8")
    assert "user-access" not in raw and "user-refresh" not in raw
    assert json.loads(raw)["encrypted"] is True
    assert store.load() == _record()


def test_encrypted_file_without_matching_secret_is_ignored(tmp_path) -> None:
    path = tmp_path / "session.json"
    SessionFileStore(path, TokenCipherService(secret="one")).save(_record())

    assert SessionFileStore(path).load() is None
    assert SessionFileStore(path, TokenCipherService(secret="two")).load() is None


def test_missing_and_corrupt_files_load_as_none(tmp_path) -> None:
    path = tmp_path / "session.json"
    store = SessionFileStore(path)

    assert store.load() is None

    path.write_text("{not json", encoding="utf-8")
    assert store.load() is None

    path.write_text(json.dumps({"access_token": "only"}), encoding="utf-8")
    assert store.load() is None


@pytest.mark.parametrize("content", ["[]", "null", "\"token\"", "42"])
def test_non_object_session_file_loads_as_none(tmp_path, content: str) -> None:
    path = tmp_path / "session.json"
    path.write_text(content, encoding="utf-8")

    assert SessionFileStore(path).load() is None


def test_clear_removes_file_and_tolerates_absence(tmp_path) -> None:
    store = SessionFileStore(tmp_path / "session.json")
    store.save(_record())

    store.clear()
    store.clear()

    assert not store.path.exists()
    assert store.load() is None
