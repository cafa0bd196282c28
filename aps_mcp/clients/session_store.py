"""File-backed storage for the interactive user session."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Optional, Protocol, TYPE_CHECKING

from pydantic import ValidationError

from aps_mcp.models.oauth import InteractiveTokenRecord

if TYPE_CHECKING:  # pragma: no cover - type hints only
    from aps_mcp.services.token_cipher import TokenCipherService

logger = logging.getLogger(__name__)


class SessionStore(Protocol):
    """Narrow persistence interface for the interactive session record."""

    def load(self) -> Optional[InteractiveTokenRecord]: ...

    def save(self, record: InteractiveTokenRecord) -> None: ...

    def clear(self) -> None: ...


class SessionFileStore:
    """Persist a single ``InteractiveTokenRecord`` as JSON in a user-scoped file.

    When a cipher is supplied the token fields are stored encrypted and the
    record carries ``"encrypted": true``.
    """

    def __init__(
        self, path: str | Path, cipher: Optional["TokenCipherService"] = None
    ) -> None:
        self._path = Path(path).expanduser()
        self._cipher = cipher

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> Optional[InteractiveTokenRecord]:
        if not self._path.exists():
            return None
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.warning("Ignoring unreadable session file %s: %s", self._path, exc)
            return None
        if not isinstance(data, dict):
            logger.warning("Ignoring session file %s: not a JSON object", self._path)
            return None

        if data.pop("encrypted", False):
            if self._cipher is None:
                logger.warning(
                    "Session file %s is encrypted but no APS_SESSION_SECRET is set",
                    self._path,
                )
                return None
            try:
                data["access_token"] = self._cipher.decrypt(data["access_token"])
                data["refresh_token"] = self._cipher.decrypt(data["refresh_token"])
            except (KeyError, TypeError, AttributeError, ValueError) as exc:
                logger.warning("Failed to decrypt session file %s: %s", self._path, exc)
                return None

        try:
            return InteractiveTokenRecord.model_validate(data)
        except ValidationError as exc:
            logger.warning("Session file %s is malformed: %s", self._path, exc)
            return None

    def save(self, record: InteractiveTokenRecord) -> None:
        data = record.model_dump(mode="json")
        if self._cipher is not None:
            data["access_token"] = self._cipher.encrypt(record.access_token)
            data["refresh_token"] = self._cipher.encrypt(record.refresh_token)
            data["encrypted"] = True

        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._path.with_suffix(self._path.suffix + ".tmp")
        tmp_path.write_text(json.dumps(data, indent=2), encoding="utf-8")
        os.chmod(tmp_path, 0o600)
        os.replace(tmp_path, self._path)

    def clear(self) -> None:
        try:
            self._path.unlink()
        except FileNotFoundError:
            pass


__all__ = ["SessionFileStore", "SessionStore"]
