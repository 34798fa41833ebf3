"""
Durable session identifier: reuse what is stored, otherwise mint and persist.

When storage is missing or broken the identifier lives only as long as the
process. Conversations then do not survive a restart, which is accepted.
"""

import logging
import uuid
from pathlib import Path
from typing import Callable, Optional, Protocol

from usbmkt_agent.errors import StorageError

logger = logging.getLogger(__name__)

DEFAULT_SESSION_FILE = Path.home() / ".usbmkt" / "current_session_id"


def new_session_id() -> str:
    # uuid4: 122 random bits from os.urandom
    return str(uuid.uuid4())


class SessionStore(Protocol):
    def read(self) -> Optional[str]: ...

    def write(self, session_id: str) -> None: ...


class FileSessionStore:
    """One file holding the current session identifier."""

    def __init__(self, path: Path = DEFAULT_SESSION_FILE):
        self.path = Path(path)

    def read(self) -> Optional[str]:
        try:
            value = self.path.read_text(encoding="utf-8").strip()
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as e:
            raise StorageError(f"Cannot read session file {self.path}: {e}")
        return value or None

    def write(self, session_id: str) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(session_id, encoding="utf-8")
        except OSError as e:
            raise StorageError(f"Cannot write session file {self.path}: {e}")


class MemorySessionStore:
    def __init__(self, session_id: Optional[str] = None):
        self.session_id = session_id

    def read(self) -> Optional[str]:
        return self.session_id

    def write(self, session_id: str) -> None:
        self.session_id = session_id


class SessionIdentity:
    def __init__(
        self,
        store: Optional[SessionStore] = None,
        generate: Callable[[], str] = new_session_id,
    ):
        self._store = store
        self._generate = generate
        self._current: Optional[str] = None
        self._persistent = store is not None

    @property
    def persistent(self) -> bool:
        """False once storage has proven unusable (or was never given)."""
        return self._persistent

    @property
    def current(self) -> Optional[str]:
        return self._current

    def acquire(self) -> str:
        if self._current:
            return self._current
        stored = self._read()
        if stored:
            logger.info("Reusing stored session id %s", stored)
            self._current = stored
            return stored
        return self._assign(self._generate())

    def rotate(self) -> str:
        session_id = self._generate()
        logger.info("Rotating session id to %s", session_id)
        return self._assign(session_id)

    def adopt(self, session_id: str) -> str:
        """Make a known identifier current, e.g. to resume a conversation."""
        if not session_id or not session_id.strip():
            raise ValueError("session_id must be a non-empty string")
        return self._assign(session_id.strip())

    def _assign(self, session_id: str) -> str:
        self._current = session_id
        if self._store is not None and self._persistent:
            try:
                self._store.write(session_id)
            except StorageError as e:
                self._fallback(e)
        return session_id

    def _read(self) -> Optional[str]:
        if self._store is None or not self._persistent:
            return None
        try:
            return self._store.read()
        except StorageError as e:
            self._fallback(e)
            return None

    def _fallback(self, error: StorageError) -> None:
        logger.warning("Session storage unavailable, id will not survive a restart: %s", error)
        self._persistent = False
