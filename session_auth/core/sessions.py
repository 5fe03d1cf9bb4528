"""
Server-side session store.

Maps an opaque session id (carried in the session cookie) to the id of the
logged-in user. Single process, in-memory: sessions do not survive restarts
and are not shared between workers.

- Sliding expiry: every successful read pushes expires_at forward
- Session ids are regenerated on login
- Expired entries are dropped when read and by purge_expired(), which the
  purge task runs periodically
"""
import asyncio
import logging
import secrets
from dataclasses import dataclass, replace
from datetime import datetime, timedelta, timezone
from threading import Lock

logger = logging.getLogger(__name__)


class SessionStoreError(Exception):
    """Raised by a session store that cannot serve a request."""

    pass


@dataclass
class UserSession:
    """Per-client session data. Holds at most one user reference."""

    session_id: str | None = None
    user_id: int | None = None
    expires_at: datetime | None = None

    @property
    def is_authenticated(self) -> bool:
        return self.user_id is not None


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SessionStore:
    """Thread-safe in-memory session store.

    Callers receive copies; changes only take effect through save() or
    regenerate().
    """

    def __init__(self, max_age: timedelta):
        self.max_age = max_age
        self._sessions: dict[str, UserSession] = {}
        self._lock = Lock()
        self._closed = False
        self._purge_task: asyncio.Task | None = None

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def _check_open(self) -> None:
        if self._closed:
            raise SessionStoreError("Session store is closed")

    def get(self, session_id: str | None, now: datetime | None = None) -> UserSession | None:
        """Return a live session by id, refreshing its expiry, or None."""
        if not session_id:
            return None
        now = now or _utcnow()
        with self._lock:
            self._check_open()
            stored = self._sessions.get(session_id)
            if stored is None:
                return None
            if stored.expires_at is not None and stored.expires_at <= now:
                del self._sessions[session_id]
                return None
            stored.expires_at = now + self.max_age
            return replace(stored)

    def save(self, session: UserSession, now: datetime | None = None) -> UserSession:
        """Persist the session, assigning a new id if it has none."""
        now = now or _utcnow()
        with self._lock:
            self._check_open()
            if not session.session_id:
                session.session_id = secrets.token_urlsafe(32)
            session.expires_at = now + self.max_age
            self._sessions[session.session_id] = replace(session)
            return session

    def regenerate(self, session: UserSession, now: datetime | None = None) -> UserSession:
        """Move the session to a fresh id, dropping the old one."""
        with self._lock:
            self._check_open()
            if session.session_id:
                self._sessions.pop(session.session_id, None)
        session.session_id = None
        return self.save(session, now=now)

    def destroy(self, session_id: str | None) -> bool:
        """Remove a session. Returns False if there was nothing to remove."""
        if not session_id:
            return False
        with self._lock:
            self._check_open()
            return self._sessions.pop(session_id, None) is not None

    def purge_expired(self, now: datetime | None = None) -> int:
        now = now or _utcnow()
        with self._lock:
            expired = [
                sid
                for sid, stored in self._sessions.items()
                if stored.expires_at is not None and stored.expires_at <= now
            ]
            for sid in expired:
                del self._sessions[sid]
        if expired:
            logger.info("Purged %d expired sessions", len(expired))
        return len(expired)

    async def start_purge_task(self, interval_seconds: float) -> None:
        """Purge expired sessions in the background every interval_seconds."""

        async def purge_loop():
            while True:
                await asyncio.sleep(interval_seconds)
                self.purge_expired()

        self._purge_task = asyncio.create_task(purge_loop())
        logger.info("Session purge task started (interval: %ss)", interval_seconds)

    async def stop_purge_task(self) -> None:
        if self._purge_task and not self._purge_task.done():
            self._purge_task.cancel()
            try:
                await self._purge_task
            except asyncio.CancelledError:
                pass
            logger.info("Session purge task stopped")
        self._purge_task = None

    def close(self) -> None:
        """Drop all sessions and refuse further use (application shutdown)."""
        with self._lock:
            self._sessions.clear()
            self._closed = True
