from __future__ import annotations

import asyncio
import uuid
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from app.exceptions.custom import SessionBusyError, SessionNotFoundError
from app.schemas.session import CollectionSession, CollectionState


class SessionStore:
    def __init__(self, max_sessions: int = 1000) -> None:
        self._sessions: dict[str, CollectionSession] = {}
        self._locks: dict[str, asyncio.Lock] = {}
        self._max_sessions = max_sessions

    def __len__(self) -> int:
        return len(self._sessions)

    def _evict(self) -> None:
        if len(self._sessions) < self._max_sessions:
            return
        # Idle sessions go first, then whichever was touched longest ago
        candidates = sorted(
            (
                s for s in self._sessions.values()
                if s.state != CollectionState.submitting
                and not self._locks[s.session_id].locked()
            ),
            key=lambda s: (s.state != CollectionState.idle, s.touched_at or s.created_at),
        )
        while len(self._sessions) >= self._max_sessions and candidates:
            self.remove(candidates.pop(0).session_id)

    def create(self) -> CollectionSession:
        self._evict()
        now = datetime.now(timezone.utc)
        session = CollectionSession(
            session_id=uuid.uuid4().hex[:12],
            created_at=now,
            touched_at=now,
        )
        self._sessions[session.session_id] = session
        self._locks[session.session_id] = asyncio.Lock()
        return session

    def get(self, session_id: str) -> CollectionSession:
        session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        return session

    def remove(self, session_id: str) -> None:
        self._sessions.pop(session_id, None)
        self._locks.pop(session_id, None)

    @asynccontextmanager
    async def acquire(self, session_id: str) -> AsyncIterator[CollectionSession]:
        """Hold the session for one user action; overlapping actions are refused."""
        session = self.get(session_id)
        lock = self._locks[session_id]
        if lock.locked():
            raise SessionBusyError(session_id)
        async with lock:
            session.touched_at = datetime.now(timezone.utc)
            yield session
