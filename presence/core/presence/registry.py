"""Authoritative in-memory registry of live sessions and online users.

All state lives behind a single lock:

* ``_sessions`` maps session id to its :class:`PresenceSession`.
* ``_user_refs`` maps user id to the number of live sessions it holds; a user
  is online exactly while it has an entry here.
* ``_online_count`` caches ``len(_user_refs)`` so ``count()`` can be read
  without taking the lock. It is only written while the lock is held.
"""

from __future__ import annotations

import dataclasses
import logging
import threading
from typing import Dict, List, Optional, Tuple

from presence.core.clock import Clock, MonotonicClock
from presence.core.presence.constants import DEFAULT_TTL_SECONDS
from presence.core.presence.errors import InvalidArgument
from presence.core.presence.models import PresenceSession, RegistryStats, SweepReport
from presence.core.presence.session_ids import SessionIdGenerator, TimestampSessionIdGenerator

logger = logging.getLogger(__name__)


class PresenceRegistry:
    """Session table plus derived online-user set, guarded by one lock."""

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Optional[Clock] = None,
        id_generator: Optional[SessionIdGenerator] = None,
    ) -> None:
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        self.ttl_seconds = float(ttl_seconds)
        self.clock = clock or MonotonicClock()
        self.id_generator = id_generator or TimestampSessionIdGenerator()
        self._lock = threading.Lock()
        self._sessions: Dict[str, PresenceSession] = {}
        self._user_refs: Dict[str, int] = {}
        self._online_count = 0

    # -- internal helpers (caller holds the lock) --

    def _refresh_count(self) -> None:
        self._online_count = len(self._user_refs)

    def _remove(self, session_id: str) -> Optional[PresenceSession]:
        session = self._sessions.pop(session_id, None)
        if session is None:
            return None
        remaining = self._user_refs.get(session.user_id, 0) - 1
        if remaining > 0:
            self._user_refs[session.user_id] = remaining
        else:
            self._user_refs.pop(session.user_id, None)
        return session

    # -- mutations --

    def login(self, user_id: str) -> str:
        """Open a new session for user_id and return its id."""
        if not isinstance(user_id, str) or not user_id:
            raise InvalidArgument("user_id is required")
        with self._lock:
            now = self.clock.now()
            session_id = self.id_generator.mint(self._sessions.__contains__)
            self._sessions[session_id] = PresenceSession(
                session_id=session_id,
                user_id=user_id,
                last_active=now,
                created_at=now,
            )
            self._user_refs[user_id] = self._user_refs.get(user_id, 0) + 1
            self._refresh_count()
        logger.debug("Session %s opened for user %s", session_id, user_id)
        return session_id

    def heartbeat(self, session_id: str) -> bool:
        """Refresh last-active for a live session; False for unknown ids."""
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                return False
            session.last_active = self.clock.now()
            return True

    def logout(self, session_id: str) -> bool:
        """Close a session. Idempotent; returns whether anything was removed."""
        with self._lock:
            session = self._remove(session_id)
            if session is None:
                return False
            self._refresh_count()
        logger.debug("Session %s closed for user %s", session_id, session.user_id)
        return True

    def sweep(self, now: Optional[float] = None) -> int:
        """Evict sessions idle for longer than the TTL; return how many went."""
        return self.sweep_detailed(now).evicted_count

    def sweep_detailed(self, now: Optional[float] = None) -> SweepReport:
        report = SweepReport()
        failures: List[Tuple[str, Exception]] = []
        with self._lock:
            current = self.clock.now() if now is None else now
            for session_id, session in list(self._sessions.items()):
                try:
                    if not session.is_expired(current, self.ttl_seconds):
                        continue
                    self._remove(session_id)
                except Exception as exc:
                    failures.append((session_id, exc))
                    continue
                report.evicted.append((session_id, session.user_id))
                if session.user_id not in self._user_refs:
                    report.users_offline.append(session.user_id)
            self._refresh_count()
            report.online_count = self._online_count
        report.errors = len(failures)
        for session_id, exc in failures:
            logger.error("Skipped session %s during sweep", session_id, exc_info=exc)
        return report

    def clear(self) -> None:
        with self._lock:
            self._sessions.clear()
            self._user_refs.clear()
            self._refresh_count()

    # -- queries --

    def validate(self, session_id: str) -> bool:
        with self._lock:
            return session_id in self._sessions

    def count(self) -> int:
        """Distinct online users; lock-free read of the cached value."""
        return self._online_count

    def list_users(self) -> List[str]:
        with self._lock:
            users = list(self._user_refs)
        return sorted(users)

    def session_count(self) -> int:
        with self._lock:
            return len(self._sessions)

    def sessions_for(self, user_id: str) -> List[str]:
        with self._lock:
            return [sid for sid, s in self._sessions.items() if s.user_id == user_id]

    def get(self, session_id: str) -> Optional[PresenceSession]:
        """Copy of the session record, or None."""
        with self._lock:
            session = self._sessions.get(session_id)
            return dataclasses.replace(session) if session else None

    def sessions(self) -> List[PresenceSession]:
        with self._lock:
            return [dataclasses.replace(s) for s in self._sessions.values()]

    def stats(self) -> RegistryStats:
        with self._lock:
            return RegistryStats(
                online_count=self._online_count,
                session_count=len(self._sessions),
                ttl_seconds=self.ttl_seconds,
            )


__all__ = ["PresenceRegistry"]
