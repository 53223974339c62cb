"""In-memory presence records."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Tuple


@dataclass
class PresenceSession:
    """One client's claim to be online."""

    session_id: str
    user_id: str
    last_active: float
    created_at: float

    def idle_for(self, now: float) -> float:
        return now - self.last_active

    def is_expired(self, now: float, ttl_seconds: float) -> bool:
        return self.idle_for(now) > ttl_seconds


@dataclass
class SweepReport:
    """Outcome of a single sweep pass."""

    evicted: List[Tuple[str, str]] = field(default_factory=list)
    users_offline: List[str] = field(default_factory=list)
    errors: int = 0
    online_count: int = 0

    @property
    def evicted_count(self) -> int:
        return len(self.evicted)


@dataclass(frozen=True)
class RegistryStats:
    online_count: int
    session_count: int
    ttl_seconds: float


__all__ = ["PresenceSession", "SweepReport", "RegistryStats"]
