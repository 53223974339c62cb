"""Presence service façade: one registry call per public operation."""

from __future__ import annotations

from typing import List, Optional

from presence.core.clock import epoch_millis
from presence.core.presence.registry import PresenceRegistry


class PresenceService:
    """Operations invoked by the HTTP layer."""

    def __init__(self, registry: Optional[PresenceRegistry] = None):
        self.registry = registry or PresenceRegistry()

    def login(self, user_id: str) -> dict:
        session_id = self.registry.login(user_id)
        return {"session_id": session_id, "online_count": self.registry.count()}

    def heartbeat(self, session_id: str) -> tuple[bool, dict]:
        alive = self.registry.heartbeat(session_id)
        return alive, {"online_count": self.registry.count()}

    def logout(self, session_id: str) -> bool:
        return self.registry.logout(session_id)

    def validate(self, session_id: str) -> dict:
        return {"valid": self.registry.validate(session_id)}

    def count(self) -> dict:
        return {"online_count": self.registry.count(), "timestamp": epoch_millis()}

    def list_users(self) -> dict:
        users: List[str] = self.registry.list_users()
        return {"users": users, "count": len(users)}

    def health(self) -> dict:
        return {"status": "healthy", "timestamp": epoch_millis()}


__all__ = ["PresenceService"]
