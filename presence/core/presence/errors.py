"""Presence engine errors."""

from __future__ import annotations


class PresenceError(Exception):
    """Base error for the presence engine."""


class InvalidArgument(PresenceError, ValueError):
    """Caller supplied a missing or malformed argument."""


class SessionIdExhausted(PresenceError):
    """Generator could not mint an id that is free among live sessions."""


__all__ = ["PresenceError", "InvalidArgument", "SessionIdExhausted"]
