"""Presence API DTOs and schemas."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ValidationError, field_validator

from presence.core.presence.constants import CODE_OK, MSG_INVALID_REQUEST, MSG_SUCCESS


def _require_text(value: str) -> str:
    if not value:
        raise ValueError("empty")
    return value


class LoginRequest(BaseModel):
    user_id: str

    @field_validator("user_id")
    @classmethod
    def user_id_not_blank(cls, value: str) -> str:
        return _require_text(value)


class SessionRequest(BaseModel):
    session_id: str

    @field_validator("session_id")
    @classmethod
    def session_id_not_blank(cls, value: str) -> str:
        return _require_text(value)


class LoginResponse(BaseModel):
    session_id: str
    online_count: int


class HeartbeatResponse(BaseModel):
    online_count: int


class ValidateResponse(BaseModel):
    valid: bool


class CountResponse(BaseModel):
    online_count: int
    timestamp: int


class UsersResponse(BaseModel):
    users: List[str]
    count: int


class HealthResponse(BaseModel):
    status: str
    timestamp: int


class Envelope(BaseModel):
    code: int = CODE_OK
    message: str = MSG_SUCCESS
    data: Optional[Dict[str, Any]] = None

    def to_json(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)


def validation_message(exc: ValidationError) -> str:
    """Human message for a request that failed schema validation."""
    for err in exc.errors():
        loc = err.get("loc") or ()
        if not loc:
            continue
        field = str(loc[0])
        if err.get("type") in ("missing", "value_error") or err.get("input") in (None, ""):
            return f"{field} is required"
    return MSG_INVALID_REQUEST


__all__ = [
    "LoginRequest",
    "SessionRequest",
    "LoginResponse",
    "HeartbeatResponse",
    "ValidateResponse",
    "CountResponse",
    "UsersResponse",
    "HealthResponse",
    "Envelope",
    "validation_message",
]
