"""Online presence JSON API controllers (thin, schema-validated).

Every outcome is answered with HTTP 200 and the ``{code, message, data}``
envelope; ``code`` carries success or failure.
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Type, TypeVar

from flask import Blueprint, current_app, jsonify, request
from pydantic import BaseModel, ValidationError
from werkzeug.exceptions import RequestEntityTooLarge

from presence.core.presence.constants import (
    CODE_FAILED,
    CODE_OK,
    MSG_HEARTBEAT_SUCCESS,
    MSG_INVALID_REQUEST,
    MSG_INVALID_SESSION,
    MSG_LOGIN_SUCCESS,
    MSG_LOGOUT_SUCCESS,
    MSG_SUCCESS,
)
from presence.core.presence.errors import InvalidArgument
from presence.core.presence.schemas import (
    CountResponse,
    Envelope,
    HeartbeatResponse,
    LoginRequest,
    LoginResponse,
    SessionRequest,
    UsersResponse,
    ValidateResponse,
    validation_message,
)
from presence.core.presence.services import PresenceService

online_api_bp = Blueprint("online_api", __name__)

S = TypeVar("S", bound=BaseModel)


def _service() -> PresenceService:
    return current_app.extensions["presence_service"]


def _envelope(code: int = CODE_OK, message: str = MSG_SUCCESS, data: Optional[Dict[str, Any]] = None):
    return jsonify(Envelope(code=code, message=message, data=data).to_json()), 200


def _fail(message: str, data: Optional[Dict[str, Any]] = None):
    return _envelope(CODE_FAILED, message, data)


def _parse(schema: Type[S]) -> S:
    # Body is JSON whatever the Content-Type says.
    try:
        payload = request.get_json(force=True, silent=True)
    except RequestEntityTooLarge:
        # silent= does not cover oversized bodies
        raise InvalidArgument(MSG_INVALID_REQUEST) from None
    if not isinstance(payload, dict):
        raise InvalidArgument(MSG_INVALID_REQUEST)
    try:
        return schema.model_validate(payload)
    except ValidationError as exc:
        raise InvalidArgument(validation_message(exc)) from exc


@online_api_bp.get("/count")
def online_count():
    result = CountResponse(**_service().count())
    return _envelope(data=result.model_dump())


@online_api_bp.get("/users")
def online_users():
    result = UsersResponse(**_service().list_users())
    return _envelope(data=result.model_dump())


@online_api_bp.post("/login")
def login():
    try:
        data = _parse(LoginRequest)
        result = LoginResponse(**_service().login(data.user_id))
    except InvalidArgument as exc:
        return _fail(str(exc))
    return _envelope(message=MSG_LOGIN_SUCCESS, data=result.model_dump())


@online_api_bp.post("/heartbeat")
def heartbeat():
    try:
        data = _parse(SessionRequest)
    except InvalidArgument as exc:
        return _fail(str(exc))
    alive, payload = _service().heartbeat(data.session_id)
    result = HeartbeatResponse(**payload).model_dump()
    if not alive:
        return _fail(MSG_INVALID_SESSION, result)
    return _envelope(message=MSG_HEARTBEAT_SUCCESS, data=result)


@online_api_bp.post("/logout")
def logout():
    try:
        data = _parse(SessionRequest)
    except InvalidArgument as exc:
        return _fail(str(exc))
    _service().logout(data.session_id)
    return _envelope(message=MSG_LOGOUT_SUCCESS)


@online_api_bp.post("/validate")
def validate():
    try:
        data = _parse(SessionRequest)
    except InvalidArgument as exc:
        return _fail(str(exc))
    result = ValidateResponse(**_service().validate(data.session_id))
    return _envelope(data=result.model_dump())


__all__ = ["online_api_bp"]
