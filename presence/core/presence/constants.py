"""Presence engine constants."""

from __future__ import annotations

# Idle interval after which a session is eligible for eviction
DEFAULT_TTL_SECONDS = 60
# Interval between sweeper passes
DEFAULT_SWEEP_INTERVAL_SECONDS = 30

SESSION_ID_PREFIX = "sess_"
SESSION_ID_STRATEGY_TIMESTAMP = "timestamp"
SESSION_ID_STRATEGY_TOKEN = "token"
SESSION_ID_MAX_ATTEMPTS = 32

# Envelope codes and messages (legacy wire contract)
CODE_OK = 0
CODE_FAILED = -1
MSG_SUCCESS = "success"
MSG_LOGIN_SUCCESS = "login success"
MSG_HEARTBEAT_SUCCESS = "heartbeat success"
MSG_LOGOUT_SUCCESS = "logout success"
MSG_INVALID_SESSION = "invalid session"
MSG_INVALID_REQUEST = "invalid request"

__all__ = [
    "DEFAULT_TTL_SECONDS",
    "DEFAULT_SWEEP_INTERVAL_SECONDS",
    "SESSION_ID_PREFIX",
    "SESSION_ID_STRATEGY_TIMESTAMP",
    "SESSION_ID_STRATEGY_TOKEN",
    "SESSION_ID_MAX_ATTEMPTS",
    "CODE_OK",
    "CODE_FAILED",
    "MSG_SUCCESS",
    "MSG_LOGIN_SUCCESS",
    "MSG_HEARTBEAT_SUCCESS",
    "MSG_LOGOUT_SUCCESS",
    "MSG_INVALID_SESSION",
    "MSG_INVALID_REQUEST",
]
