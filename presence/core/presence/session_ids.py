"""Session identifier generators."""

from __future__ import annotations

import random
import secrets
from typing import Callable, Dict, Optional, Type

from presence.core.clock import epoch_millis
from presence.core.presence.constants import (
    SESSION_ID_MAX_ATTEMPTS,
    SESSION_ID_PREFIX,
    SESSION_ID_STRATEGY_TIMESTAMP,
    SESSION_ID_STRATEGY_TOKEN,
)
from presence.core.presence.errors import InvalidArgument, SessionIdExhausted


class SessionIdGenerator:
    """Produces opaque session ids; subclasses implement generate()."""

    prefix = SESSION_ID_PREFIX

    def __init__(self, max_attempts: int = SESSION_ID_MAX_ATTEMPTS) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        self.max_attempts = max_attempts

    def generate(self) -> str:
        raise NotImplementedError

    def mint(self, is_taken: Callable[[str], bool]) -> str:
        """Return a fresh id for which is_taken() is false, retrying on collision."""
        for _ in range(self.max_attempts):
            candidate = self.generate()
            if not is_taken(candidate):
                return candidate
        raise SessionIdExhausted(f"no free session id after {self.max_attempts} attempts")


class TimestampSessionIdGenerator(SessionIdGenerator):
    """sess_<epoch-ms>_<NNNN>: wall-clock stamp plus a 4-digit random suffix."""

    def __init__(
        self,
        *,
        rng: Optional[random.Random] = None,
        millis: Callable[[], int] = epoch_millis,
        max_attempts: int = SESSION_ID_MAX_ATTEMPTS,
    ) -> None:
        super().__init__(max_attempts=max_attempts)
        self._rng = rng or random.Random()
        self._millis = millis

    def generate(self) -> str:
        return f"{self.prefix}{self._millis()}_{self._rng.randint(0, 9999):04d}"


class TokenSessionIdGenerator(SessionIdGenerator):
    """sess_<hex>: cryptographically random id."""

    def __init__(self, nbytes: int = 16, max_attempts: int = SESSION_ID_MAX_ATTEMPTS) -> None:
        super().__init__(max_attempts=max_attempts)
        self.nbytes = nbytes

    def generate(self) -> str:
        return f"{self.prefix}{secrets.token_hex(self.nbytes)}"


GENERATORS: Dict[str, Type[SessionIdGenerator]] = {
    SESSION_ID_STRATEGY_TIMESTAMP: TimestampSessionIdGenerator,
    SESSION_ID_STRATEGY_TOKEN: TokenSessionIdGenerator,
}


def build_generator(strategy: str = SESSION_ID_STRATEGY_TIMESTAMP) -> SessionIdGenerator:
    key = (strategy or SESSION_ID_STRATEGY_TIMESTAMP).strip().lower()
    try:
        return GENERATORS[key]()
    except KeyError:
        raise InvalidArgument(f"unknown session id strategy: {strategy}") from None


__all__ = [
    "SessionIdGenerator",
    "TimestampSessionIdGenerator",
    "TokenSessionIdGenerator",
    "GENERATORS",
    "build_generator",
]
