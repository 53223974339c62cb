"""Shared extensions for the presence application."""

from __future__ import annotations

import atexit
import logging
from typing import Optional

from presence.core.clock import Clock
from presence.core.presence.registry import PresenceRegistry
from presence.core.presence.services import PresenceService
from presence.core.presence.session_ids import SessionIdGenerator, build_generator
from presence.core.presence.sweeper import Sweeper

logger = logging.getLogger(__name__)


def init_extensions(
    app,
    *,
    clock: Optional[Clock] = None,
    id_generator: Optional[SessionIdGenerator] = None,
) -> None:
    """Build the per-process registry, service and sweeper and attach them to the app."""
    registry = PresenceRegistry(
        ttl_seconds=app.config["PRESENCE_TTL_SECONDS"],
        clock=clock,
        id_generator=id_generator or build_generator(app.config["PRESENCE_SESSION_ID_STRATEGY"]),
    )
    sweeper = Sweeper(registry, interval_seconds=app.config["PRESENCE_SWEEP_INTERVAL_SECONDS"])

    app.extensions["presence_registry"] = registry
    app.extensions["presence_service"] = PresenceService(registry)
    app.extensions["presence_sweeper"] = sweeper

    if app.config.get("PRESENCE_SWEEPER_ENABLED", True):
        sweeper.start()
        atexit.register(shutdown, registry, sweeper)


def shutdown(registry: PresenceRegistry, sweeper: Sweeper, timeout: Optional[float] = 5.0) -> None:
    """Stop and join the sweeper before tearing down the registry."""
    sweeper.stop(timeout)
    if sweeper.is_running:
        logger.warning("Presence sweeper did not stop within %ss", timeout)
    registry.clear()
