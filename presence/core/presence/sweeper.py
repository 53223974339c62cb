"""Background sweeper that evicts idle sessions."""

from __future__ import annotations

import logging
import threading
from typing import Optional

from presence.core.presence.constants import DEFAULT_SWEEP_INTERVAL_SECONDS
from presence.core.presence.registry import PresenceRegistry

logger = logging.getLogger(__name__)


class Sweeper:
    """Runs registry.sweep() every interval_seconds on a daemon thread.

    Stopping is cooperative: stop() sets an event that also serves as the
    sleep, so the loop exits at its next wake and the thread is joined.
    """

    def __init__(
        self,
        registry: PresenceRegistry,
        interval_seconds: float = DEFAULT_SWEEP_INTERVAL_SECONDS,
        name: str = "presence-sweeper",
    ) -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self.registry = registry
        self.interval_seconds = float(interval_seconds)
        self.name = name
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._state_lock = threading.Lock()

    @property
    def is_running(self) -> bool:
        thread = self._thread
        return bool(thread and thread.is_alive())

    def run_once(self) -> int:
        """Single sweep pass. Returns number evicted (0 on failure)."""
        try:
            report = self.registry.sweep_detailed()
        except Exception:
            logger.exception("Unexpected error during presence sweep")
            return 0
        if report.evicted:
            logger.info(
                "Swept %s idle session(s); %s user(s) went offline; %s online",
                report.evicted_count,
                len(report.users_offline),
                report.online_count,
            )
        if report.errors:
            logger.warning("Sweep skipped %s malformed session(s)", report.errors)
        return report.evicted_count

    def _run(self, stop_event: threading.Event) -> None:
        logger.info(
            "Starting presence sweeper (interval=%ss, ttl=%ss)",
            self.interval_seconds,
            self.registry.ttl_seconds,
        )
        while not stop_event.is_set():
            self.run_once()
            stop_event.wait(self.interval_seconds)
        logger.info("Presence sweeper stopped")

    def start(self) -> None:
        with self._state_lock:
            if self.is_running and not self._stop_event.is_set():
                return
            # Each run owns its event; a thread that outlived stop(timeout)
            # keeps its set event and exits on its own.
            self._stop_event = threading.Event()
            self._thread = threading.Thread(
                target=self._run, args=(self._stop_event,), name=self.name, daemon=True
            )
            self._thread.start()

    def stop(self, timeout: Optional[float] = None) -> None:
        with self._state_lock:
            self._stop_event.set()
            thread = self._thread
            if thread is not None and thread is not threading.current_thread():
                thread.join(timeout)
            if thread is not None and not thread.is_alive():
                self._thread = None

    def __enter__(self) -> "Sweeper":
        self.start()
        return self

    def __exit__(self, *exc_info) -> None:
        self.stop()


__all__ = ["Sweeper"]
