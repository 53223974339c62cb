"""
Gunicorn settings for the presence service.

Sessions live in process memory, so there is exactly one worker and it
scales with threads. Tunables come from PRESENCE_* environment variables.

    gunicorn -c deploy/gunicorn.conf.py presence.wsgi:app
"""

from __future__ import annotations

import logging
import os

bind = os.environ.get("PRESENCE_BIND", "0.0.0.0:8080")

# A second worker would hold a second, disjoint session table.
worker_class = "gthread"
workers = 1
threads = int(os.environ.get("PRESENCE_THREADS", "8"))
# Never recycle: a restart forgets everyone who is online.
max_requests = 0

# Heartbeats are tiny; a slow request means something is stuck.
timeout = int(os.environ.get("PRESENCE_WORKER_TIMEOUT", "30"))
graceful_timeout = 10
keepalive = 5

accesslog = "-"
errorlog = "-"
loglevel = os.environ.get("PRESENCE_LOG_LEVEL", "info")
capture_output = True
access_log_format = '{"remote": "%(h)s", "request": "%(r)s", "status": %(s)s, "ms": %(M)s}'

# create_app() starts the sweeper thread; it has to run inside the worker.
preload_app = False
proc_name = "presence"

logger = logging.getLogger("presence.gunicorn")


def when_ready(server):
    logger.info("Presence service listening on %s (%s threads)", bind, threads)


def worker_exit(server, worker):
    """Join the sweeper and drop all sessions when the worker goes away."""
    from presence.extensions import shutdown

    extensions = getattr(getattr(worker, "wsgi", None), "extensions", None) or {}
    if "presence_sweeper" in extensions:
        shutdown(extensions["presence_registry"], extensions["presence_sweeper"])
