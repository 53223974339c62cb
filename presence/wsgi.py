"""WSGI entrypoint for the presence service."""

from __future__ import annotations

import logging
import os

from presence import create_app

if __name__ == "__main__":
    # Configure logging before the sweeper thread starts talking.
    logging.basicConfig(level=os.environ.get("PRESENCE_LOGLEVEL", "INFO"))

app = create_app()

if __name__ == "__main__":
    host = os.environ.get("PRESENCE_HOST", "0.0.0.0")
    port = int(os.environ.get("PRESENCE_PORT", "8080"))
    app.run(host=host, port=port, threaded=True, use_reloader=False)  # nosec B104
