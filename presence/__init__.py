"""Online presence service application factory and bootstrap."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

from flask import Flask, jsonify, render_template

from presence.config import config_by_name
from presence.core.clock import Clock
from presence.core.presence.constants import CODE_FAILED, MSG_INVALID_REQUEST
from presence.core.presence.schemas import Envelope, HealthResponse
from presence.core.presence.session_ids import SessionIdGenerator
from presence.extensions import init_extensions


def create_app(
    config_name: Optional[str] = None,
    *,
    clock: Optional[Clock] = None,
    id_generator: Optional[SessionIdGenerator] = None,
) -> Flask:
    """Create and configure the presence Flask application."""
    env_name = (config_name or os.environ.get("APP_ENV") or "development").lower()

    app = Flask(
        __name__,
        template_folder=str(Path(__file__).parent / "templates"),
    )
    config_cls = config_by_name.get(env_name, config_by_name["development"])
    app.config.from_object(config_cls)

    init_extensions(app, clock=clock, id_generator=id_generator)
    _register_blueprints(app)
    _register_error_handlers(app)
    _register_cors(app)

    @app.get("/")
    def index():
        return render_template("index.html")

    @app.get("/api/health")
    def health():
        status = HealthResponse(**app.extensions["presence_service"].health())
        return jsonify(status.model_dump()), 200

    # Register CLI commands
    from presence.scripts.smoke import register_commands

    register_commands(app)

    return app


def _register_blueprints(app: Flask) -> None:
    """Lazy import and register all controllers."""
    from presence.core.presence.controllers import online_api_bp

    app.register_blueprint(online_api_bp, url_prefix="/api/online")


def _register_error_handlers(app: Flask) -> None:
    """Envelope-shaped error responses."""
    from werkzeug.exceptions import HTTPException

    @app.errorhandler(HTTPException)
    def _http_error(exc: HTTPException):
        body = Envelope(code=CODE_FAILED, message=exc.description or exc.name)
        return body.to_json(), exc.code

    @app.errorhandler(Exception)
    def _generic_error(exc: Exception):
        app.logger.exception("Unhandled error: %s", exc)
        # Legacy contract: handler failures are reported in-band with HTTP 200.
        return Envelope(code=CODE_FAILED, message=MSG_INVALID_REQUEST).to_json(), 200


def _register_cors(app: Flask) -> None:
    @app.after_request
    def _cors_headers(response):
        response.headers["Access-Control-Allow-Origin"] = app.config["CORS_ALLOW_ORIGIN"]
        response.headers["Access-Control-Allow-Methods"] = app.config["CORS_ALLOW_METHODS"]
        response.headers["Access-Control-Allow-Headers"] = app.config["CORS_ALLOW_HEADERS"]
        return response
