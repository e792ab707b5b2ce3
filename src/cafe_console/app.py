"""
Factory for the café admin console Flask app.

The app holds configuration only; the data client and session store are
built per request into a :class:`~cafe_console.context.ConsoleContext`.
"""

from __future__ import annotations

import logging

from flask import Flask, g
from flask_cors import CORS
from redis import Redis

from cafe_console.context import EXTENSION_KEY, ClientFactory, build_request_context
from cafe_console.routes import ALL_BLUEPRINTS
from cafe_shared.config import AppConfig, load_config
from cafe_shared.constants import CLIENT_ID_COOKIE
from cafe_shared.error_handlers import register_error_handlers
from cafe_shared.logging_config import configure_logging

logger = logging.getLogger(__name__)

LOGIN_URL = "/auth/login"

DEV_ORIGINS = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
]


def _redis_client(config: AppConfig) -> Redis | None:
    """Persistent session fallback; absent unless REDIS_URL is set."""
    if not config.redis_url:
        return None
    return Redis.from_url(config.redis_url, socket_connect_timeout=2, socket_timeout=2)


def create_app(
    config: AppConfig | None = None,
    client_factory: ClientFactory | None = None,
    redis_client: Redis | None = None,
) -> Flask:
    """
    Build the Flask application that powers the admin console.

    Args:
        config: settings, loaded from the environment when omitted
        client_factory: builds the data client from the config (tests pass a fake)
        redis_client: overrides the client built from REDIS_URL
    """
    config = config or load_config()
    configure_logging(config.app_name, config.log_level)

    app = Flask(__name__)
    app.config["SECRET_KEY"] = config.secret_key
    app.config["APP_NAME"] = config.app_name
    app.config["DEBUG_MODE"] = config.debug_mode
    app.config["SESSION_COOKIE_HTTPONLY"] = True
    app.config["SESSION_COOKIE_SAMESITE"] = "Lax"

    if not config.supabase_configured:
        logger.warning("Supabase credentials missing; console forms are disabled")

    app.extensions[EXTENSION_KEY] = {
        "config": config,
        "client_factory": client_factory,
        "redis": redis_client if redis_client is not None else _redis_client(config),
        "login_url": LOGIN_URL,
    }

    allowed_origins = list(config.cors_allowed_origins)
    if config.debug_mode or not allowed_origins:
        allowed_origins = allowed_origins + DEV_ORIGINS
    CORS(app, origins=allowed_origins, supports_credentials=True)

    register_error_handlers(app)
    for blueprint in ALL_BLUEPRINTS:
        app.register_blueprint(blueprint)

    @app.before_request
    def attach_console():
        g.console = build_request_context(app)

    @app.after_request
    def persist_client_id(response):
        client_id = getattr(g, "new_client_id", None)
        if client_id:
            response.set_cookie(
                CLIENT_ID_COOKIE,
                client_id,
                max_age=config.session_ttl_seconds,
                httponly=True,
                samesite="Lax",
            )
        return response

    logger.info(f"{config.app_name} ready (auth mode: {config.auth_mode})")
    return app
