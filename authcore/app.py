# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

import click
from flask import Flask
from flask_cors import CORS
from werkzeug.middleware.proxy_fix import ProxyFix

from authcore.infrastructure.container import Container
from authcore.infrastructure.db import init_db
from authcore.shared.config import AppConfig, load_config
from authcore.shared.logging import logger, setup_logging
from authcore.shared.middleware.error_handler import (
    configure_error_handling,
    configure_security_headers,
)
from authcore.shared.middleware.request_logger import configure_request_logging

CONTAINER_KEY = "authcore.container"


def get_container(app: Flask) -> Container:
    return app.extensions[CONTAINER_KEY]


def _register_commands(app: Flask, container: Container) -> None:
    @app.cli.command("init-db")
    def _init_db_command() -> None:
        """Create the database schema."""
        init_db(container.engine)
        click.echo("Database schema ensured")

    @app.cli.command("purge-sessions")
    def _purge_sessions_command() -> None:
        """Delete expired and revoked sessions."""
        removed = container.account_service.purge_sessions()
        click.echo(f"Purged {removed} sessions")


def create_app(config: AppConfig | None = None, *, container: Container | None = None) -> Flask:
    config = config or (container.config if container else load_config())
    container = container or Container(config)

    setup_logging(config.log_level, log_file=config.log_file, debug_mode=config.debug_logging)
    init_db(container.engine)

    app = Flask(__name__)
    app.config.update(SECRET_KEY=config.secret_key)
    app.extensions[CONTAINER_KEY] = container

    proxies = config.security.trusted_proxy_count
    if proxies:
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=proxies, x_proto=proxies)  # type: ignore[method-assign]

    configure_error_handling(app, debug_mode=config.debug_logging)
    configure_request_logging(app, debug_mode=config.debug_logging)
    configure_security_headers(app, enable_hsts=config.security.enable_hsts)

    cors_kwargs: dict[str, object] = {
        "resources": {r"/api/*": {"origins": config.security.allowed_origins}}
    }
    if any(o != "*" for o in config.security.allowed_origins):
        cors_kwargs["supports_credentials"] = True
    CORS(app, **cors_kwargs)

    app.register_blueprint(container.misc_controller.as_blueprint())
    app.register_blueprint(container.auth_controller.as_blueprint())
    _register_commands(app, container)

    logger.info(f"Flask app initialized env={config.app_env}")
    return app


if __name__ == "__main__":
    create_app().run(host="127.0.0.1", port=5000, debug=False)
