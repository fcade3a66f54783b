# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

import asyncio
import atexit

from flask import Flask, Response

from sessionauth.infrastructure.container import Container
from sessionauth.shared.logging import logger, setup_logging
from sessionauth.shared.middleware import configure_error_handling, configure_request_logging

CONTAINER_EXTENSION = "sessionauth.container"


def _shutdown(container: Container) -> None:
    if container.closed:
        return
    try:
        asyncio.run(container.shutdown())
    except RuntimeError as exc:
        logger.warning(f"app.shutdown: skipped ({exc})")


def create_app(container: Container | None = None) -> Flask:
    container = container or Container()
    config = container.config
    setup_logging(config.log_level, debug_mode=config.debug_logging)

    asyncio.run(container.startup())

    app = Flask(__name__)
    app.extensions[CONTAINER_EXTENSION] = container

    configure_error_handling(app, debug_mode=config.debug_logging)
    configure_request_logging(app, debug_mode=config.debug_logging)

    app.register_blueprint(container.auth_controller.as_blueprint())

    @app.after_request
    def _add_security_headers(resp: Response) -> Response:
        resp.headers.setdefault("X-Frame-Options", "DENY")
        resp.headers.setdefault("Referrer-Policy", "no-referrer")
        resp.headers.setdefault("X-Content-Type-Options", "nosniff")
        resp.headers.setdefault("Cross-Origin-Resource-Policy", "same-origin")
        # Session-bearing responses must never be cached.
        resp.headers.setdefault("Cache-Control", "no-store")
        return resp

    if not container.exit_hook_registered:
        atexit.register(_shutdown, container)
        container.exit_hook_registered = True
    logger.info(f"app.create: env={config.app_env}")
    return app


def main() -> None:
    app = create_app()
    app.run(host="127.0.0.1", port=5000)


if __name__ == "__main__":
    main()
