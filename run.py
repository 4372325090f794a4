"""Entry point for the Posts API server.

Starts uvicorn with the application factory.  Configuration is taken
from environment variables (see ``posts_api.app.core.config``); at
minimum ``JWT_SECRET`` must be set, otherwise the process exits before
binding a socket.

Usage:
    JWT_SECRET=... python run.py
"""
import asyncio
import logging
import sys

from uvicorn import Config, Server

from posts_api.app.core.config import Settings
from posts_api.app.core.errors import ConfigurationError


async def run_api(settings: Settings) -> None:
    """Serve the API until interrupted."""
    config = Config(
        app="posts_api.app.main:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        reload=False,
        log_level=settings.log_level.lower(),
    )
    server = Server(config)
    await server.serve()


def main() -> int:
    logging.basicConfig(level=logging.INFO)
    try:
        settings = Settings.from_env().validate()
    except ConfigurationError as exc:
        logging.error("Cannot start: %s", exc)
        return 1
    logging.info("Starting server on http://%s:%s", settings.host, settings.port)
    asyncio.run(run_api(settings))
    return 0


if __name__ == "__main__":
    try:
        sys.exit(main())
    except (KeyboardInterrupt, SystemExit):
        pass
