"""Entry point for the Order Changes API.

This script serves the FastAPI application with uvicorn.  Host, port,
MongoDB connection and log level are read from environment variables
(see ``order_changes_api/app/core/config.py``).

Usage:
    python run.py
"""
import asyncio
import logging

from uvicorn import Config, Server

from order_changes_api.app.core.config import settings
from order_changes_api.app.main import app


async def main() -> None:
    """Start the API server and wait until it stops."""
    config = Config(
        app=app,
        host=settings.host,
        port=settings.port,
        reload=False,
        log_level=settings.log_level.lower(),
    )
    server = Server(config)
    logging.getLogger(__name__).info(
        "Serving on http://%s:%s (docs at /api-docs)", settings.host, settings.port
    )
    await server.serve()


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except (KeyboardInterrupt, SystemExit):
        pass
