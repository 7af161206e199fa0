"""
MongoDB integration.

This module creates the motor client on application start
(``init_db``), closes it on shutdown (``close_db``) and provides the
``get_database`` dependency for FastAPI routes.  The database handle
lives on ``app.state`` instead of a module global, so an application
built with ``create_app(db=...)`` talks to whatever database it was
given, for instance an in‑memory one in tests.
"""

import logging
from typing import Optional

from fastapi import FastAPI, Request
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

from .config import Settings, settings as default_settings

logger = logging.getLogger(__name__)


def create_client(config: Optional[Settings] = None) -> AsyncIOMotorClient:
    """Create a motor client from the settings.

    Datetimes are returned timezone aware (UTC).  The connection is
    established lazily by the driver on first use.
    """
    config = config or default_settings
    return AsyncIOMotorClient(
        config.mongo_url,
        serverSelectionTimeoutMS=config.mongo_timeout_ms,
        tz_aware=True,
    )


def init_db(app: FastAPI, config: Optional[Settings] = None) -> AsyncIOMotorDatabase:
    """Attach a database handle to ``app.state`` unless one is present."""
    db = getattr(app.state, "db", None)
    if db is not None:
        return db
    config = config or default_settings
    client = create_client(config)
    app.state.mongo_client = client
    app.state.db = client[config.mongo_db_name]
    logger.info("Using MongoDB database %s", config.mongo_db_name)
    return app.state.db


def close_db(app: FastAPI) -> None:
    """Close the motor client created by ``init_db``, if any."""
    client = getattr(app.state, "mongo_client", None)
    if client is not None:
        client.close()
        app.state.mongo_client = None
        app.state.db = None
        logger.info("MongoDB connection closed")


def get_database(request: Request) -> AsyncIOMotorDatabase:
    """FastAPI dependency returning the application's database handle."""
    return request.app.state.db
