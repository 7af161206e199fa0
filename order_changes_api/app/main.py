"""
Main entrypoint for the Order Changes API.

This module assembles the FastAPI application: logging, CORS, request
logging, error rendering and the versioned routers.  The
``create_app`` function builds and configures the app, which is then
instantiated at module import time as ``app``, e.g.::

    uvicorn order_changes_api.app.main:app --reload

Interactive API documentation is served at ``/api-docs``.
"""

import logging
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from motor.motor_asyncio import AsyncIOMotorDatabase
from starlette.exceptions import HTTPException as StarletteHTTPException

from .api.v1.router import router as v1_router
from .core.config import settings
from .core.db import close_db, init_db
from .core.errors import OrderChangeError, PersistenceError
from .core.logging_config import log_requests, setup_logging
from .services.order_change_service import OrderChangeService

logger = logging.getLogger(__name__)


def create_app(db: Optional[AsyncIOMotorDatabase] = None) -> FastAPI:
    """Create and configure a FastAPI application.

    Parameters
    ----------
    db : Optional[AsyncIOMotorDatabase]
        Database handle to serve from.  When omitted, a motor client is
        created from the settings on startup and closed on shutdown.

    Returns
    -------
    FastAPI
        A configured FastAPI application instance.
    """
    setup_logging(settings.log_level, settings.log_file or None)

    app = FastAPI(
        title=settings.project_name,
        version=settings.api_version,
        docs_url="/api-docs",
        redoc_url=None,
    )
    app.state.db = db
    app.state.mongo_client = None

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.middleware("http")(log_requests)

    register_exception_handlers(app)

    app.include_router(v1_router, prefix="/api")

    @app.on_event("startup")
    async def startup_event() -> None:
        database = init_db(app)
        try:
            await OrderChangeService(database).ensure_indexes()
        except PersistenceError as exc:
            # The API still starts; requests answer 503 until MongoDB is reachable.
            logger.warning("%s: %s", exc.message, exc.error)

    @app.on_event("shutdown")
    async def shutdown_event() -> None:
        close_db(app)

    return app


def register_exception_handlers(app: FastAPI) -> None:
    """Render every error as ``{"message": ..., "error": ...}``."""

    @app.exception_handler(OrderChangeError)
    async def order_change_error_handler(request: Request, exc: OrderChangeError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s (%s)", request.method, request.url.path, exc.message, exc.error)
        return JSONResponse(status_code=exc.status_code, content=jsonable_encoder(exc.to_dict()))

    @app.exception_handler(RequestValidationError)
    async def request_validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"message": "Invalid request", "error": jsonable_encoder(exc.errors())},
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        message = "Route not found" if exc.status_code == status.HTTP_404_NOT_FOUND else exc.detail
        return JSONResponse(
            status_code=exc.status_code,
            content={"message": message, "error": None},
            headers=getattr(exc, "headers", None),
        )


# Create the application instance at import time so that tools such as
# uvicorn can discover it without calling create_app manually.
app = create_app()
