"""
Order change endpoints for API v1.

These routes expose a CRUD API for order change records, the audit
trail of modifications made to orders.  The route table is the
``routes`` list at the bottom of the module; ``build_router`` makes
sure ``/user/{user_id}`` is matched before ``/{order_change_id}``.

Service errors propagate as ``OrderChangeError`` subclasses and are
rendered by the application's exception handlers as
``{"message": ..., "error": ...}`` with the status of the error kind.
"""

from typing import List, Optional

from fastapi import Depends, Query, status
from motor.motor_asyncio import AsyncIOMotorDatabase

from order_changes_api.app.api.routing import Route, build_router
from order_changes_api.app.core.config import settings
from order_changes_api.app.core.db import get_database
from order_changes_api.app.schemas.order_change import (
    OrderChangeCreate,
    OrderChangeRead,
    OrderChangeUpdate,
)
from order_changes_api.app.services.order_change_service import OrderChangeService

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10


def get_order_change_service(db: AsyncIOMotorDatabase = Depends(get_database)) -> OrderChangeService:
    return OrderChangeService(db)


def parse_positive_int(value: Optional[str], default: int) -> int:
    """Parse a query string value, falling back to ``default``.

    Missing, non-numeric and non-positive values all yield ``default``.
    """
    try:
        parsed = int(value) if value is not None else default
    except ValueError:
        return default
    return parsed if parsed > 0 else default


async def create_order_change(
    order_change_in: OrderChangeCreate,
    service: OrderChangeService = Depends(get_order_change_service),
) -> OrderChangeRead:
    """Create a new order change.

    Any ``id`` in the body is ignored; the record gets a generated one.
    """
    return await service.create(order_change_in)


async def list_order_changes(
    page: Optional[str] = Query(None, description="The page number to retrieve (default 1)"),
    limit: Optional[str] = Query(
        None,
        description=f"The number of items per page (default {DEFAULT_LIMIT}, at most {settings.max_page_limit})",
    ),
    service: OrderChangeService = Depends(get_order_change_service),
) -> List[OrderChangeRead]:
    """Get all order changes with pagination."""
    page_number = parse_positive_int(page, DEFAULT_PAGE)
    page_size = min(parse_positive_int(limit, DEFAULT_LIMIT), service.max_page_limit)
    return await service.list_page(page_number, page_size)


async def list_order_changes_by_user(
    user_id: str,
    service: OrderChangeService = Depends(get_order_change_service),
) -> List[OrderChangeRead]:
    """Get the order changes made by a user; empty when there are none."""
    return await service.get_by_user_id(user_id)


async def get_order_change(
    order_change_id: str,
    service: OrderChangeService = Depends(get_order_change_service),
) -> OrderChangeRead:
    """Get an order change by ID.  Returns HTTP 404 if it does not exist."""
    return await service.get_by_id(order_change_id)


async def update_order_change(
    order_change_id: str,
    order_change_in: OrderChangeUpdate,
    service: OrderChangeService = Depends(get_order_change_service),
) -> OrderChangeRead:
    """Update the provided fields of an order change."""
    return await service.update(order_change_id, order_change_in)


async def delete_order_change(
    order_change_id: str,
    service: OrderChangeService = Depends(get_order_change_service),
) -> OrderChangeRead:
    """Delete an order change and return the deleted record."""
    return await service.delete(order_change_id)


_errors = {
    status.HTTP_400_BAD_REQUEST: {"description": "Malformed body or identifier"},
    status.HTTP_503_SERVICE_UNAVAILABLE: {"description": "Database unavailable"},
}
_errors_with_404 = {**_errors, status.HTTP_404_NOT_FOUND: {"description": "Order change not found"}}

routes = [
    Route(
        "POST",
        "/",
        create_order_change,
        {"response_model": OrderChangeRead, "status_code": status.HTTP_201_CREATED, "responses": _errors},
    ),
    Route("GET", "/", list_order_changes, {"response_model": List[OrderChangeRead], "responses": _errors}),
    Route("GET", "/{order_change_id}", get_order_change, {"response_model": OrderChangeRead, "responses": _errors_with_404}),
    Route("PUT", "/{order_change_id}", update_order_change, {"response_model": OrderChangeRead, "responses": _errors_with_404}),
    Route("DELETE", "/{order_change_id}", delete_order_change, {"response_model": OrderChangeRead, "responses": _errors_with_404}),
    Route(
        "GET",
        "/user/{user_id}",
        list_order_changes_by_user,
        {"response_model": List[OrderChangeRead], "responses": _errors},
    ),
]

router = build_router(routes)
