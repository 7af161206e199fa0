# pylint: disable=redefined-outer-name

import uuid
from typing import AsyncIterator

import httpx
import pytest
from fastapi import FastAPI
from mongomock_motor import AsyncMongoMockClient
from pymongo.errors import ServerSelectionTimeoutError

from order_changes_api.app.main import create_app
from order_changes_api.app.services.order_change_service import OrderChangeService


@pytest.fixture
def db():
    # fresh in-memory database per test
    client = AsyncMongoMockClient()
    return client[f"order_changes_{uuid.uuid4().hex}"]


@pytest.fixture
def service(db) -> OrderChangeService:
    return OrderChangeService(db, max_page_limit=100)


@pytest.fixture
def app(db) -> FastAPI:
    return create_app(db=db)


@pytest.fixture
async def client(app: FastAPI) -> AsyncIterator[httpx.AsyncClient]:
    # NOTE: ASGITransport does not run startup/shutdown events, so the
    # injected database is used as is
    async with httpx.AsyncClient(
        base_url="http://order-changes.testserver.io",
        headers={"Content-Type": "application/json"},
        transport=httpx.ASGITransport(app=app),
    ) as cli:
        yield cli


@pytest.fixture
def order_change_payload() -> dict:
    return {"orderId": "A", "userId": "U1", "changes": "qty 1->2"}


class _UnreachableCollection:
    """Stands in for a collection whose server cannot be selected."""

    name = "order_changes"

    def __getattr__(self, name):
        async def _fail(*args, **kwargs):
            raise ServerSelectionTimeoutError("localhost:27017: [Errno 111] Connection refused")

        return _fail


@pytest.fixture
def unreachable_collection() -> _UnreachableCollection:
    return _UnreachableCollection()
