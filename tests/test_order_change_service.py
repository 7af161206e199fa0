# pylint: disable=redefined-outer-name
# pylint: disable=protected-access

from datetime import datetime, timedelta, timezone

import pytest
from bson import ObjectId

from order_changes_api.app.core.errors import (
    InvalidIdentifierError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from order_changes_api.app.schemas.order_change import OrderChangeCreate, OrderChangeUpdate
from order_changes_api.app.services.order_change_service import OrderChangeService


def _new(order_id="A", user_id="U1", changes="qty 1->2", **extra) -> OrderChangeCreate:
    return OrderChangeCreate(order_id=order_id, user_id=user_id, changes=changes, **extra)


async def test_create_assigns_id_and_default_change_date(service: OrderChangeService):
    before = datetime.now(timezone.utc)
    created = await service.create(_new())

    assert ObjectId.is_valid(created.id)
    assert created.order_id == "A"
    assert created.user_id == "U1"
    assert created.changes == "qty 1->2"
    assert abs(created.change_date - before) < timedelta(seconds=5)


async def test_create_keeps_supplied_change_date(service: OrderChangeService):
    when = datetime(2024, 5, 1, 10, 0, tzinfo=timezone.utc)
    created = await service.create(_new(change_date=when))
    fetched = await service.get_by_id(created.id)
    assert created.change_date == when
    assert fetched.change_date == when


async def test_create_then_get_round_trip(service: OrderChangeService):
    created = await service.create(_new(order_id="O-7", user_id="U-9", changes="address updated"))
    fetched = await service.get_by_id(created.id)

    assert fetched.id == created.id
    assert fetched.changes == "address updated"
    assert fetched.change_date == created.change_date
    # references to documents that do not exist populate to None
    assert fetched.order_id is None
    assert fetched.user_id is None


async def test_get_by_id_populates_references(db, service: OrderChangeService):
    order_oid = ObjectId()
    await db["orders"].insert_one({"_id": order_oid, "status": "CREATED", "items": [{"sku": "X1"}]})
    await db["users"].insert_one({"_id": "U1", "name": "Ana", "company": ObjectId("665f1c2ab0e4a1d2c3b4a596")})

    created = await service.create(_new(order_id=str(order_oid), user_id="U1"))
    fetched = await service.get_by_id(created.id)

    assert fetched.order_id == {"id": str(order_oid), "status": "CREATED", "items": [{"sku": "X1"}]}
    assert fetched.user_id == {"id": "U1", "name": "Ana", "company": "665f1c2ab0e4a1d2c3b4a596"}


async def test_get_by_id_errors(service: OrderChangeService):
    with pytest.raises(InvalidIdentifierError):
        await service.get_by_id("not-an-object-id")
    with pytest.raises(NotFoundError):
        await service.get_by_id(str(ObjectId()))


async def test_get_by_user_id_returns_exactly_matching_records(service: OrderChangeService):
    mine = [await service.create(_new(user_id="U1", changes=f"change {i}")) for i in range(3)]
    await service.create(_new(user_id="U2"))

    found = await service.get_by_user_id("U1")

    assert sorted(r.id for r in found) == sorted(r.id for r in mine)
    assert await service.get_by_user_id("nobody") == []


async def test_list_page_bounds_and_disjoint_pages(service: OrderChangeService):
    created = [await service.create(_new(changes=f"change {i}")) for i in range(5)]

    first = await service.list_page(page=1, limit=2)
    second = await service.list_page(page=2, limit=2)
    last = await service.list_page(page=3, limit=2)
    beyond = await service.list_page(page=4, limit=2)

    assert len(first) == 2 and len(second) == 2 and len(last) == 1
    assert not {r.id for r in first} & {r.id for r in second}
    assert [r.id for r in first + second + last] == [r.id for r in created]
    assert beyond == []


@pytest.mark.parametrize("page, limit", [(0, 10), (1, 0), (1, 101), (10**20, 10)])
async def test_list_page_rejects_out_of_range(service: OrderChangeService, page, limit):
    with pytest.raises(ValidationError):
        await service.list_page(page=page, limit=limit)


async def test_update_changes_only_given_fields(service: OrderChangeService):
    created = await service.create(_new())

    updated = await service.update(created.id, OrderChangeUpdate(changes="qty 1->3"))

    assert updated.changes == "qty 1->3"
    assert updated.order_id == created.order_id
    assert updated.user_id == created.user_id
    assert updated.change_date == created.change_date


async def test_update_with_empty_patch_returns_current(service: OrderChangeService):
    created = await service.create(_new())
    assert await service.update(created.id, OrderChangeUpdate()) == created


async def test_update_errors(service: OrderChangeService):
    with pytest.raises(NotFoundError):
        await service.update(str(ObjectId()), OrderChangeUpdate(changes="x"))
    with pytest.raises(InvalidIdentifierError):
        await service.update("123", OrderChangeUpdate(changes="x"))


async def test_delete_returns_record_then_not_found(service: OrderChangeService):
    created = await service.create(_new())

    deleted = await service.delete(created.id)

    assert deleted == created
    with pytest.raises(NotFoundError):
        await service.get_by_id(created.id)
    with pytest.raises(NotFoundError):
        await service.delete(created.id)


async def test_driver_failures_become_persistence_errors(service: OrderChangeService, unreachable_collection):
    service._collection = unreachable_collection

    with pytest.raises(PersistenceError) as exc_info:
        await service.create(_new())
    assert exc_info.value.message == "Error creating order change"
    assert "Connection refused" in exc_info.value.error

    with pytest.raises(PersistenceError):
        await service.get_by_id(str(ObjectId()))
    with pytest.raises(PersistenceError):
        await service.update(str(ObjectId()), OrderChangeUpdate(changes="x"))
    with pytest.raises(PersistenceError):
        await service.delete(str(ObjectId()))
    with pytest.raises(PersistenceError):
        await service.ensure_indexes()
