"""
Service layer for order change records.

This module provides the CRUD operations of the order change module
on top of a MongoDB database handle.  Reads by id, by user and the
paginated listing "populate" the ``order_id`` and ``user_id``
references: each identifier is replaced by the referenced document
from the ``orders`` / ``users`` collection, or by ``None`` when no
such document exists.  Writes return the stored record as is.

Driver failures are translated into the errors of
``core.errors``; malformed identifiers into ``InvalidIdentifierError``
and missing documents into ``NotFoundError``.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional

from bson import ObjectId
from bson.errors import InvalidId
from motor.motor_asyncio import AsyncIOMotorCollection, AsyncIOMotorDatabase
from pymongo import ReturnDocument
from pymongo.errors import PyMongoError

from order_changes_api.app.core.config import settings
from order_changes_api.app.core.errors import (
    InvalidIdentifierError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from order_changes_api.app.models.order_change import (
    COLLECTION,
    ORDERS_COLLECTION,
    USERS_COLLECTION,
    OrderChangeDocument,
    as_utc,
)
from order_changes_api.app.schemas.order_change import (
    OrderChangeCreate,
    OrderChangeRead,
    OrderChangeUpdate,
)

logger = logging.getLogger(__name__)

# MongoDB encodes ``skip`` as a signed 64-bit integer.
MAX_SKIP = 2**63 - 1


class OrderChangeService:
    """Service class for managing order change records."""

    def __init__(self, db: AsyncIOMotorDatabase, max_page_limit: Optional[int] = None) -> None:
        self._collection: AsyncIOMotorCollection = db[COLLECTION]
        self._orders: AsyncIOMotorCollection = db[ORDERS_COLLECTION]
        self._users: AsyncIOMotorCollection = db[USERS_COLLECTION]
        self.max_page_limit = max_page_limit or settings.max_page_limit

    async def ensure_indexes(self) -> None:
        """Create the index backing ``get_by_user_id``."""
        try:
            await self._collection.create_index("user_id")
        except PyMongoError as exc:
            raise PersistenceError("Error creating order change indexes", str(exc)) from exc

    async def create(self, data: OrderChangeCreate) -> OrderChangeRead:
        """Insert a new record and return it with its generated id.

        ``change_date`` defaults to the current time when omitted.
        """
        document = OrderChangeDocument(**data.model_dump(exclude_none=True)).to_mongo()
        try:
            result = await self._collection.insert_one(document)
        except PyMongoError as exc:
            raise PersistenceError("Error creating order change", str(exc)) from exc
        document["_id"] = result.inserted_id
        logger.info("Created order change %s", result.inserted_id)
        return self._to_read(document)

    async def get_by_id(self, order_change_id: str) -> OrderChangeRead:
        """Return a single populated record."""
        oid = self._object_id(order_change_id)
        try:
            document = await self._collection.find_one({"_id": oid})
        except PyMongoError as exc:
            raise PersistenceError("Error getting order change", str(exc)) from exc
        if document is None:
            raise NotFoundError("Order change not found", order_change_id)
        populated = await self._populate([document])
        return populated[0]

    async def get_by_user_id(self, user_id: str) -> List[OrderChangeRead]:
        """Return every populated record made by ``user_id``.

        An empty list is returned when the user has no records.
        """
        try:
            documents = await self._collection.find({"user_id": user_id}).to_list(length=None)
        except PyMongoError as exc:
            raise PersistenceError("Error getting order changes by user ID", str(exc)) from exc
        return await self._populate(documents)

    async def list_page(self, page: int = 1, limit: int = 10) -> List[OrderChangeRead]:
        """Return one page of populated records in natural storage order.

        ``page`` starts at 1 and may not skip more than ``MAX_SKIP``
        records.  ``limit`` must lie between 1 and ``max_page_limit``.
        """
        if page < 1:
            raise ValidationError("Invalid page", f"page must be >= 1, got {page}")
        if not 1 <= limit <= self.max_page_limit:
            raise ValidationError(
                "Invalid limit", f"limit must be between 1 and {self.max_page_limit}, got {limit}"
            )
        skip = (page - 1) * limit
        if skip > MAX_SKIP:
            raise ValidationError("Invalid page", f"page {page} is beyond the last possible page")
        try:
            documents = await self._collection.find({}, skip=skip, limit=limit).to_list(length=None)
        except PyMongoError as exc:
            raise PersistenceError("Error getting order changes", str(exc)) from exc
        return await self._populate(documents)

    async def update(self, order_change_id: str, data: OrderChangeUpdate) -> OrderChangeRead:
        """Apply the provided fields and return the updated record.

        Fields absent from ``data`` are left untouched.  An empty update
        returns the current record.
        """
        oid = self._object_id(order_change_id)
        fields = data.changed_fields()
        try:
            if fields:
                document = await self._collection.find_one_and_update(
                    {"_id": oid},
                    {"$set": fields},
                    return_document=ReturnDocument.AFTER,
                )
            else:
                document = await self._collection.find_one({"_id": oid})
        except PyMongoError as exc:
            raise PersistenceError("Error updating order change", str(exc)) from exc
        if document is None:
            raise NotFoundError("Order change not found", order_change_id)
        if fields:
            logger.info("Updated order change %s (%s)", order_change_id, ", ".join(sorted(fields)))
        return self._to_read(document)

    async def delete(self, order_change_id: str) -> OrderChangeRead:
        """Delete a record and return its last stored value."""
        oid = self._object_id(order_change_id)
        try:
            document = await self._collection.find_one_and_delete({"_id": oid})
        except PyMongoError as exc:
            raise PersistenceError("Error deleting order change", str(exc)) from exc
        if document is None:
            raise NotFoundError("Order change not found", order_change_id)
        logger.info("Deleted order change %s", order_change_id)
        return self._to_read(document)

    async def _populate(self, documents: List[Dict[str, Any]]) -> List[OrderChangeRead]:
        """Replace the order and user references by the referenced documents."""
        if not documents:
            return []
        orders = await self._fetch_referenced(self._orders, (d.get("order_id") for d in documents))
        users = await self._fetch_referenced(self._users, (d.get("user_id") for d in documents))
        populated = []
        for document in documents:
            document = dict(document)
            document["order_id"] = orders.get(str(document.get("order_id")))
            document["user_id"] = users.get(str(document.get("user_id")))
            populated.append(self._to_read(document))
        return populated

    @staticmethod
    async def _fetch_referenced(
        collection: AsyncIOMotorCollection, references: Iterable[Any]
    ) -> Dict[str, Dict[str, Any]]:
        """Load the documents whose ``_id`` matches one of ``references``.

        References are stored as strings; documents of the sibling
        collections may be keyed by ObjectId or by plain string, so both
        forms are looked up.  The result is keyed by ``str(_id)``.
        """
        candidates: List[Any] = []
        for reference in {str(r) for r in references if r is not None}:
            candidates.append(reference)
            if ObjectId.is_valid(reference):
                candidates.append(ObjectId(reference))
        if not candidates:
            return {}
        try:
            found = await collection.find({"_id": {"$in": candidates}}).to_list(length=None)
        except PyMongoError as exc:
            raise PersistenceError(f"Error populating {collection.name}", str(exc)) from exc
        return {str(document["_id"]): _to_jsonable(document) for document in found}

    @staticmethod
    def _object_id(value: str) -> ObjectId:
        try:
            return ObjectId(value)
        except (InvalidId, TypeError) as exc:
            raise InvalidIdentifierError("Invalid order change id", str(exc)) from exc

    @staticmethod
    def _to_read(document: Dict[str, Any]) -> OrderChangeRead:
        """Convert a stored document to an OrderChangeRead schema instance."""
        return OrderChangeRead(
            id=str(document["_id"]),
            order_id=document.get("order_id"),
            user_id=document.get("user_id"),
            change_date=as_utc(document["change_date"]),
            changes=document["changes"],
        )


def _to_jsonable(value: Any) -> Any:
    """Render a referenced document for the API: ``_id`` becomes ``id``
    and ObjectIds become strings."""
    if isinstance(value, dict):
        return {
            ("id" if key == "_id" else key): _to_jsonable(item) for key, item in value.items()
        }
    if isinstance(value, list):
        return [_to_jsonable(item) for item in value]
    if isinstance(value, ObjectId):
        return str(value)
    return value
