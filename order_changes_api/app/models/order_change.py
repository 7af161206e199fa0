"""
Stored shape of an order change record.

An order change documents a modification made to an order: which
order (``order_id``), who made it (``user_id``), when
(``change_date``) and a free text description (``changes``).  The
document ``_id`` is generated by MongoDB on insert.  Both references
are opaque identifiers; they are not checked against the ``orders``
and ``users`` collections, and deleting an order or user leaves its
change records untouched.
"""

from datetime import datetime, timezone
from typing import Any, Dict

from pydantic import BaseModel, Field, field_validator

COLLECTION = "order_changes"

# Collections owned by sibling modules, read when populating references.
ORDERS_COLLECTION = "orders"
USERS_COLLECTION = "users"


def to_mongo_precision(value: datetime) -> datetime:
    """Truncate to whole milliseconds, the resolution MongoDB stores."""
    return value.replace(microsecond=value.microsecond // 1000 * 1000)


def utcnow() -> datetime:
    return to_mongo_precision(datetime.now(timezone.utc))


def as_utc(value: datetime) -> datetime:
    """Return ``value`` as an aware UTC datetime.

    MongoDB stores datetimes in UTC; clients not configured with
    ``tz_aware=True`` hand them back naive.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class OrderChangeDocument(BaseModel):
    """Document written to the ``order_changes`` collection."""

    order_id: str
    user_id: str
    change_date: datetime = Field(default_factory=utcnow)
    changes: str

    @field_validator("change_date")
    @classmethod
    def stored_precision(cls, v: datetime) -> datetime:
        return to_mongo_precision(as_utc(v))

    def to_mongo(self) -> Dict[str, Any]:
        return self.model_dump()
