"""
Pydantic schemas for order change records.

The API speaks camelCase (``orderId``, ``userId``, ``changeDate``)
while the stored documents and Python attributes use snake_case.
Request bodies accept either spelling.  Any ``id``/``_id`` sent by
the client is dropped before validation since identifiers are
assigned by the database; every other unknown key is rejected.
"""

from datetime import datetime
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, Field, field_validator, model_validator

# Keys a client may send but which are never stored.
_DISCARDED_KEYS = ("id", "_id")


def _drop_identifiers(data: Any) -> Any:
    if isinstance(data, dict):
        return {key: value for key, value in data.items() if key not in _DISCARDED_KEYS}
    return data


def _require_text(value: Optional[str]) -> Optional[str]:
    if value is not None and not value.strip():
        raise ValueError("must not be blank")
    return value


class OrderChangeCreate(BaseModel):
    """Schema for creating a new order change record."""

    model_config = {"populate_by_name": True, "extra": "forbid"}

    order_id: str = Field(..., alias="orderId", min_length=1, examples=["665f1c2ab0e4a1d2c3b4a596"])
    user_id: str = Field(..., alias="userId", min_length=1, examples=["665f1c2ab0e4a1d2c3b4a597"])
    change_date: Optional[datetime] = Field(
        None, alias="changeDate", description="When the change happened; defaults to the creation time"
    )
    changes: str = Field(..., min_length=1, examples=["quantity 1 -> 2"])

    @model_validator(mode="before")
    @classmethod
    def strip_identifiers(cls, data: Any) -> Any:
        return _drop_identifiers(data)

    @field_validator("order_id", "user_id", "changes")
    @classmethod
    def not_blank(cls, v: str) -> str:
        return _require_text(v)


class OrderChangeUpdate(BaseModel):
    """Schema for partially updating an order change record.

    All fields are optional; only provided values will be updated.
    A provided field may not be ``null``.
    """

    model_config = {"populate_by_name": True, "extra": "forbid"}

    order_id: Optional[str] = Field(None, alias="orderId", min_length=1)
    user_id: Optional[str] = Field(None, alias="userId", min_length=1)
    change_date: Optional[datetime] = Field(None, alias="changeDate")
    changes: Optional[str] = Field(None, min_length=1)

    @model_validator(mode="before")
    @classmethod
    def strip_identifiers(cls, data: Any) -> Any:
        return _drop_identifiers(data)

    @field_validator("order_id", "user_id", "changes")
    @classmethod
    def not_blank(cls, v: Optional[str]) -> Optional[str]:
        return _require_text(v)

    @model_validator(mode="after")
    def no_explicit_nulls(self) -> "OrderChangeUpdate":
        for name in self.model_fields_set:
            if getattr(self, name) is None:
                raise ValueError(f"{name} may not be null")
        return self

    def changed_fields(self) -> Dict[str, Any]:
        """Return the provided fields keyed by their stored names."""
        return self.model_dump(exclude_unset=True)


class OrderChangeRead(BaseModel):
    """Schema for reading an order change record.

    ``orderId`` and ``userId`` hold the referenced identifiers, or the
    referenced documents themselves on populated reads (``null`` when
    the referenced document does not exist).
    """

    model_config = {"populate_by_name": True}

    id: str
    order_id: Union[Dict[str, Any], str, None] = Field(None, alias="orderId")
    user_id: Union[Dict[str, Any], str, None] = Field(None, alias="userId")
    change_date: datetime = Field(..., alias="changeDate")
    changes: str
