"""Common schemas."""
from typing import Generic, List, TypeVar

from pydantic import BaseModel

ItemT = TypeVar("ItemT")


class PaginatedResponse(BaseModel, Generic[ItemT]):
    """Paginated response."""

    total: int
    skip: int
    limit: int
    items: List[ItemT]


class MessageResponse(BaseModel):
    """Plain message payload."""

    message: str


def reject_null(value):
    """Field validator for optional update fields backed by NOT NULL columns.

    Omitting the field leaves the stored value alone; an explicit null is an
    input error.
    """
    if value is None:
        raise ValueError("may not be null")
    return value
