"""Tagged field operations for Firestore document updates.

Callers describe an update as a list of operations instead of building a dict
with Firestore sentinels by hand. ``to_update_data`` turns them into the
mapping accepted by ``DocumentReference.update`` and ``Transaction.update``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Union

from firebase_admin import firestore


@dataclass(frozen=True)
class SetField:
    """Overwrite a field with a plain value."""

    field: str
    value: Any


@dataclass(frozen=True)
class DeleteField:
    """Remove a field from the document."""

    field: str


@dataclass(frozen=True)
class RemoveFromArray:
    """Remove every occurrence of the given values from an array field."""

    field: str
    values: tuple[Any, ...]


@dataclass(frozen=True)
class ServerTimestamp:
    """Stamp a field with the commit time."""

    field: str


FieldOperation = Union[SetField, DeleteField, RemoveFromArray, ServerTimestamp]


def to_update_data(operations: Iterable[FieldOperation]) -> dict[str, Any]:
    """Convert field operations into a Firestore update mapping."""
    data: dict[str, Any] = {}
    for op in operations:
        if isinstance(op, SetField):
            value = op.value
        elif isinstance(op, DeleteField):
            value = firestore.DELETE_FIELD
        elif isinstance(op, RemoveFromArray):
            # ArrayRemove takes the values to pull, not a nested array
            value = firestore.ArrayRemove(list(op.values))
        elif isinstance(op, ServerTimestamp):
            value = firestore.SERVER_TIMESTAMP
        else:
            raise TypeError(f"Unsupported field operation: {op!r}")

        if op.field in data:
            raise ValueError(f"Field '{op.field}' is updated more than once.")
        data[op.field] = value
    return data
