"""Document-store value types shared by services and adapters."""

from dataclasses import dataclass, field
from typing import Literal

FilterOp = Literal["==", "<", "<=", ">", ">="]


@dataclass(frozen=True)
class Document:
    """A schema-less document read from the store."""

    id: str
    path: str
    fields: dict[str, object] = field(default_factory=dict)

    def get(self, key: str, default: object = None) -> object:
        """Return a field value, or ``default`` when absent."""
        return self.fields.get(key, default)


@dataclass(frozen=True)
class Filter:
    """Single field comparison used by queries and subscriptions."""

    field: str
    op: FilterOp
    value: object


@dataclass(frozen=True)
class OrderBy:
    """Sort order for a query."""

    field: str
    descending: bool = False


DOCUMENT_ID = "__id__"
"""Pseudo field that filters on the document id instead of a stored field."""
