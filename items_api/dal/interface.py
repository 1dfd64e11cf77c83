from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from items_api.models.item import FieldUpdateSet


class ConditionFailedError(Exception):
    """A conditional write was rejected by the store."""

    def __init__(self, message: str, current_item: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.current_item = current_item


@dataclass
class ItemPage:
    items: list[dict[str, Any]] = field(default_factory=list)
    count: int = 0
    scanned_count: int = 0
    last_evaluated_key: dict[str, Any] | None = None


@dataclass(frozen=True)
class RangeCondition:
    attribute: str
    operator: str
    value: Any


class IItemStore(ABC):
    table_name: str

    @abstractmethod
    def get_item(self, key: dict[str, Any]) -> dict[str, Any] | None:
        pass

    @abstractmethod
    def create_item(self, item: dict[str, Any], key_attributes: tuple[str, ...]) -> None:
        """Put the item only if no item with the same key exists."""

    @abstractmethod
    def update_item(
        self,
        key: dict[str, Any],
        updates: FieldUpdateSet,
        expected_version: int | None = None,
    ) -> dict[str, Any]:
        """Apply updates to an existing item and return its new attributes."""

    @abstractmethod
    def delete_item(self, key: dict[str, Any]) -> dict[str, Any] | None:
        """Delete the item and return its previous attributes, if any."""

    @abstractmethod
    def scan(self, limit: int | None = None, start_key: dict[str, Any] | None = None) -> ItemPage:
        pass

    @abstractmethod
    def query_index(
        self,
        index_name: str,
        partition_attribute: str,
        partition_value: Any,
        range_condition: RangeCondition | None = None,
        start_key: dict[str, Any] | None = None,
    ) -> ItemPage:
        pass

    @abstractmethod
    def batch_put(self, items: list[dict[str, Any]]) -> dict[str, Any]:
        """Write one chunk of items in a single batch request."""

    @abstractmethod
    def describe(self) -> dict[str, Any]:
        """Return table metadata, raising if the table is unreachable."""
