import copy
from typing import Any

from items_api.config import BATCH_WRITE_LIMIT
from items_api.dal.interface import ConditionFailedError, IItemStore, ItemPage, RangeCondition
from items_api.models.item import VERSION, FieldUpdateSet


def _matches(value: Any, condition: RangeCondition) -> bool:
    if value is None:
        return False
    if condition.operator == "=":
        return value == condition.value
    if condition.operator == "<":
        return value < condition.value
    if condition.operator == "<=":
        return value <= condition.value
    if condition.operator == ">":
        return value > condition.value
    if condition.operator == ">=":
        return value >= condition.value
    if condition.operator == "begins_with":
        return str(value).startswith(str(condition.value))
    raise ValueError(f"Unsupported range operator: {condition.operator}")


class InMemoryItemStore(IItemStore):
    """
    Dict-backed store with the same conditional-write semantics as DynamoDB.

    Args:
        key_attributes: Table key attributes, partition first
        table_name: Name reported by describe
        indexes: Secondary index name to (partition attribute, sort attribute)
        query_page_size: Items per query page, standing in for the 1 MB response cap
    """

    def __init__(
        self,
        key_attributes: tuple[str, ...],
        table_name: str = "in-memory-table",
        indexes: dict[str, tuple[str, str]] | None = None,
        query_page_size: int | None = None,
    ):
        self.table_name = table_name
        self.key_attributes = key_attributes
        self.indexes = indexes or {}
        self.query_page_size = query_page_size
        self._items: dict[tuple, dict[str, Any]] = {}
        self.batch_requests: list[list[dict[str, Any]]] = []

    def _key(self, item: dict[str, Any]) -> tuple:
        return tuple(item[attribute] for attribute in self.key_attributes)

    def _page(self, items: list[dict[str, Any]], limit: int | None, start_key: dict[str, Any] | None) -> ItemPage:
        if start_key:
            marker = self._key(start_key)
            keys = [self._key(item) for item in items]
            items = items[keys.index(marker) + 1 :] if marker in keys else []

        scanned = items if limit is None else items[:limit]
        last_key = None
        if limit is not None and len(items) > limit:
            last_key = {attribute: scanned[-1][attribute] for attribute in self.key_attributes}
        return ItemPage(
            items=copy.deepcopy(scanned),
            count=len(scanned),
            scanned_count=len(scanned),
            last_evaluated_key=last_key,
        )

    def get_item(self, key: dict[str, Any]) -> dict[str, Any] | None:
        item = self._items.get(self._key(key))
        return copy.deepcopy(item) if item is not None else None

    def create_item(self, item: dict[str, Any], key_attributes: tuple[str, ...]) -> None:
        key = self._key(item)
        if key in self._items:
            raise ConditionFailedError("Item already exists", current_item=copy.deepcopy(self._items[key]))
        self._items[key] = copy.deepcopy(item)

    def update_item(
        self,
        key: dict[str, Any],
        updates: FieldUpdateSet,
        expected_version: int | None = None,
    ) -> dict[str, Any]:
        current = self._items.get(self._key(key))
        if current is None:
            raise ConditionFailedError("Update condition failed")
        if expected_version is not None and current.get(VERSION) != expected_version:
            raise ConditionFailedError("Update condition failed", current_item=copy.deepcopy(current))

        updated = updates.apply(current)
        self._items[self._key(key)] = updated
        return copy.deepcopy(updated)

    def delete_item(self, key: dict[str, Any]) -> dict[str, Any] | None:
        return self._items.pop(self._key(key), None)

    def scan(self, limit: int | None = None, start_key: dict[str, Any] | None = None) -> ItemPage:
        return self._page(list(self._items.values()), limit, start_key)

    def query_index(
        self,
        index_name: str,
        partition_attribute: str,
        partition_value: Any,
        range_condition: RangeCondition | None = None,
        start_key: dict[str, Any] | None = None,
    ) -> ItemPage:
        sort_attribute = self.indexes[index_name][1] if index_name in self.indexes else None
        if sort_attribute is None and range_condition:
            sort_attribute = range_condition.attribute

        matches = [item for item in self._items.values() if item.get(partition_attribute) == partition_value]
        if range_condition:
            matches = [item for item in matches if _matches(item.get(range_condition.attribute), range_condition)]
        if sort_attribute:
            # Items without the index sort key are not projected into the index
            matches = [item for item in matches if item.get(sort_attribute) is not None]
            matches.sort(key=lambda item: item[sort_attribute])
        return self._page(matches, self.query_page_size, start_key)

    def batch_put(self, items: list[dict[str, Any]]) -> dict[str, Any]:
        if len(items) > BATCH_WRITE_LIMIT:
            raise ValueError(f"A batch write accepts at most {BATCH_WRITE_LIMIT} items, got {len(items)}")
        self.batch_requests.append(copy.deepcopy(items))
        for item in items:
            self._items[self._key(item)] = copy.deepcopy(item)
        return {"UnprocessedItems": {}}

    def describe(self) -> dict[str, Any]:
        return {"TableName": self.table_name, "TableStatus": "ACTIVE"}
