"""
Item models: key schema, metadata stamping and typed field updates.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from items_api.core.errors import RequestValidationError

CREATED_AT = "created_at"
UPDATED_AT = "updated_at"
VERSION = "version"


def utc_timestamp() -> str:
    return datetime.now(UTC).isoformat()


@dataclass(frozen=True)
class KeySchema:
    """Primary key layout of the items table."""

    partition_key: str
    sort_key: str | None = None
    default_sort_value: str = "default"

    @property
    def attributes(self) -> tuple[str, ...]:
        if self.sort_key is None:
            return (self.partition_key,)
        return (self.partition_key, self.sort_key)

    @property
    def item_path(self) -> str:
        """Route template addressing a single item."""
        path = f"/items/{{{self.partition_key}}}"
        if self.sort_key is not None:
            path += f"/{{{self.sort_key}?}}"
        return path

    def key_from_path(self, params: dict[str, str | None]) -> dict[str, str]:
        """
        Build the item key from captured path parameters.

        A missing sort segment falls back to the default sort value.

        Raises:
            RequestValidationError: If the partition segment is empty
        """
        partition_value = params.get(self.partition_key)
        if not partition_value:
            raise RequestValidationError("Validation failed", details=[f"{self.partition_key} is required"])

        key = {self.partition_key: partition_value}
        if self.sort_key is not None:
            key[self.sort_key] = params.get(self.sort_key) or self.default_sort_value
        return key

    def key_of(self, item: dict[str, Any]) -> dict[str, Any]:
        return {attribute: item[attribute] for attribute in self.attributes}

    def validate(self, item: dict[str, Any]) -> list[str]:
        """Return the list of missing key attributes (empty when valid)."""
        return [f"{attribute} is required" for attribute in self.attributes if not item.get(attribute)]


def stamp_new_item(item: dict[str, Any], timestamp: str | None = None) -> dict[str, Any]:
    """Return a copy of the item with creation metadata and version 1."""
    timestamp = timestamp or utc_timestamp()
    stamped = dict(item)
    stamped[CREATED_AT] = timestamp
    stamped[UPDATED_AT] = timestamp
    stamped[VERSION] = 1
    return stamped


@dataclass(frozen=True)
class FieldUpdateSet:
    """
    Attribute assignments applied by a single update.

    The version counter is never assigned directly; it is incremented when
    increment_version is set.
    """

    fields: dict[str, Any] = field(default_factory=dict)
    increment_version: bool = True

    @classmethod
    def from_updates(
        cls,
        updates: dict[str, Any],
        key_schema: KeySchema,
        timestamp: str | None = None,
    ) -> "FieldUpdateSet":
        """
        Build an update set from a PUT body.

        Args:
            updates: Parsed request body without the expected version
            key_schema: Key layout, whose attributes cannot be reassigned
            timestamp: Value for updated_at, defaults to now

        Raises:
            RequestValidationError: If the body assigns an immutable attribute
        """
        immutable = (*key_schema.attributes, CREATED_AT)
        errors = [f"{name} cannot be updated" for name in immutable if name in updates]
        if errors:
            raise RequestValidationError("Validation failed", details=errors)

        fields = {name: value for name, value in updates.items() if name != VERSION}
        fields[UPDATED_AT] = timestamp or utc_timestamp()
        return cls(fields=fields)

    def apply(self, item: dict[str, Any]) -> dict[str, Any]:
        """Return a copy of the item with the update applied."""
        updated = dict(item)
        updated.update(self.fields)
        if self.increment_version:
            updated[VERSION] = int(item.get(VERSION, 0)) + 1
        return updated
