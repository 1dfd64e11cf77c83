"""
DynamoDB data access handler for items.
"""

import json
from decimal import Decimal
from typing import Any

import boto3
from aws_lambda_powertools import Logger, Tracer
from boto3.dynamodb.conditions import Attr, ConditionBase, Key
from boto3.dynamodb.types import TypeDeserializer
from botocore.exceptions import ClientError

from items_api.config import BATCH_WRITE_LIMIT
from items_api.dal.interface import ConditionFailedError, IItemStore, ItemPage, RangeCondition
from items_api.models.item import VERSION, FieldUpdateSet

logger = Logger()
tracer = Tracer()

CONDITIONAL_CHECK_FAILED = "ConditionalCheckFailedException"

_deserializer = TypeDeserializer()


def to_dynamodb(value: Any) -> Any:
    """Convert JSON floats to Decimal, which is the only number type boto3 accepts."""
    return json.loads(json.dumps(value), parse_float=Decimal)


def _range_condition(condition: RangeCondition) -> ConditionBase:
    key = Key(condition.attribute)
    if condition.operator == "=":
        return key.eq(condition.value)
    if condition.operator == "<":
        return key.lt(condition.value)
    if condition.operator == "<=":
        return key.lte(condition.value)
    if condition.operator == ">":
        return key.gt(condition.value)
    if condition.operator == ">=":
        return key.gte(condition.value)
    if condition.operator == "begins_with":
        return key.begins_with(condition.value)
    raise ValueError(f"Unsupported range operator: {condition.operator}")


def _page(response: dict[str, Any]) -> ItemPage:
    items: list[dict[str, Any]] = response.get("Items", [])
    return ItemPage(
        items=items,
        count=response.get("Count", len(items)),
        scanned_count=response.get("ScannedCount", len(items)),
        last_evaluated_key=response.get("LastEvaluatedKey"),
    )


class DynamoDBHandler(IItemStore):
    """Handler for DynamoDB operations on items."""

    def __init__(self, table_name: str, region: str | None = None) -> None:
        self.table_name = table_name
        self.dynamodb = boto3.resource("dynamodb", region_name=region)
        self.table = self.dynamodb.Table(table_name)

    def _condition_failed(self, error: ClientError) -> bool:
        return error.response.get("Error", {}).get("Code") == CONDITIONAL_CHECK_FAILED

    @tracer.capture_method
    def get_item(self, key: dict[str, Any]) -> dict[str, Any] | None:
        """
        Get an item by primary key.

        Args:
            key: Primary key attributes

        Returns:
            Item data or None if not found
        """
        response = self.table.get_item(Key=key)
        item: dict[str, Any] | None = response.get("Item")
        if item:
            logger.debug("Retrieved item from DynamoDB", extra={"key": key})
        else:
            logger.debug("Item not found in DynamoDB", extra={"key": key})
        return item

    @tracer.capture_method
    def create_item(self, item: dict[str, Any], key_attributes: tuple[str, ...]) -> None:
        """
        Put an item into the table unless its key is already taken.

        Args:
            item: Item to store (must include the key attributes)
            key_attributes: Names of the primary key attributes

        Raises:
            ConditionFailedError: If an item with the same key exists
        """
        condition: ConditionBase = Attr(key_attributes[0]).not_exists()
        for attribute in key_attributes[1:]:
            condition = condition & Attr(attribute).not_exists()

        try:
            self.table.put_item(Item=to_dynamodb(item), ConditionExpression=condition)
        except ClientError as e:
            if self._condition_failed(e):
                raise ConditionFailedError("Item already exists") from e
            raise
        logger.debug("Stored item in DynamoDB", extra={"key": {name: item.get(name) for name in key_attributes}})

    @tracer.capture_method
    def update_item(
        self,
        key: dict[str, Any],
        updates: FieldUpdateSet,
        expected_version: int | None = None,
    ) -> dict[str, Any]:
        """
        Update an existing item.

        Field names are bound through placeholders so that reserved words and
        arbitrary attribute names are safe in the update expression.

        Args:
            key: Primary key attributes
            updates: Assignments to apply
            expected_version: Stored version required for the write, if any

        Returns:
            Updated item attributes

        Raises:
            ConditionFailedError: If the item is missing or its version differs
        """
        assignments: list[str] = []
        names: dict[str, str] = {}
        values: dict[str, Any] = {}
        for index, (name, value) in enumerate(updates.fields.items()):
            names[f"#f{index}"] = name
            values[f":f{index}"] = to_dynamodb(value)
            assignments.append(f"#f{index} = :f{index}")

        if updates.increment_version:
            names["#version"] = VERSION
            values[":zero"] = 0
            values[":one"] = 1
            assignments.append("#version = if_not_exists(#version, :zero) + :one")

        condition: ConditionBase = Attr(next(iter(key))).exists()
        if expected_version is not None:
            condition = condition & Attr(VERSION).eq(expected_version)

        kwargs: dict[str, Any] = {
            "Key": key,
            "UpdateExpression": "SET " + ", ".join(assignments),
            "ExpressionAttributeNames": names,
            "ExpressionAttributeValues": values,
            "ConditionExpression": condition,
            "ReturnValues": "ALL_NEW",
            "ReturnValuesOnConditionCheckFailure": "ALL_OLD",
        }

        try:
            response = self.table.update_item(**kwargs)
        except ClientError as e:
            if self._condition_failed(e):
                raw_item = e.response.get("Item")
                current = {name: _deserializer.deserialize(value) for name, value in raw_item.items()} if raw_item else None
                raise ConditionFailedError("Update condition failed", current_item=current) from e
            raise

        logger.debug("Updated item in DynamoDB", extra={"key": key})
        attributes: dict[str, Any] = response.get("Attributes", {})
        return attributes

    @tracer.capture_method
    def delete_item(self, key: dict[str, Any]) -> dict[str, Any] | None:
        """
        Delete an item from the table.

        Args:
            key: Primary key attributes

        Returns:
            The deleted item's attributes, or None if nothing was stored
        """
        response = self.table.delete_item(Key=key, ReturnValues="ALL_OLD")
        attributes: dict[str, Any] | None = response.get("Attributes")
        logger.debug("Deleted item from DynamoDB", extra={"key": key, "existed": attributes is not None})
        return attributes

    @tracer.capture_method
    def scan(self, limit: int | None = None, start_key: dict[str, Any] | None = None) -> ItemPage:
        kwargs: dict[str, Any] = {}
        if limit:
            kwargs["Limit"] = limit
        if start_key:
            kwargs["ExclusiveStartKey"] = start_key

        page = _page(self.table.scan(**kwargs))
        logger.debug("Scanned DynamoDB", extra={"count": page.count, "has_more": page.last_evaluated_key is not None})
        return page

    @tracer.capture_method
    def query_index(
        self,
        index_name: str,
        partition_attribute: str,
        partition_value: Any,
        range_condition: RangeCondition | None = None,
        start_key: dict[str, Any] | None = None,
    ) -> ItemPage:
        """
        Query a secondary index by partition value with an optional range condition.

        Args:
            index_name: Name of the global secondary index
            partition_attribute: Partition key attribute of the index
            partition_value: Partition key value to match
            range_condition: Optional condition on the index sort key
            start_key: Continuation token from a previous page

        Returns:
            One page of matching items
        """
        key_condition: ConditionBase = Key(partition_attribute).eq(partition_value)
        if range_condition:
            key_condition = key_condition & _range_condition(range_condition)

        kwargs: dict[str, Any] = {"IndexName": index_name, "KeyConditionExpression": key_condition}
        if start_key:
            kwargs["ExclusiveStartKey"] = start_key

        page = _page(self.table.query(**kwargs))
        logger.debug("Queried DynamoDB index", extra={"index": index_name, "count": page.count})
        return page

    @tracer.capture_method
    def batch_put(self, items: list[dict[str, Any]]) -> dict[str, Any]:
        """
        Write multiple items in one BatchWriteItem request.

        Args:
            items: Items to write (at most 25, each with its key attributes)

        Returns:
            The request result with any unprocessed items
        """
        if len(items) > BATCH_WRITE_LIMIT:
            raise ValueError(f"A batch write accepts at most {BATCH_WRITE_LIMIT} items, got {len(items)}")

        response = self.dynamodb.batch_write_item(
            RequestItems={self.table_name: [{"PutRequest": {"Item": to_dynamodb(item)}} for item in items]}
        )
        logger.debug("Batch wrote items to DynamoDB", extra={"count": len(items)})
        return {"UnprocessedItems": response.get("UnprocessedItems", {})}

    @tracer.capture_method
    def describe(self) -> dict[str, Any]:
        response = self.dynamodb.meta.client.describe_table(TableName=self.table_name)
        table: dict[str, Any] = response["Table"]
        return {"TableName": table.get("TableName"), "TableStatus": table.get("TableStatus")}
