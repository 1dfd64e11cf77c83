from decimal import Decimal
from unittest.mock import patch

import pytest
from boto3.dynamodb.conditions import ConditionBase
from botocore.exceptions import ClientError

from items_api.dal.dynamodb import DynamoDBHandler
from items_api.dal.interface import ConditionFailedError, RangeCondition
from items_api.models.item import FieldUpdateSet


def conditional_check_failed(operation: str, item: dict | None = None) -> ClientError:
    response = {"Error": {"Code": "ConditionalCheckFailedException", "Message": "The conditional request failed"}}
    if item is not None:
        response["Item"] = item
    return ClientError(response, operation)


@pytest.fixture
def mock_dynamodb():
    with patch("boto3.resource") as mock_resource:
        yield mock_resource.return_value


@pytest.fixture
def mock_table(mock_dynamodb):
    return mock_dynamodb.Table.return_value


@pytest.fixture
def dynamodb_handler(mock_dynamodb):
    return DynamoDBHandler("items-test", region="us-west-2")


def test_init(dynamodb_handler, mock_dynamodb):
    assert dynamodb_handler.table_name == "items-test"
    mock_dynamodb.Table.assert_called_once_with("items-test")


def test_get_item(dynamodb_handler, mock_table):
    mock_table.get_item.return_value = {"Item": {"pk": "u1", "sk": "profile"}}

    item = dynamodb_handler.get_item({"pk": "u1", "sk": "profile"})

    assert item == {"pk": "u1", "sk": "profile"}
    mock_table.get_item.assert_called_once_with(Key={"pk": "u1", "sk": "profile"})


def test_get_item_not_found(dynamodb_handler, mock_table):
    mock_table.get_item.return_value = {}

    assert dynamodb_handler.get_item({"pk": "u1", "sk": "profile"}) is None


class TestCreateItem:
    def test_create_converts_floats(self, dynamodb_handler, mock_table):
        dynamodb_handler.create_item({"pk": "u1", "sk": "a", "price": 9.99}, ("pk", "sk"))

        call_args = mock_table.put_item.call_args
        assert call_args.kwargs["Item"]["price"] == Decimal("9.99")
        assert isinstance(call_args.kwargs["ConditionExpression"], ConditionBase)

    def test_create_existing_item(self, dynamodb_handler, mock_table):
        mock_table.put_item.side_effect = conditional_check_failed("PutItem")

        with pytest.raises(ConditionFailedError, match="Item already exists"):
            dynamodb_handler.create_item({"pk": "u1", "sk": "a"}, ("pk", "sk"))

    def test_other_errors_propagate(self, dynamodb_handler, mock_table):
        error_response = {"Error": {"Code": "ProvisionedThroughputExceededException", "Message": "Slow down"}}
        mock_table.put_item.side_effect = ClientError(error_response, "PutItem")

        with pytest.raises(ClientError):
            dynamodb_handler.create_item({"pk": "u1", "sk": "a"}, ("pk", "sk"))


class TestUpdateItem:
    def test_update_expression(self, dynamodb_handler, mock_table):
        mock_table.update_item.return_value = {"Attributes": {"pk": "u1", "sk": "a", "version": Decimal(2)}}
        updates = FieldUpdateSet(fields={"name": "Anna", "updated_at": "ts"})

        result = dynamodb_handler.update_item({"pk": "u1", "sk": "a"}, updates, expected_version=1)

        assert result["version"] == Decimal(2)
        kwargs = mock_table.update_item.call_args.kwargs
        assert kwargs["Key"] == {"pk": "u1", "sk": "a"}
        assert kwargs["UpdateExpression"] == (
            "SET #f0 = :f0, #f1 = :f1, #version = if_not_exists(#version, :zero) + :one"
        )
        assert kwargs["ExpressionAttributeNames"] == {"#f0": "name", "#f1": "updated_at", "#version": "version"}
        assert kwargs["ExpressionAttributeValues"] == {":f0": "Anna", ":f1": "ts", ":zero": 0, ":one": 1}
        assert kwargs["ReturnValues"] == "ALL_NEW"
        assert kwargs["ReturnValuesOnConditionCheckFailure"] == "ALL_OLD"
        assert isinstance(kwargs["ConditionExpression"], ConditionBase)

    def test_version_conflict_carries_current_item(self, dynamodb_handler, mock_table):
        mock_table.update_item.side_effect = conditional_check_failed(
            "UpdateItem", item={"pk": {"S": "u1"}, "version": {"N": "3"}}
        )

        with pytest.raises(ConditionFailedError) as exc_info:
            dynamodb_handler.update_item({"pk": "u1", "sk": "a"}, FieldUpdateSet(), expected_version=1)

        assert exc_info.value.current_item == {"pk": "u1", "version": Decimal(3)}

    def test_missing_item(self, dynamodb_handler, mock_table):
        mock_table.update_item.side_effect = conditional_check_failed("UpdateItem")

        with pytest.raises(ConditionFailedError) as exc_info:
            dynamodb_handler.update_item({"pk": "u1", "sk": "a"}, FieldUpdateSet())

        assert exc_info.value.current_item is None


def test_delete_item(dynamodb_handler, mock_table):
    mock_table.delete_item.return_value = {"Attributes": {"pk": "u1", "sk": "a"}}

    assert dynamodb_handler.delete_item({"pk": "u1", "sk": "a"}) == {"pk": "u1", "sk": "a"}
    mock_table.delete_item.assert_called_once_with(Key={"pk": "u1", "sk": "a"}, ReturnValues="ALL_OLD")


def test_delete_missing_item(dynamodb_handler, mock_table):
    mock_table.delete_item.return_value = {}

    assert dynamodb_handler.delete_item({"pk": "u1", "sk": "a"}) is None


def test_scan(dynamodb_handler, mock_table):
    mock_table.scan.return_value = {
        "Items": [{"pk": "u1", "sk": "a"}],
        "Count": 1,
        "ScannedCount": 3,
        "LastEvaluatedKey": {"pk": "u1", "sk": "a"},
    }

    page = dynamodb_handler.scan(limit=50, start_key={"pk": "u0", "sk": "a"})

    assert page.count == 1
    assert page.scanned_count == 3
    assert page.last_evaluated_key == {"pk": "u1", "sk": "a"}
    mock_table.scan.assert_called_once_with(Limit=50, ExclusiveStartKey={"pk": "u0", "sk": "a"})


def test_unbounded_scan(dynamodb_handler, mock_table):
    mock_table.scan.return_value = {"Items": []}

    page = dynamodb_handler.scan()

    assert page.items == []
    assert page.last_evaluated_key is None
    mock_table.scan.assert_called_once_with()


def test_query_index(dynamodb_handler, mock_table):
    mock_table.query.return_value = {"Items": [{"pk": "o1"}], "Count": 1, "ScannedCount": 1}

    page = dynamodb_handler.query_index("gsi1", "gsi1pk", "c1", RangeCondition("gsi1sk", ">=", "2024"))

    assert page.items == [{"pk": "o1"}]
    kwargs = mock_table.query.call_args.kwargs
    assert kwargs["IndexName"] == "gsi1"
    assert isinstance(kwargs["KeyConditionExpression"], ConditionBase)
    assert "ExclusiveStartKey" not in kwargs


def test_query_index_forwards_start_key(dynamodb_handler, mock_table):
    start_key = {"pk": "o1", "sk": "order", "gsi1pk": "c1", "gsi1sk": "2024-01"}
    mock_table.query.return_value = {
        "Items": [{"pk": "o2"}],
        "Count": 1,
        "ScannedCount": 1,
        "LastEvaluatedKey": {"pk": "o2", "sk": "order", "gsi1pk": "c1", "gsi1sk": "2024-02"},
    }

    page = dynamodb_handler.query_index("gsi1", "gsi1pk", "c1", start_key=start_key)

    assert mock_table.query.call_args.kwargs["ExclusiveStartKey"] == start_key
    assert page.last_evaluated_key == {"pk": "o2", "sk": "order", "gsi1pk": "c1", "gsi1sk": "2024-02"}


def test_query_index_rejects_unknown_operator(dynamodb_handler):
    with pytest.raises(ValueError, match="Unsupported range operator"):
        dynamodb_handler.query_index("gsi1", "gsi1pk", "c1", RangeCondition("gsi1sk", "<>", "2024"))


def test_batch_put(dynamodb_handler, mock_dynamodb):
    mock_dynamodb.batch_write_item.return_value = {"UnprocessedItems": {}, "ResponseMetadata": {}}

    result = dynamodb_handler.batch_put([{"pk": "u1", "sk": "a", "score": 1.5}])

    assert result == {"UnprocessedItems": {}}
    request_items = mock_dynamodb.batch_write_item.call_args.kwargs["RequestItems"]
    assert request_items == {"items-test": [{"PutRequest": {"Item": {"pk": "u1", "sk": "a", "score": Decimal("1.5")}}}]}


def test_batch_put_limit(dynamodb_handler, mock_dynamodb):
    with pytest.raises(ValueError):
        dynamodb_handler.batch_put([{"pk": str(i), "sk": "a"} for i in range(26)])

    mock_dynamodb.batch_write_item.assert_not_called()


def test_describe(dynamodb_handler, mock_dynamodb):
    mock_dynamodb.meta.client.describe_table.return_value = {
        "Table": {"TableName": "items-test", "TableStatus": "ACTIVE", "ItemCount": 3}
    }

    assert dynamodb_handler.describe() == {"TableName": "items-test", "TableStatus": "ACTIVE"}
    mock_dynamodb.meta.client.describe_table.assert_called_once_with(TableName="items-test")
