"""
CRUD routes over the items table.

Each route performs one logical store operation. Concurrency control is left
to the store's conditional writes; this module only builds the conditions and
maps their failures onto HTTP responses.
"""

from http import HTTPStatus
from typing import Any

from aws_lambda_powertools import Logger, Tracer
from aws_lambda_powertools.utilities.data_classes import APIGatewayProxyEvent
from pydantic import ValidationError

from items_api.config import BATCH_WRITE_LIMIT, ApiConfig, ApiVariant
from items_api.core.errors import ItemConflictError, ItemNotFoundError, RequestValidationError
from items_api.core.health import build_health_report
from items_api.core.responses import build_response
from items_api.core.router import Router, parse_continuation_token, parse_json_body, parse_json_object
from items_api.dal.interface import ConditionFailedError, IItemStore, ItemPage, RangeCondition
from items_api.models.item import VERSION, FieldUpdateSet, stamp_new_item, utc_timestamp
from items_api.models.requests import BatchWriteRequest, IndexQueryParams

logger = Logger()
tracer = Tracer()

VERSION_CONFLICT_MESSAGE = "Version conflict - item was modified by another request"


def _page_body(page: ItemPage) -> dict[str, Any]:
    return {
        "items": page.items,
        "count": page.count,
        "lastEvaluatedKey": page.last_evaluated_key,
        "scannedCount": page.scanned_count,
    }


def chunked(items: list[dict[str, Any]], size: int) -> list[list[dict[str, Any]]]:
    return [items[i : i + size] for i in range(0, len(items), size)]


class ItemsApi:
    """Route handlers for one API variant, bound to an injected store."""

    def __init__(self, store: IItemStore, config: ApiConfig, variant: ApiVariant) -> None:
        self.store = store
        self.config = config
        self.variant = variant
        self.key_schema = variant.key_schema

    def register(self, router: Router) -> Router:
        item_path = self.key_schema.item_path

        router.get("/items", self.list_items)
        router.get("/health", self.health)
        if self.variant.supports_query:
            router.get("/query", self.query_items)
        router.get(item_path, self.get_item)

        router.post("/items", self.create_item)
        if self.variant.supports_batch:
            router.post("/batch", self.batch_create_items)

        router.put(item_path, self.update_item)
        router.delete(item_path, self.delete_item)
        return router

    @tracer.capture_method
    def list_items(self, event: APIGatewayProxyEvent, params: dict[str, str | None]) -> dict[str, Any]:
        query = event.query_string_parameters or {}
        start_key = parse_continuation_token(query.get("lastKey"))

        page = self.store.scan(limit=self.variant.scan_limit, start_key=start_key)
        return build_response(HTTPStatus.OK, _page_body(page))

    @tracer.capture_method
    def get_item(self, event: APIGatewayProxyEvent, params: dict[str, str | None]) -> dict[str, Any]:
        key = self.key_schema.key_from_path(params)

        item = self.store.get_item(key)
        if item is None:
            logger.info("Item not found", extra={"key": key})
            raise ItemNotFoundError()
        return build_response(HTTPStatus.OK, item)

    @tracer.capture_method
    def query_items(self, event: APIGatewayProxyEvent, params: dict[str, str | None]) -> dict[str, Any]:
        query = event.query_string_parameters or {}
        if not query.get("gsi") or not query.get("pk"):
            raise RequestValidationError("gsi and pk parameters are required")
        try:
            request = IndexQueryParams(**query)
        except ValidationError as e:
            raise RequestValidationError(
                "Invalid query parameters",
                details=[f"{'.'.join(str(loc) for loc in err['loc'])}: {err['msg']}" for err in e.errors()],
            ) from e

        range_condition = None
        if request.sk and request.sk_condition:
            range_condition = RangeCondition(
                attribute=f"{request.gsi}sk",
                operator=request.sk_condition,
                value=request.sk,
            )

        page = self.store.query_index(
            index_name=request.gsi,
            partition_attribute=f"{request.gsi}pk",
            partition_value=request.pk,
            range_condition=range_condition,
            start_key=parse_continuation_token(request.last_key),
        )
        return build_response(HTTPStatus.OK, _page_body(page))

    def health(self, event: APIGatewayProxyEvent, params: dict[str, str | None]) -> dict[str, Any]:
        report = build_health_report(self.store, self.config)
        return build_response(HTTPStatus.OK, report.model_dump(by_alias=True, exclude_none=True))

    @tracer.capture_method
    def create_item(self, event: APIGatewayProxyEvent, params: dict[str, str | None]) -> dict[str, Any]:
        body = parse_json_object(event)

        errors = self.key_schema.validate(body)
        if errors:
            raise RequestValidationError("Validation failed", details=errors)

        item = stamp_new_item(body)
        try:
            self.store.create_item(item, self.key_schema.attributes)
        except ConditionFailedError as e:
            raise ItemConflictError("Item already exists") from e

        logger.info("Item created successfully", extra={"key": self.key_schema.key_of(item)})
        return build_response(HTTPStatus.CREATED, {"message": "Item created successfully", "item": item})

    @tracer.capture_method
    def batch_create_items(self, event: APIGatewayProxyEvent, params: dict[str, str | None]) -> dict[str, Any]:
        body = parse_json_body(event)
        try:
            request = BatchWriteRequest(**body) if isinstance(body, dict) else None
        except ValidationError:
            request = None
        if request is None:
            raise RequestValidationError("items array is required and must not be empty")

        validation_errors = []
        for index, item in enumerate(request.items):
            errors = self.key_schema.validate(item) if isinstance(item, dict) else ["item must be a JSON object"]
            if errors:
                validation_errors.append({"index": index, "errors": errors})
        if validation_errors:
            raise RequestValidationError("Validation failed", details=validation_errors)

        timestamp = utc_timestamp()
        items = [stamp_new_item(item, timestamp) for item in request.items]

        results = []
        for chunk in chunked(items, BATCH_WRITE_LIMIT):
            results.append(self.store.batch_put(chunk))

        logger.info("Batch write completed", extra={"count": len(items), "chunks": len(results)})
        return build_response(
            HTTPStatus.CREATED,
            {"message": "Batch write completed", "processedItems": len(items), "results": results},
        )

    @tracer.capture_method
    def update_item(self, event: APIGatewayProxyEvent, params: dict[str, str | None]) -> dict[str, Any]:
        key = self.key_schema.key_from_path(params)
        body = parse_json_object(event)

        expected_version = None
        if self.variant.optimistic_locking:
            expected_version = body.get(VERSION) or 0
            if isinstance(expected_version, bool) or not isinstance(expected_version, int):
                raise RequestValidationError("Validation failed", details=["version must be an integer"])
        updates = FieldUpdateSet.from_updates(body, self.key_schema)

        try:
            item = self.store.update_item(key, updates, expected_version=expected_version)
        except ConditionFailedError as e:
            if e.current_item is None:
                raise ItemNotFoundError() from e
            logger.info("Version conflict", extra={"key": key, "expected_version": expected_version})
            raise ItemConflictError(VERSION_CONFLICT_MESSAGE) from e

        logger.info("Item updated successfully", extra={"key": key})
        return build_response(HTTPStatus.OK, {"message": "Item updated successfully", "item": item})

    @tracer.capture_method
    def delete_item(self, event: APIGatewayProxyEvent, params: dict[str, str | None]) -> dict[str, Any]:
        key = self.key_schema.key_from_path(params)

        deleted = self.store.delete_item(key)
        if deleted is None:
            raise ItemNotFoundError()

        logger.info("Item deleted successfully", extra={"key": key})
        return build_response(HTTPStatus.OK, {"message": "Item deleted successfully", "deletedItem": deleted})


def build_items_router(store: IItemStore, config: ApiConfig, variant: ApiVariant) -> Router:
    return ItemsApi(store, config, variant).register(Router(config))
