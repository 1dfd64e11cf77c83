"""
Basic items API Lambda handler.

Single-key (id) CRUD without version checks: concurrent updates are last-writer-wins.
"""

from functools import lru_cache
from typing import Any

from aws_lambda_powertools import Logger, Metrics, Tracer
from aws_lambda_powertools.logging import correlation_paths
from aws_lambda_powertools.utilities.typing import LambdaContext

from items_api.config import BASIC, ApiConfig
from items_api.core.items import build_items_router
from items_api.core.router import Router
from items_api.dal.dynamodb import DynamoDBHandler
from items_api.handlers.observability import record_response

logger = Logger()
tracer = Tracer()
metrics = Metrics()


@lru_cache(maxsize=1)
def get_router() -> Router:
    config = ApiConfig.from_env(BASIC.service_name, BASIC.default_table_name)
    store = DynamoDBHandler(config.table_name, region=config.region)
    return build_items_router(store, config, BASIC)


@logger.inject_lambda_context(correlation_id_path=correlation_paths.API_GATEWAY_REST)
@tracer.capture_lambda_handler(capture_response=False)
@metrics.log_metrics(capture_cold_start_metric=True)
def handler(event: dict[str, Any], context: LambdaContext) -> dict[str, Any]:
    response = get_router().resolve(event)
    record_response(metrics, response)
    return response
