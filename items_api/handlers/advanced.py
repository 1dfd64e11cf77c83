"""
Advanced items API Lambda handler.

Serves composite-key (pk/sk) CRUD with optimistic concurrency, batch writes,
secondary-index queries and a health check.
"""

from functools import lru_cache
from typing import Any

from aws_lambda_powertools import Logger, Metrics, Tracer
from aws_lambda_powertools.logging import correlation_paths
from aws_lambda_powertools.utilities.typing import LambdaContext

from items_api.config import ADVANCED, ApiConfig, ConfigurationError
from items_api.core.items import build_items_router
from items_api.core.router import Router, unavailable_response
from items_api.dal.dynamodb import DynamoDBHandler
from items_api.handlers.observability import record_response

logger = Logger()
tracer = Tracer()
metrics = Metrics()


@lru_cache(maxsize=1)
def get_router() -> Router:
    """Build the router once per container. A missing TABLE_NAME raises and is retried on the next call."""
    config = ApiConfig.from_env(ADVANCED.service_name, ADVANCED.default_table_name)
    store = DynamoDBHandler(config.table_name, region=config.region)
    logger.info("Initialised items API", extra={"table_name": config.table_name, "environment": config.environment})
    return build_items_router(store, config, ADVANCED)


@logger.inject_lambda_context(correlation_id_path=correlation_paths.API_GATEWAY_REST)
@tracer.capture_lambda_handler(capture_response=False)
@metrics.log_metrics(capture_cold_start_metric=True)
def handler(event: dict[str, Any], context: LambdaContext) -> dict[str, Any]:
    """
    Lambda handler for the advanced items API.

    Args:
        event: API Gateway REST proxy event
        context: Lambda context

    Returns:
        Response dict with statusCode, headers and body
    """
    try:
        router = get_router()
    except ConfigurationError as e:
        response = unavailable_response(event, e, ApiConfig.without_table(ADVANCED.service_name))
    else:
        response = router.resolve(event)

    record_response(metrics, response)
    return response
