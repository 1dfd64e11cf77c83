"""
Connectivity check Lambda handler used to smoke-test a deployment.
"""

from functools import lru_cache
from typing import Any

from aws_lambda_powertools import Logger, Tracer
from aws_lambda_powertools.logging import correlation_paths
from aws_lambda_powertools.utilities.typing import LambdaContext

from items_api.config import CONNECTIVITY_DEFAULT_TABLE_NAME, CONNECTIVITY_SERVICE_NAME, ApiConfig
from items_api.core.connectivity import build_connectivity_router
from items_api.core.router import Router
from items_api.dal.dynamodb import DynamoDBHandler

logger = Logger()
tracer = Tracer()


@lru_cache(maxsize=1)
def get_router() -> Router:
    config = ApiConfig.from_env(CONNECTIVITY_SERVICE_NAME, CONNECTIVITY_DEFAULT_TABLE_NAME)
    return build_connectivity_router(DynamoDBHandler(config.table_name, region=config.region), config)


@logger.inject_lambda_context(correlation_id_path=correlation_paths.API_GATEWAY_REST)
@tracer.capture_lambda_handler(capture_response=False)
def handler(event: dict[str, Any], context: LambdaContext) -> dict[str, Any]:
    return get_router().resolve(event)
