"""
API Gateway proxy response formatting shared by every route.
"""

import json
from decimal import Decimal
from http import HTTPStatus
from typing import Any

from items_api.config import ApiConfig
from items_api.core.errors import ApiError

CORS_HEADERS = {
    "Content-Type": "application/json",
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "Content-Type,Authorization",
    "Access-Control-Allow-Methods": "GET,POST,PUT,DELETE,OPTIONS",
}

GENERIC_ERROR_MESSAGE = "An unexpected error occurred"


def _json_default(value: Any) -> Any:
    # DynamoDB returns every number as Decimal
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    return str(value)


def to_json(body: Any) -> str:
    return json.dumps(body, default=_json_default)


def build_response(status_code: int, body: Any = None) -> dict[str, Any]:
    """
    Build an API Gateway proxy response.

    Args:
        status_code: HTTP status code
        body: JSON-serialisable body, or None for an empty body

    Returns:
        Response dict with statusCode, headers and body
    """
    return {
        "statusCode": int(status_code),
        "headers": dict(CORS_HEADERS),
        "body": "" if body is None else to_json(body),
    }


def error_response(error: ApiError) -> dict[str, Any]:
    return build_response(error.status_code, error.to_body())


def internal_error_response(error: Exception, config: ApiConfig) -> dict[str, Any]:
    message = str(error) if config.expose_error_details else GENERIC_ERROR_MESSAGE
    return build_response(
        HTTPStatus.INTERNAL_SERVER_ERROR,
        {"error": "Internal server error", "message": message},
    )
