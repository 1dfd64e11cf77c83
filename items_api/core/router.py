"""
Request router for API Gateway REST proxy events.

Routes are registered per HTTP method with a path template such as
"/items/{pk}/{sk?}". A trailing "?" marks the last capture as optional.
"""

import base64
import json
import time
from collections.abc import Callable
from dataclasses import dataclass
from http import HTTPStatus
from typing import Any

from aws_lambda_powertools import Logger
from aws_lambda_powertools.utilities.data_classes import APIGatewayProxyEvent

from items_api.config import ApiConfig
from items_api.core.errors import ApiError, MethodNotAllowedError, RequestValidationError, RouteNotFoundError
from items_api.core.responses import build_response, error_response, internal_error_response

logger = Logger()

RouteHandler = Callable[[APIGatewayProxyEvent, dict[str, str | None]], dict[str, Any]]

ROUTABLE_METHODS = ("GET", "POST", "PUT", "DELETE")


@dataclass(frozen=True)
class Route:
    method: str
    template: str
    handler: RouteHandler

    @property
    def segments(self) -> list[str]:
        return self.template.split("/")

    def match(self, path: str) -> dict[str, str | None] | None:
        """Return the captured path parameters, or None if the path does not match."""
        segments = self.segments
        parts = path.split("/")
        required = len(segments) - 1 if segments[-1].endswith("?}") else len(segments)
        if not required <= len(parts) <= len(segments):
            return None

        params: dict[str, str | None] = {}
        for index, segment in enumerate(segments):
            value = parts[index] if index < len(parts) else None
            if segment.startswith("{") and segment.endswith("}"):
                params[segment.strip("{}?")] = value
            elif segment != value:
                return None
        return params


def parse_json_body(event: APIGatewayProxyEvent) -> Any:
    """
    Decode the request body as JSON.

    An absent body decodes to an empty object. Malformed JSON raises
    json.JSONDecodeError, which the router reports as an internal error.
    """
    body = event.body
    if body and event.is_base64_encoded:
        body = base64.b64decode(body).decode("utf-8")
    if not body:
        return {}
    return json.loads(body)


def parse_json_object(event: APIGatewayProxyEvent) -> dict[str, Any]:
    body = parse_json_body(event)
    if not isinstance(body, dict):
        raise RequestValidationError("Request body must be a JSON object")
    return body


def parse_continuation_token(token: str | None) -> dict[str, Any] | None:
    """Decode a lastKey query parameter produced from a previous page."""
    if not token:
        return None
    try:
        start_key = json.loads(token)
    except json.JSONDecodeError as e:
        raise RequestValidationError("lastKey must be a JSON-encoded key") from e
    if not isinstance(start_key, dict):
        raise RequestValidationError("lastKey must be a JSON-encoded key")
    return start_key


def unavailable_response(raw_event: dict[str, Any], error: Exception, config: ApiConfig) -> dict[str, Any]:
    """
    Answer a request that arrived before the routes could be built.

    CORS preflight still succeeds. Any other request is an internal error.
    Call from inside the except block so the traceback is logged.
    """
    if raw_event.get("httpMethod") == "OPTIONS":
        return build_response(HTTPStatus.OK)

    logger.exception("Lambda function error", extra={"error": str(error)})
    return internal_error_response(error, config)


class Router:
    """Dispatches proxy events to registered routes and formats the outcome."""

    def __init__(self, config: ApiConfig) -> None:
        self.config = config
        self._routes: dict[str, list[Route]] = {method: [] for method in ROUTABLE_METHODS}

    def add_route(self, method: str, template: str, handler: RouteHandler) -> None:
        if method not in self._routes:
            raise ValueError(f"Unsupported HTTP method: {method}")
        self._routes[method].append(Route(method=method, template=template, handler=handler))

    def get(self, template: str, handler: RouteHandler) -> None:
        self.add_route("GET", template, handler)

    def post(self, template: str, handler: RouteHandler) -> None:
        self.add_route("POST", template, handler)

    def put(self, template: str, handler: RouteHandler) -> None:
        self.add_route("PUT", template, handler)

    def delete(self, template: str, handler: RouteHandler) -> None:
        self.add_route("DELETE", template, handler)

    def dispatch(self, event: APIGatewayProxyEvent) -> dict[str, Any]:
        """
        Resolve the event to a route and invoke it.

        Raises:
            MethodNotAllowedError: For methods the router does not serve
            RouteNotFoundError: When no route of the method matches the path
        """
        method = event.http_method
        if method == "OPTIONS":
            return build_response(HTTPStatus.OK)
        if method not in self._routes:
            raise MethodNotAllowedError()

        for route in self._routes[method]:
            params = route.match(event.path)
            if params is not None:
                return route.handler(event, params)
        raise RouteNotFoundError()

    def resolve(self, raw_event: dict[str, Any]) -> dict[str, Any]:
        """
        Handle a raw API Gateway proxy event.

        Args:
            raw_event: API Gateway REST proxy event

        Returns:
            Response dict with statusCode, headers and body
        """
        start_time = time.perf_counter()
        event = APIGatewayProxyEvent(raw_event)
        request_context = raw_event.get("requestContext") or {}
        logger.info(
            "Lambda function invoked",
            extra={
                "http_method": raw_event.get("httpMethod"),
                "path": raw_event.get("path"),
                "request_id": request_context.get("requestId"),
            },
        )

        try:
            return self.dispatch(event)

        except ApiError as e:
            logger.info("Request rejected", extra={"status_code": int(e.status_code), "error": e.message})
            return error_response(e)

        except Exception as e:
            logger.exception(
                "Lambda function error",
                extra={"error": str(e), "duration_ms": (time.perf_counter() - start_time) * 1000},
            )
            return internal_error_response(e, self.config)
