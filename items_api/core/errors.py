"""
Errors that map directly onto HTTP responses.

Anything not derived from ApiError is treated as an internal error by the router.
"""

from http import HTTPStatus
from typing import Any


class ApiError(Exception):
    status_code: HTTPStatus = HTTPStatus.INTERNAL_SERVER_ERROR

    def __init__(self, message: str, details: list[Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details

    def to_body(self) -> dict[str, Any]:
        body: dict[str, Any] = {"error": self.message}
        if self.details is not None:
            body["details"] = self.details
        return body


class RequestValidationError(ApiError):
    status_code = HTTPStatus.BAD_REQUEST


class ItemNotFoundError(ApiError):
    status_code = HTTPStatus.NOT_FOUND

    def __init__(self, message: str = "Item not found") -> None:
        super().__init__(message)


class ItemConflictError(ApiError):
    status_code = HTTPStatus.CONFLICT


class MethodNotAllowedError(ApiError):
    status_code = HTTPStatus.METHOD_NOT_ALLOWED

    def __init__(self, message: str = "Method not allowed") -> None:
        super().__init__(message)


class RouteNotFoundError(ApiError):
    status_code = HTTPStatus.NOT_FOUND

    def __init__(self, message: str = "Endpoint not found") -> None:
        super().__init__(message)
