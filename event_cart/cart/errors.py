from __future__ import annotations

from enum import Enum
from http import HTTPStatus
from typing import Any

import httpx


class ErrorKind(str, Enum):
    NOT_AUTHENTICATED = "not_authenticated"
    VALIDATION_FAILED = "validation_failed"
    NOT_FOUND = "not_found"
    SERVER_ERROR = "server_error"
    RATE_LIMITED = "rate_limited"
    TIMEOUT = "timeout"
    UNKNOWN = "unknown"


class CartServiceError(Exception):
    kind = ErrorKind.UNKNOWN
    default_message = "Cart request failed"

    def __init__(self, message: str | None = None, status: int | None = None) -> None:
        self.message = message or self.default_message
        self.status = status
        super().__init__(self.message)


class NotAuthenticated(CartServiceError):
    kind = ErrorKind.NOT_AUTHENTICATED
    default_message = "Authentication required"


class ValidationFailed(CartServiceError):
    kind = ErrorKind.VALIDATION_FAILED
    default_message = "Invalid request, please check your input"


class NotFound(CartServiceError):
    kind = ErrorKind.NOT_FOUND
    default_message = "Requested resource was not found"


class RateLimited(CartServiceError):
    kind = ErrorKind.RATE_LIMITED
    default_message = "Too many requests, please wait a moment and try again"


class ServerError(CartServiceError):
    kind = ErrorKind.SERVER_ERROR
    default_message = "Server error, please try again later"


class RequestTimeout(CartServiceError):
    kind = ErrorKind.TIMEOUT
    default_message = "The cart service did not respond in time"


class UnknownCartError(CartServiceError):
    pass


def _server_message(response: httpx.Response) -> str | None:
    try:
        body: Any = response.json()
    except ValueError:
        return None
    if not isinstance(body, dict):
        return None
    message = body.get("message") or body.get("detail")
    return message if isinstance(message, str) else None


def classify_response(
    response: httpx.Response,
    not_found_message: str | None = None,
) -> CartServiceError:
    status = response.status_code
    if status == HTTPStatus.UNAUTHORIZED:
        return NotAuthenticated(status=status)
    if status in (HTTPStatus.BAD_REQUEST, HTTPStatus.UNPROCESSABLE_ENTITY):
        return ValidationFailed(_server_message(response), status=status)
    if status == HTTPStatus.NOT_FOUND:
        return NotFound(not_found_message or _server_message(response), status=status)
    if status == HTTPStatus.TOO_MANY_REQUESTS:
        return RateLimited(status=status)
    if status >= HTTPStatus.INTERNAL_SERVER_ERROR:
        return ServerError(status=status)
    return UnknownCartError(_server_message(response), status=status)


def classify_transport_error(exc: httpx.HTTPError) -> CartServiceError:
    if isinstance(exc, httpx.TimeoutException):
        return RequestTimeout()
    return UnknownCartError(str(exc) or None)
