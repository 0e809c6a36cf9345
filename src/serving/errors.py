"""Error taxonomy of the HTTP layer and its FastAPI handlers."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Iterator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse


class ApiError(Exception):
    """Error rendered as ``{success: false, error}`` with ``status_code``."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ApiError):
    status_code = 400


class NotFoundError(ApiError):
    status_code = 404


class InternalError(ApiError):
    status_code = 500


def error_body(message: str) -> dict:
    return {"success": False, "error": message}


def _describe_request_error(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    if first.get("type") == "json_invalid":
        return "Invalid JSON body"
    return f"Invalid parameter {location}: {first.get('msg', 'invalid value')}".strip()


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(ApiError)
    async def handle_api_error(request: Request, exc: ApiError) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content=error_body(exc.message))

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return JSONResponse(status_code=400, content=error_body(_describe_request_error(exc)))


@contextmanager
def route_guard(logger: Any, event: str, message: str) -> Iterator[None]:
    """
    Turn unexpected exceptions into ``InternalError(message)``.

    ``ApiError`` passes through untouched; anything else is logged under
    ``event`` with its detail, which never reaches the client.
    """
    try:
        yield
    except ApiError:
        raise
    except Exception as exc:
        logger.opt(exception=exc).error({"event": event, "details": {"error": str(exc)}})
        raise InternalError(message) from exc


__all__ = [
    "ApiError",
    "InternalError",
    "NotFoundError",
    "ValidationError",
    "register_error_handlers",
    "route_guard",
]
