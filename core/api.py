"""API utilities for FastAPI route handling."""

import functools
import logging
from collections.abc import Callable
from typing import Any

from fastapi import HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from core.constants import INTERNAL_ERROR_MESSAGE, INVALID_REQUEST_MESSAGE
from core.exceptions import (
    NoRouteFoundException,
    ResourceNotFoundException,
    StateMilesException,
    ValidationException,
)


def api_route(logger: logging.Logger):
    """
    Decorator for FastAPI endpoints that provides standardized error handling.

    Wraps async endpoint functions with try/except to:
    - Re-raise HTTPException instances as-is
    - Map custom exceptions to appropriate HTTP status codes
    - Log and convert every other failure to a generic 500 whose detail
      never includes provider diagnostics

    Usage:
        @router.get("/api/example")
        @api_route(logger)
        async def my_endpoint():
            # ... business logic ...
            return result
    """

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            try:
                return await func(*args, **kwargs)
            except HTTPException:
                raise
            except ValidationException as e:
                logger.warning("Validation error in %s: %s", func.__name__, e.message)
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail={"message": e.message, "errors": e.field_errors},
                ) from e
            except NoRouteFoundException as e:
                logger.info("No route found in %s: %s", func.__name__, e.details)
                raise HTTPException(
                    status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                    detail=e.message,
                ) from e
            except ResourceNotFoundException as e:
                logger.info("Resource not found in %s: %s", func.__name__, e.message)
                raise HTTPException(
                    status_code=status.HTTP_404_NOT_FOUND,
                    detail=e.message,
                ) from e
            except StateMilesException as e:
                # External service, rate limit and configuration failures
                logger.exception(
                    "Application error in %s: %s (%s)",
                    func.__name__,
                    e.message,
                    e.details,
                )
                raise HTTPException(
                    status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                    detail=INTERNAL_ERROR_MESSAGE,
                ) from e
            except Exception as e:
                logger.exception("Unexpected error in %s", func.__name__)
                raise HTTPException(
                    status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                    detail=INTERNAL_ERROR_MESSAGE,
                ) from e

        return wrapper

    return decorator


async def http_exception_handler(
    request: Request,
    exc: StarletteHTTPException,
) -> JSONResponse:
    """Render HTTP errors as ``{"success": false, "error": ..., "errors": ...}``."""
    content: dict[str, Any] = {"success": False}
    detail = exc.detail
    if isinstance(detail, dict):
        content["error"] = detail.get("message")
        content["errors"] = detail.get("errors") or {}
    else:
        content["error"] = detail
    return JSONResponse(
        status_code=exc.status_code,
        content=content,
        headers=getattr(exc, "headers", None),
    )


def _error_field(loc: tuple | list) -> str:
    # ("body", "trip", "origin") -> "trip.origin"; ("body",) -> "body"
    parts = [str(part) for part in loc[1:]] or [str(part) for part in loc]
    return ".".join(parts) or "request"


async def request_validation_exception_handler(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    """Render malformed request bodies and parameters as a 400 envelope."""
    errors: dict[str, list[str]] = {}
    for error in exc.errors():
        field = _error_field(error.get("loc") or ())
        errors.setdefault(field, []).append(str(error.get("msg") or "is invalid"))
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "success": False,
            "error": INVALID_REQUEST_MESSAGE,
            "errors": errors,
        },
    )
