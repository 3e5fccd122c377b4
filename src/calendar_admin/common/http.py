"""JSON helpers and the app-wide error handlers."""

from __future__ import annotations

import traceback
from typing import Any, Optional

from flask import Flask, current_app, jsonify, request
from pydantic import ValidationError as PydanticValidationError
from werkzeug.exceptions import HTTPException

from ..core.exceptions import DomainError, RateLimitError, ValidationError
from .app_logger import get_logger

log = get_logger(__name__)

GENERIC_SERVER_MESSAGE = "An unexpected error occurred. Please try again later."


def is_production() -> bool:
    return current_app.config.get("ENVIRONMENT") == "production"


def error_response(error: str, message: str, status: int, *, details: Optional[Any] = None, headers=None):
    body: dict[str, Any] = {"error": error, "message": message}
    if details is not None:
        body["details"] = details
    response = jsonify(body)
    response.status_code = status
    if headers:
        response.headers.extend(headers)
    return response


def read_json_body() -> dict:
    """Request body as a dict; anything else is a validation error."""
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a JSON object")
    return payload


def pydantic_details(exc: PydanticValidationError) -> list[dict]:
    return [
        {"field": ".".join(str(p) for p in err.get("loc", ())), "message": err.get("msg", "")}
        for err in exc.errors()
    ]


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(exc: DomainError):
        log.warning(
            "%s on %s %s",
            exc.error_name,
            request.method,
            request.path,
            extra={"context": {"status": exc.status_code, "message": exc.message}},
        )
        details = None if is_production() else exc.details
        headers = None
        if isinstance(exc, RateLimitError):
            headers = {"Retry-After": str(exc.retry_after)}
        return error_response(exc.error_name, exc.message, exc.status_code, details=details, headers=headers)

    @app.errorhandler(PydanticValidationError)
    def handle_schema_error(exc: PydanticValidationError):
        details = pydantic_details(exc)
        log.warning(
            "Invalid request data on %s %s",
            request.method,
            request.path,
            extra={"context": {"issues": details}},
        )
        return error_response(
            "ValidationError",
            "Invalid request data",
            400,
            details=None if is_production() else details,
        )

    @app.errorhandler(HTTPException)
    def handle_http_error(exc: HTTPException):
        name = (exc.name or "Error").replace(" ", "")
        return error_response(name, exc.description or name, exc.code or 500)

    @app.errorhandler(Exception)
    def handle_unexpected(exc: Exception):
        log.exception(
            "Unhandled error on %s %s",
            request.method,
            request.path,
            extra={"context": {"error_type": type(exc).__name__}},
        )
        if current_app.config.get("DEBUG", False):
            return error_response(
                "InternalServerError",
                str(exc),
                500,
                details={"traceback": traceback.format_exc()},
            )
        return error_response("InternalServerError", GENERIC_SERVER_MESSAGE, 500)
