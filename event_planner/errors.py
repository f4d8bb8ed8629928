"""
Error taxonomy for the API and the one place where exceptions become HTTP.

Route handlers raise the ApiError subclasses below; collaborator calls are
wrapped in translate_errors() so that anything unexpected from the database
or the password hasher surfaces as an InfrastructureError. The handlers
installed by register_error_handlers() turn all of them into
{"error": ..., "details": ...} JSON bodies.
"""

import logging
import re
from contextlib import contextmanager
from typing import Iterator, Optional, Tuple

from flask import Flask, Response, jsonify
from werkzeug.exceptions import HTTPException

logger = logging.getLogger(__name__)

# Argon2 encoded hashes, e.g. $argon2id$v=19$m=65536,t=3,p=4$salt$hash
_ARGON2_HASH = re.compile(r"\$argon2[a-z]*\$[A-Za-z0-9+/=$,]+")


class ApiError(Exception):
    """Base class for errors that map directly to an HTTP response."""

    status_code = 500

    def __init__(self, message: str, details: Optional[str] = None):
        self.message = message
        self.details = details
        super().__init__(message)


class ValidationError(ApiError):
    """A required field is missing, empty, or unparseable."""

    status_code = 400


class ConflictError(ApiError):
    """A unique key (the user's email) is already taken."""

    status_code = 400


class AuthError(ApiError):
    """Unknown email or wrong password. Both cases share one message."""

    status_code = 400


class NotFoundError(ApiError):
    status_code = 404


class InfrastructureError(ApiError):
    """Any store or hashing failure that is not classified above."""

    status_code = 500


def describe_failure(exc: BaseException) -> str:
    """
    Build a short, safe diagnostic string for an unexpected exception.

    Only the first line of the message is kept and any argon2 hash in it is
    masked, since database errors can echo back a failing row.
    """
    lines = str(exc).strip().splitlines()
    text = _ARGON2_HASH.sub("[redacted]", lines[0]) if lines else ""
    name = type(exc).__name__
    return f"{name}: {text}" if text else name


@contextmanager
def translate_errors(message: str) -> Iterator[None]:
    """
    Map collaborator failures to InfrastructureError(message).

    Usage:
        with translate_errors("Failed to create event"):
            row = get_event_store().create(...)
    """
    try:
        yield
    except ApiError:
        raise
    except Exception as exc:
        logger.exception(f"{message}: {type(exc).__name__}")
        raise InfrastructureError(message, details=describe_failure(exc)) from exc


def error_response(exc: ApiError) -> Tuple[Response, int]:
    """
    Render an ApiError as a JSON response.

    Returns:
        tuple: (response, status_code)
    """
    body = {"error": exc.message}
    if exc.details:
        body["details"] = exc.details
    return jsonify(body), exc.status_code


def register_error_handlers(app: Flask) -> None:
    """Install the JSON error handlers on the application."""

    @app.errorhandler(ApiError)
    def handle_api_error(exc: ApiError) -> Tuple[Response, int]:
        if exc.status_code >= 500:
            logger.error(f"[API] {exc.message} ({exc.details or 'no details'})")
        return error_response(exc)

    @app.errorhandler(HTTPException)
    def handle_http_error(exc: HTTPException) -> Tuple[Response, int]:
        return jsonify({"error": exc.name}), exc.code or 500

    @app.errorhandler(Exception)
    def handle_unexpected(exc: Exception) -> Tuple[Response, int]:
        logger.exception("Unhandled error while processing request")
        return error_response(InfrastructureError("Internal Server Error"))
