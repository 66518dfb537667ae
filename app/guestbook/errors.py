"""
Error taxonomy for the guestbook API.

Every error a view can raise derives from GuestbookError and carries the HTTP
status and the message that is safe to show to the caller. register_error_handlers()
turns them into the uniform {"error": "<message>"} body.
"""
from __future__ import annotations

from collections.abc import Callable
from functools import wraps
from typing import Any

from flask import Flask, current_app, g, jsonify, request
from werkzeug.exceptions import HTTPException


class GuestbookError(Exception):
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(GuestbookError):
    status_code = 400
    default_message = "Invalid submission"


class MissingField(ValidationError):
    default_message = "Name and email are required"


class InvalidEmail(ValidationError):
    default_message = "Invalid email format"


class InvalidRange(GuestbookError):
    status_code = 400
    default_message = "Start and end dates required"


class AuthError(GuestbookError):
    status_code = 401
    default_message = "Access denied"


class InvalidCredentials(AuthError):
    default_message = "Invalid credentials"


class MissingToken(AuthError):
    default_message = "Access denied"


class InvalidToken(AuthError):
    status_code = 403
    default_message = "Invalid token"


class StorageError(GuestbookError):
    """Connectivity or constraint failure in the backing store. Detail stays server-side."""

    default_message = "Storage operation failed"


def storage_failure_message(message: str) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """Public message returned when the decorated view hits a StorageError."""

    def decorator(fn: Callable[..., Any]) -> Callable[..., Any]:
        @wraps(fn)
        def wrapped(*args: Any, **kwargs: Any):
            g.storage_failure_message = message
            return fn(*args, **kwargs)

        return wrapped

    return decorator


def _error(message: str, status: int):
    return jsonify({"error": message}), status


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(StorageError)
    def _storage_error(e: StorageError):
        # Full detail (and the chained driver error) goes to the log only.
        current_app.logger.exception("Storage failure on %s %s: %s", request.method, request.path, e.message)
        return _error(getattr(g, "storage_failure_message", None) or "Internal server error", 500)

    @app.errorhandler(GuestbookError)
    def _guestbook_error(e: GuestbookError):
        if e.status_code >= 500:
            current_app.logger.error("%s on %s %s: %s", type(e).__name__, request.method, request.path, e.message)
        return _error(e.message, e.status_code)

    @app.errorhandler(HTTPException)
    def _http_error(e: HTTPException):
        return _error(e.description if e.code != 404 else "Not found", e.code or 500)

    @app.errorhandler(Exception)
    def _unhandled(e: Exception):
        current_app.logger.exception("Unhandled error on %s %s", request.method, request.path)
        return _error("Internal server error", 500)
