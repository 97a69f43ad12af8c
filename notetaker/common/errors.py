from flask import jsonify
from marshmallow import ValidationError
from werkzeug.exceptions import HTTPException


class ApiError(Exception):
    def __init__(self, message, status_code=400, code="bad_request", details=None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.code = code
        self.details = details or {}


class BackendError(ApiError):
    """Failure reported by the auth/data backend. Only the message is kept."""

    def __init__(self, message, operation=None):
        super().__init__(
            message,
            status_code=502,
            code="backend_error",
            details={"operation": operation} if operation else None,
        )
        self.operation = operation


class UnauthenticatedError(ApiError):
    def __init__(self, message="Authentication required."):
        super().__init__(message, status_code=401, code="authorization_required")


def first_message(err: ValidationError, fields=("email", "password", "title", "content")) -> str:
    """Flattens marshmallow messages to the first one, in field order."""
    messages = err.messages
    if isinstance(messages, dict):
        ordered = [messages[f] for f in fields if f in messages]
        ordered += [v for k, v in messages.items() if k not in fields]
        messages = ordered[0] if ordered else ""
    while isinstance(messages, (list, tuple)) and messages:
        messages = messages[0]
    if isinstance(messages, dict):
        return first_message(ValidationError(messages), fields)
    return str(messages or "Invalid input.")


def _json_error(message, status, code, details=None):
    return jsonify({
        "error": {"code": code, "message": message, "details": details or {}}
    }), status


def register_error_handlers(app):
    @app.errorhandler(ApiError)
    def handle_api_error(e: ApiError):
        return _json_error(e.message, e.status_code, e.code, e.details)

    @app.errorhandler(ValidationError)
    def handle_validation_error(e: ValidationError):
        return _json_error(first_message(e), 400, "validation_error", e.messages)

    @app.errorhandler(HTTPException)
    def handle_http_exception(e: HTTPException):
        # e.g. 404, 405, 413
        return _json_error(e.description or "HTTP error", e.code or 500, "http_error")

    @app.errorhandler(Exception)
    def handle_unexpected(e: Exception):
        # traceback goes to the log via teardown_request; hidden from the client
        return _json_error("Internal server error.", 500, "internal_error")
