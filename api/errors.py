from flask import jsonify
from werkzeug.exceptions import HTTPException, NotFound
from marshmallow import ValidationError
import logging

from models.exceptions import AppError

logger = logging.getLogger(__name__)


def error_response(error: str, message: str, status: int, details: dict | None = None):
    payload = {"error": error, "message": message, "status": status}
    if details:
        payload["details"] = details
    return jsonify(payload), status


def register_error_handlers(app):
    # 404 Not Found (unknown routes)
    @app.errorhandler(404)
    def not_found(e):
        message = e.description if e.description != NotFound.description else "Resource not found"
        return error_response("NOT_FOUND", message, 404)

    # Marshmallow validation errors map to 400
    @app.errorhandler(ValidationError)
    def handle_validation_error(err: ValidationError):
        # err.messages contains field-level details
        messages = err.messages if isinstance(err.messages, dict) else {"_schema": err.messages}
        return error_response("VALIDATION_ERROR", "Invalid input", 400, details=messages)

    # Auth, not-found and conflict errors raised by gates, stores and views
    @app.errorhandler(AppError)
    def handle_app_error(err: AppError):
        if err.status_code >= 500:
            logger.error("Application error: %s", err.message)
            return error_response("INTERNAL_ERROR", "An unexpected error occurred", err.status_code)
        return error_response(err.error_code, err.message, err.status_code, details=err.details)

    # Werkzeug HTTPExceptions map to their status codes
    @app.errorhandler(HTTPException)
    def handle_http_exception(err: HTTPException):
        code = err.code or 500
        error = (err.name or "HTTP_ERROR").upper().replace(" ", "_")
        return error_response(error, err.description, code)

    # 500 Internal Error (catch-all); details stay in the log
    @app.errorhandler(Exception)
    def internal_error(err: Exception):
        logger.exception("Unhandled exception", exc_info=err)
        return error_response("INTERNAL_ERROR", "An unexpected error occurred", 500)
