"""
Centralized error handlers for the console's Flask application.

This is the single place where failures become operator notices: services
raise console errors, and nothing escapes as an unhandled exception.
"""

from http import HTTPStatus

from flask import Flask, jsonify
from pydantic import ValidationError as PydanticValidationError
from werkzeug.exceptions import HTTPException

from cafe_shared.errors import BackendError, ConfigurationError, ConsoleError, Notice, notice_for
from cafe_shared.logging_config import get_logger
from cafe_shared.serializers import error_response

logger = get_logger(__name__)


def register_error_handlers(app: Flask) -> None:
    """
    Register centralized error handlers for the Flask app.

    Args:
        app: Flask application instance
    """

    @app.errorhandler(ConfigurationError)
    def handle_configuration_error(e: ConfigurationError):
        """Missing credentials: sticky notice, nothing retried."""
        logger.error(f"Configuration error: {e}")
        return jsonify(
            error_response(str(e), {"forms_enabled": False}, notice=e.notice)
        ), e.http_status

    @app.errorhandler(BackendError)
    def handle_backend_error(e: BackendError):
        """Query or mutation failure: transient notice, no state applied."""
        logger.error(f"Backend error [{e.code}]: {e}")
        details = {"code": e.backend_code} if e.backend_code else None
        return jsonify(error_response(e.notice.message, details, notice=e.notice)), e.http_status

    @app.errorhandler(ConsoleError)
    def handle_console_error(e: ConsoleError):
        """Validation, auth and identifier errors."""
        logger.warning(f"Console error [{e.code}]: {e}")
        return jsonify(error_response(e.notice.message, notice=e.notice)), e.http_status

    @app.errorhandler(PydanticValidationError)
    def handle_pydantic_validation_error(e: PydanticValidationError):
        """Handle Pydantic validation errors."""
        logger.warning(f"Pydantic validation error: {e}")
        notice = notice_for("DATA_002")
        return jsonify(
            error_response(
                notice.message,
                {"details": e.errors(include_url=False, include_context=False)},
                notice=notice,
            )
        ), HTTPStatus.BAD_REQUEST

    @app.errorhandler(HTTPException)
    def handle_http_exception(e: HTTPException):
        """Handle HTTP exceptions from Werkzeug."""
        logger.warning(f"HTTP exception {e.code}: {e.description}")
        message = e.description or str(e)
        return jsonify(
            error_response(message, notice=Notice(message=message, variant="error"))
        ), e.code

    @app.errorhandler(Exception)
    def handle_generic_exception(e: Exception):
        """Handle any unhandled exceptions."""
        logger.error(f"Unhandled exception: {e}", exc_info=True)
        notice = notice_for("SYSTEM_001")
        return (
            jsonify(error_response(notice.message, notice=notice)),
            HTTPStatus.INTERNAL_SERVER_ERROR,
        )
