"""JSON error responses for the API."""

from flask import Blueprint, current_app, jsonify

from .errors import AppError, InternalError, NotFoundError, ValidationError

error_handlers_bp = Blueprint("error_handlers", __name__)


@error_handlers_bp.app_errorhandler(ValidationError)
def handle_validation_error(error):
    """Handles validation errors, including per-field messages."""
    current_app.logger.warning(f"Validation Error: {error.message} {error.errors}")
    return jsonify({"error": error.to_dict()}), error.status_code


@error_handlers_bp.app_errorhandler(AppError)
def handle_app_error(error):
    """Handles generic application errors."""
    if error.status_code >= 500:  # noqa: PLR2004
        current_app.logger.error(f"Application Error: {error.message}")
    else:
        current_app.logger.warning(f"{type(error).__name__}: {error.message}")
    return jsonify({"error": error.to_dict()}), error.status_code


@error_handlers_bp.app_errorhandler(400)
def handle_400(e):
    """Handles malformed request bodies."""
    error = ValidationError(str(e.description))
    return jsonify({"error": error.to_dict()}), 400


@error_handlers_bp.app_errorhandler(404)
def handle_404(e):
    """Handles generic 404 errors for routes that don't exist."""
    error = NotFoundError("The requested URL was not found.")
    return jsonify({"error": error.to_dict()}), 404


@error_handlers_bp.app_errorhandler(405)
def handle_405(e):
    """Handles requests with an unsupported method."""
    return (
        jsonify({"error": {"code": "method-not-allowed", "message": str(e.description)}}),
        405,
    )


@error_handlers_bp.app_errorhandler(500)
def handle_500(e):
    """Handles unexpected server errors."""
    current_app.logger.error(f"Internal Server Error: {e}")
    return jsonify({"error": InternalError().to_dict()}), 500
