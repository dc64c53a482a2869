"""Application exceptions and their JSON error handlers.

Domain helpers raise these; ``register_error_handlers`` turns them into
``{"error": <code>, "message": <text>}`` responses.
"""

from flask import jsonify
from sqlalchemy.exc import SQLAlchemyError

from nextdoor.extensions import db
from nextdoor.utils.logging_utils import get_logger


class AppError(Exception):
    status_code = 400
    code = "bad_request"
    title = None

    def __init__(self, message, *, title=None, status_code=None, details=None):
        super().__init__(message)
        self.message = message
        if title is not None:
            self.title = title
        if status_code is not None:
            self.status_code = status_code
        self.details = details

    def to_dict(self):
        payload = {"error": self.code, "message": self.message}
        if self.title:
            payload["title"] = self.title
        if self.details:
            payload["details"] = self.details
        return payload


class ValidationFailed(AppError):
    status_code = 400
    code = "validation_error"


class AuthRequired(AppError):
    status_code = 401
    code = "auth_required"


class PermissionDenied(AppError):
    status_code = 403
    code = "forbidden"


class NotFoundError(AppError):
    status_code = 404
    code = "not_found"


class ConflictError(AppError):
    status_code = 409
    code = "conflict"


class ServiceMisconfigured(AppError):
    status_code = 500
    code = "service_misconfigured"


class UpstreamError(AppError):
    status_code = 502
    code = "upstream_error"


def register_error_handlers(app):
    @app.errorhandler(AppError)
    def _app_error(e):
        level = "warning" if e.status_code < 500 else "error"
        getattr(get_logger("error"), level)("%s: %s", e.code, e.message)
        return jsonify(e.to_dict()), e.status_code

    @app.errorhandler(SQLAlchemyError)
    def _db_error(e):
        db.session.rollback()
        get_logger("error").exception("Database error")
        return jsonify({"error": "database_error", "message": "Database error occurred"}), 500

    @app.errorhandler(404)
    def _not_found(e):
        return jsonify({"error": "not_found", "message": getattr(e, "description", "Not found")}), 404

    @app.errorhandler(405)
    def _method_not_allowed(e):
        return jsonify({"error": "method_not_allowed"}), 405

    @app.errorhandler(429)
    def _rate_limited(e):
        return jsonify({"error": "rate_limited"}), 429

    @app.errorhandler(500)
    def _server_error(e):
        app.logger.exception("Unhandled server error")
        return jsonify({"error": "internal_server_error"}), 500
