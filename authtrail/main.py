"""Flask application entry point."""

import logging

from flask import Flask, jsonify
from flask_cors import CORS

from . import correlation
from .auth import token
from .config import settings
from .db import get_core, get_schema_version, init_db
from .db.seed import seed
from .exceptions import (
    AuthenticationError,
    AuthorizationError,
    AuthTrailError,
    ConflictError,
    DomainRuleViolation,
    ResourceNotFound,
    StoreError,
    ValidationError,
)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [%(correlation_id)s] %(message)s"

logger = logging.getLogger(__name__)


def configure_logging() -> None:
    """Root logging with the correlation id in every line."""
    logging.basicConfig(level=settings.log_level, format=LOG_FORMAT)
    for handler in logging.getLogger().handlers:
        if not any(isinstance(f, correlation.CorrelationIdFilter) for f in handler.filters):
            handler.addFilter(correlation.CorrelationIdFilter())


# ============================================================================
# Error handlers
# ============================================================================


def _error_response(error: AuthTrailError, status: int, include_details: bool = True):
    response = {
        "error": {
            "type": error.__class__.__name__,
            "message": error.message
        }
    }
    if include_details and error.details:
        response["error"]["details"] = error.details
    return jsonify(response), status


def handle_validation_error(error):
    """Handle ValidationError exceptions."""
    return _error_response(error, 400)


def handle_domain_rule_violation(error):
    """Handle DomainRuleViolation exceptions (e-mail, name, password rules)."""
    return _error_response(error, 400)


def handle_conflict(error):
    """Handle ConflictError exceptions."""
    return _error_response(error, 400)


def handle_authentication_error(error):
    """Handle AuthenticationError exceptions."""
    return _error_response(error, 401)


def handle_authorization_error(error):
    """Handle AuthorizationError exceptions."""
    return _error_response(error, 401)


def handle_not_found(error):
    """Handle ResourceNotFound exceptions."""
    return _error_response(error, 404)


def handle_store_error(error):
    """Handle StoreError exceptions without exposing internal detail."""
    logger.error(f"Store failure: {error.message}")
    return jsonify({
        "error": {
            "type": "InternalServerError",
            "message": "An internal error occurred"
        }
    }), 500


def handle_authtrail_error(error):
    """Handle any other AuthTrailError."""
    logger.error(f"Unhandled {error.__class__.__name__}: {error.message}")
    return _error_response(error, 500, include_details=False)


def handle_internal_error(error):
    """Handle internal server errors."""
    logger.error(f"Internal error: {error}")
    return jsonify({
        "error": {
            "type": "InternalServerError",
            "message": "An internal error occurred"
        }
    }), 500


def register_error_handlers(app: Flask) -> None:
    app.errorhandler(ValidationError)(handle_validation_error)
    app.errorhandler(DomainRuleViolation)(handle_domain_rule_violation)
    app.errorhandler(ConflictError)(handle_conflict)
    app.errorhandler(AuthenticationError)(handle_authentication_error)
    app.errorhandler(AuthorizationError)(handle_authorization_error)
    app.errorhandler(ResourceNotFound)(handle_not_found)
    app.errorhandler(StoreError)(handle_store_error)
    app.errorhandler(AuthTrailError)(handle_authtrail_error)
    app.errorhandler(500)(handle_internal_error)


# ============================================================================
# Application factory
# ============================================================================


def health():
    """Health check endpoint."""
    core = get_core()
    try:
        version = get_schema_version(core._conn)
    finally:
        core.close()
    return jsonify({"status": "ok", "schema_version": version})


def create_app() -> Flask:
    """
    Build the Flask application.

    Startup fails with ConfigurationError when the JWT signing key is invalid,
    before any route is registered.
    """
    configure_logging()
    token.require_signing_key()

    app = Flask(__name__)
    CORS(
        app,
        origins=settings.cors_origins,
        supports_credentials=True,
        expose_headers=[correlation.CORRELATION_ID_HEADER]
    )
    correlation.init_app(app)
    register_error_handlers(app)

    try:
        init_db()
        seed()
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error(f"Database initialization failed: {e}")
        raise

    app.add_url_rule("/health", "health", health)

    from .auth.api import auth_bp
    app.register_blueprint(auth_bp)

    return app


app = create_app()


if __name__ == "__main__":
    app.run(debug=True)
