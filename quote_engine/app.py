"""Flask application entry point."""
from flask import Flask, jsonify
from flask_cors import CORS

from quote_engine.config.settings import (
    FLASK_ENV,
    FLASK_DEBUG,
    SECRET_KEY,
    CORS_ORIGINS
)
from quote_engine.api.quote import quote_bp
from quote_engine.utils.errors import APIError
from quote_engine.database import init_db, close_db
from quote_engine.utils.logger import setup_logging
from quote_engine.utils.error_logger import log_exception, log_error_message


def create_app() -> Flask:
    """Create and configure Flask application."""
    app = Flask(__name__)

    # Initialize logging first (before other operations)
    setup_logging()

    # Configuration
    app.config["SECRET_KEY"] = SECRET_KEY
    app.config["ENV"] = FLASK_ENV
    app.config["DEBUG"] = FLASK_DEBUG

    # CORS configuration
    CORS(app, origins=CORS_ORIGINS, supports_credentials=True)

    # Initialize database
    init_db()

    # Register blueprints
    app.register_blueprint(quote_bp, url_prefix='/api')

    # Health check endpoint
    @app.route("/health")
    def health():
        return {"status": "ok", "service": "quote-engine"}, 200

    # Error handlers
    @app.errorhandler(APIError)
    def handle_api_error(error):
        """Handle APIError exceptions."""
        if error.status_code >= 500:
            log_exception(error.__cause__ or error, status_code=error.status_code)
        else:
            log_error_message(
                error.message,
                status_code=error.status_code,
                additional_context={"error_type": error.code}
            )

        response = jsonify(error.to_dict())
        response.status_code = error.status_code
        return response

    @app.errorhandler(404)
    def not_found(error):
        """Handle 404 Not Found errors."""
        log_error_message(
            "Resource not found",
            status_code=404,
            additional_context={"error_type": "NOT_FOUND"}
        )
        return {"error": "Resource not found", "code": "NOT_FOUND"}, 404

    @app.errorhandler(500)
    def internal_error(error):
        """Handle 500 Internal Server errors."""
        if isinstance(error, Exception):
            log_exception(error, status_code=500)
        else:
            log_error_message(
                "Internal server error occurred",
                status_code=500,
                additional_context={"error_type": "INTERNAL_ERROR"}
            )
        return {"error": "An internal error occurred", "code": "INTERNAL_ERROR"}, 500

    @app.errorhandler(Exception)
    def handle_all_exceptions(error):
        """Handle all unhandled exceptions."""
        log_exception(error, status_code=500)

        if FLASK_DEBUG:
            # In debug mode, include error details
            return {
                "error": str(error),
                "code": "INTERNAL_ERROR",
                "type": type(error).__name__
            }, 500
        return {"error": "An internal error occurred", "code": "INTERNAL_ERROR"}, 500

    # Register teardown handler for database cleanup
    @app.teardown_appcontext
    def shutdown_session(exception=None):
        """Close database session on app context teardown."""
        close_db()

    return app


if __name__ == "__main__":
    app = create_app()
    from quote_engine.config.settings import SERVER_HOST, SERVER_PORT
    try:
        app.run(host=SERVER_HOST, port=SERVER_PORT, debug=FLASK_DEBUG)
    finally:
        close_db()
