from flask import Flask, jsonify
from flask_cors import CORS

from talentdesk.errors import HttpError, NetworkError, TalentDeskError, ValidationError
from talentdesk.logging_config import configure_logging, get_logger
from talentdesk.projects import projects_bp

logger = get_logger(__name__)


def _error_status(error: TalentDeskError) -> int:
    if isinstance(error, ValidationError):
        return 400
    if isinstance(error, HttpError):
        return error.status_code
    if isinstance(error, NetworkError):
        return 502
    return 500


def create_app(config_class=None):
    # Import config after dotenv is loaded
    from talentdesk.config import get_config

    # Get the appropriate config class based on environment
    if config_class is None:
        config_class = get_config()

    app = Flask(__name__)
    app.config.from_object(config_class)

    configure_logging(
        log_level=app.config.get("LOG_LEVEL", "INFO"),
        log_file=app.config.get("LOG_FILE"),
    )

    # Log the environment being used
    logger.info(f"Starting application in {config_class.ENV} environment")
    logger.info("Backend configured", base_url=app.config.get("BACKEND_BASE_URL"))

    # Get allowed origins from environment variable
    allowed_origins = app.config.get("CORS_ORIGINS", "*")
    if allowed_origins != "*":
        # Parse comma-separated list if provided
        allowed_origins = [origin.strip() for origin in allowed_origins.split(",")]

    CORS(app,
         resources={r"/*": {"origins": allowed_origins}},
         supports_credentials=True,
         allow_headers=["Content-Type", "Authorization"],
         methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"])

    app.register_blueprint(projects_bp, url_prefix="/projects")

    @app.route("/")
    def index():
        return jsonify({"status": "ok", "environment": config_class.ENV}), 200

    @app.errorhandler(TalentDeskError)
    def handle_talentdesk_error(e):
        """Domain and backend errors become {error, code, message} responses."""
        status_code = _error_status(e)
        log = logger.warning if status_code < 500 else logger.error
        log("Request failed", error_type=type(e).__name__, code=e.code.value, error=str(e), status_code=status_code)

        response = jsonify(e.to_dict())
        response.status_code = status_code
        return response

    @app.errorhandler(Exception)
    def handle_exception(e):
        """Handle all other exceptions as JSON"""
        # Log the error
        logger.error("Unhandled exception", error=str(e), exc_info=True)

        # Return JSON error response with proper status code
        if hasattr(e, 'code') and isinstance(e.code, int):
            status_code = e.code
        else:
            status_code = 500

        response = jsonify({
            "error": str(e),
            "message": "An error occurred processing your request"
        })
        response.status_code = status_code
        return response

    return app
