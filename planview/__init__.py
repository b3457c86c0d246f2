from flask import Flask, jsonify
from flask_cors import CORS

# database imports
from planview.models import db
from planview.logging_config import configure_logging, get_logger

logger = get_logger(__name__)


def create_app(config_overrides=None):
    """
    Build the Flask application.

    Args:
        config_overrides: Optional dict applied over the environment config
            before the database is bound (tests pass an in-memory SQLite URI
            and may pass a ``PLAN_STORE`` instance).
    """
    # Import config after dotenv is loaded
    from planview.config import get_config
    from planview.db_config import configure_database
    from planview.plan_store import SqlAlchemyPlanStore
    from planview.plan_view import plan_view_bp

    config_overrides = dict(config_overrides or {})

    # Get the appropriate config class based on environment
    config_class = get_config()

    app = Flask(__name__)
    app.config.from_object(config_class)
    app.config.update(config_overrides)

    configure_logging(log_level=app.config.get("LOG_LEVEL", "INFO"), log_file=app.config.get("LOG_FILE"))

    # Configure database separately
    configure_database(app, config_overrides)

    # Log the environment being used
    logger.info("Starting application", environment=config_class.ENV)
    logger.info("Database configured", database_uri=app.config.get("SQLALCHEMY_DATABASE_URI", "Not set")[:50])

    # Get allowed origins from environment variable
    allowed_origins = app.config.get("CORS_ORIGINS", "*")
    if allowed_origins != "*":
        # Parse comma-separated list if provided
        allowed_origins = [origin.strip() for origin in allowed_origins.split(",")]

    CORS(app,
         resources={r"/*": {"origins": allowed_origins}},
         supports_credentials=True,
         allow_headers=["Content-Type", "Authorization"],
         methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"])

    # Initialize database
    db.init_app(app)
    with app.app_context():
        # Only create tables if they don't exist
        db.create_all()

    app.extensions["plan_store"] = config_overrides.get("PLAN_STORE") or SqlAlchemyPlanStore()

    app.register_blueprint(plan_view_bp, url_prefix="/plan-view")

    @app.route("/health")
    def health():
        return jsonify({"status": "ok", "environment": config_class.ENV}), 200

    return app
