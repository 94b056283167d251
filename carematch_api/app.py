import atexit
import logging
import os
from datetime import UTC, date, datetime
from decimal import Decimal
from uuid import UUID

from flask import Flask, jsonify
from flask.json.provider import DefaultJSONProvider
from flask_cors import CORS
from flask_jwt_extended import JWTManager

from carematch.notifier import AlimtalkNotifier, LogNotifier, NotificationDispatcher
from carematch.shared import Database, PostgreSQLDatabase

from .blueprints.applications import applications_bp
from .blueprints.caregivers import caregivers_bp
from .blueprints.chat import chat_bp
from .blueprints.dashboards import dashboards_bp
from .blueprints.jobs import jobs_bp
from .blueprints.reviews import reviews_bp
from .blueprints.system import system_bp
from .blueprints.users import users_bp
from .config import Config, build_db_connection_string

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def _json_default(o):
    # UTC with microseconds and a Z suffix, so a timestamp can be echoed back
    # unencoded as a message cursor
    if isinstance(o, datetime):
        if o.tzinfo is not None:
            o = o.astimezone(UTC)
        return o.isoformat(timespec="microseconds").replace("+00:00", "Z")
    if isinstance(o, date):
        return o.isoformat()
    if isinstance(o, Decimal):
        return float(o)
    if isinstance(o, UUID):
        return str(o)
    return DefaultJSONProvider.default(o)


class CareMatchJSONProvider(DefaultJSONProvider):
    default = staticmethod(_json_default)


def _unauthenticated(message: str):
    return jsonify({"error": {"kind": "unauthenticated", "message": message}}), 401


def build_dispatcher(config) -> NotificationDispatcher:
    """Build the notification dispatcher for the configured backend."""
    backend = getattr(config, "NOTIFIER_BACKEND", "log")
    if backend == "alimtalk":
        notifier = AlimtalkNotifier(
            api_key=getattr(config, "ALIMTALK_API_KEY", None),
            api_url=getattr(config, "ALIMTALK_API_URL", None),
        )
    else:
        if backend != "log":
            logger.warning(f"Unknown NOTIFIER_BACKEND {backend!r}; using log notifier")
        notifier = LogNotifier()
    return NotificationDispatcher(
        notifier=notifier, max_workers=getattr(config, "NOTIFIER_WORKERS", 4)
    )


def create_app(
    config_object=Config,
    database: Database | None = None,
    dispatcher: NotificationDispatcher | None = None,
):
    """Application factory function.

    Args:
        config_object: Object whose upper-case attributes become app config
        database: Database to use. When None, a PostgreSQL connection pool is
            opened from the environment and closed at process exit.
        dispatcher: Notification dispatcher. When None, one is built from
            NOTIFIER_BACKEND.
    """
    app = Flask(__name__)
    app.config.from_object(config_object)
    app.json = CareMatchJSONProvider(app)

    # Initialize JWT
    jwt = JWTManager(app)

    @jwt.expired_token_loader
    def expired_token_callback(jwt_header, jwt_payload):
        return _unauthenticated("Token has expired")

    @jwt.invalid_token_loader
    def invalid_token_callback(error):
        logger.warning(f"Invalid token error: {error}")
        return _unauthenticated(f"Invalid token: {error}")

    @jwt.unauthorized_loader
    def missing_token_callback(error):
        return _unauthenticated("Missing authorization header")

    # Initialize CORS
    CORS(
        app,
        origins=app.config.get("CORS_ORIGINS", []),
        supports_credentials=True,
        allow_headers=["Content-Type", "Authorization"],
    )

    if database is None:
        database = PostgreSQLDatabase(
            connection_string=build_db_connection_string(),
            min_connections=app.config.get("DB_POOL_MIN", 1),
            max_connections=app.config.get("DB_POOL_MAX", 10),
        )
        # Close connection pool on process exit for graceful cleanup
        atexit.register(database.close)

    if dispatcher is None:
        dispatcher = build_dispatcher(config_object)
        # Flush queued notifications on process exit
        atexit.register(dispatcher.close)

    app.extensions["carematch_db"] = database
    app.extensions["carematch_dispatcher"] = dispatcher

    # Register Blueprints
    app.register_blueprint(users_bp)
    app.register_blueprint(caregivers_bp)
    app.register_blueprint(dashboards_bp)
    app.register_blueprint(jobs_bp)
    app.register_blueprint(applications_bp)
    app.register_blueprint(chat_bp)
    app.register_blueprint(reviews_bp)
    app.register_blueprint(system_bp)

    return app


if __name__ == "__main__":
    debug = os.getenv("ENVIRONMENT", "development") == "development"
    create_app().run(host="0.0.0.0", port=5000, debug=debug, use_reloader=debug)
