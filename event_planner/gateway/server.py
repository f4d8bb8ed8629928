"""
API gateway: combines the auth and events blueprints with the informational
routes and the catch-all fallback.
This is the process entrypoint.
"""

import atexit
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Tuple

from flask import Flask, Response, jsonify, request
from flask_cors import CORS
from werkzeug.exceptions import MethodNotAllowed, NotFound

from event_planner.config import Config
from event_planner.database.db_connection import Database
from event_planner.database.stores import EventStore, UserStore
from event_planner.errors import ApiError, register_error_handlers


def _now() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def available_routes(app: Flask) -> List[str]:
    """
    List every routed "METHOD /path" pair, sorted by path then method.

    Built from the URL map, so the list always matches what the app
    actually dispatches.
    """
    routes = set()
    for rule in app.url_map.iter_rules():
        if rule.endpoint == "static":
            continue
        for method in rule.methods - {"HEAD", "OPTIONS"}:
            routes.add((rule.rule, method))
    return [f"{method} {path}" for path, method in sorted(routes)]


def create_app(
    config: Optional[Mapping[str, Any]] = None,
    database: Optional[Database] = None,
    user_store: Optional[UserStore] = None,
    event_store: Optional[EventStore] = None,
) -> Flask:
    """
    Application factory for creating the Flask app.

    Stores passed in are used as-is (tests inject fakes). Otherwise a
    Database is built from the configuration and opened; if that fails the
    app still starts so the informational routes stay reachable.

    Args:
        config (Mapping, optional): Overrides for the Config defaults.
        database (Database, optional): Pre-built database handle.
        user_store (UserStore, optional): Store for users.
        event_store (EventStore, optional): Store for events.

    Returns:
        Flask: The configured Flask application.
    """
    app = Flask(__name__)
    app.config.from_object(Config)
    if config:
        app.config.update(config)

    # Cross-origin access is limited to the configured front-end origins
    CORS(app, resources={
        r"/*": {
            "origins": app.config["CORS_ORIGINS"],
            "methods": ["GET", "POST", "PUT", "DELETE", "OPTIONS"],
            "allow_headers": ["Content-Type"],
            "supports_credentials": True
        }
    })

    if user_store is None or event_store is None:
        if database is None:
            database = Database(
                app.config["DATABASE_URL"],
                min_conn=app.config["DB_POOL_MIN"],
                max_conn=app.config["DB_POOL_MAX"],
            )
        try:
            database.open()
        except ApiError as e:
            # Start anyway: store routes answer 500 until the database is reachable
            logging.error(f"Database not available at startup: {e.message} ({e.details})")
        user_store = user_store or UserStore(database)
        event_store = event_store or EventStore(database)

    app.extensions["event_planner"] = {
        "database": database,
        "user_store": user_store,
        "event_store": event_store,
    }

    # --- REGISTER BLUEPRINTS ---
    from event_planner.auth_service.routes import auth_bp
    from event_planner.events_service.routes import events_bp

    app.register_blueprint(auth_bp, url_prefix="/api")
    app.register_blueprint(events_bp, url_prefix="/api")

    register_error_handlers(app)

    # --- BASIC HEALTH CHECKPOINTS ---
    @app.route("/health", methods=["GET"])
    def health() -> Tuple[Response, int]:
        """
        Health check endpoint. Always 200; reports whether the pool is open.
        """
        db = app.extensions["event_planner"]["database"]
        if db is None:
            db_status = "connected"  # stores injected directly
        else:
            db_status = "connected" if db.is_open else "unavailable"
        return jsonify({
            "status": "OK",
            "message": "Health check working!",
            "database": db_status,
            "timestamp": _now(),
        }), 200

    @app.route("/", methods=["GET"])
    def root() -> Tuple[Response, int]:
        """
        Root URL for simple 'online' check.
        """
        return jsonify({
            "message": "Server is running!",
            "availableRoutes": available_routes(app),
            "timestamp": _now(),
        }), 200

    @app.route("/test", methods=["GET"])
    def test_route() -> Tuple[Response, int]:
        return jsonify({"message": "Test route working!", "path": request.path}), 200

    # --- FALLBACK ---
    @app.errorhandler(NotFound)
    @app.errorhandler(MethodNotAllowed)
    def not_found(_error) -> Tuple[Response, int]:
        """
        Catch-all for unknown paths and unsupported methods.
        """
        body: Dict[str, Any] = {
            "error": "Route not found",
            "requestedPath": request.path,
            "availableRoutes": available_routes(app),
        }
        return jsonify(body), 404

    return app


def main() -> None:
    """Run the development server on the configured host and port."""
    logging.basicConfig(
        level=getattr(logging, Config.LOG_LEVEL, logging.INFO),
        format="[%(levelname)s] %(asctime)s - %(message)s",
    )
    logging.info("Starting server...")

    database = Database(Config.DATABASE_URL, min_conn=Config.DB_POOL_MIN, max_conn=Config.DB_POOL_MAX)
    atexit.register(database.close)

    app = create_app(database=database)
    logging.info(f"Server running on port {Config.PORT}")
    app.run(host=Config.HOST, port=Config.PORT, debug=Config.DEBUG)


if __name__ == "__main__":
    main()
