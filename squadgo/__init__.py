"""Initialize the Flask app and its extensions."""

import json
import os

import firebase_admin
from firebase_admin import credentials
from flask import Flask, jsonify
from werkzeug.middleware.proxy_fix import ProxyFix

from .core.constants import (
    DEFAULT_MAX_WAIT_SECONDS,
    EXPIRATION_BATCH_LIMIT,
    EXPIRATION_INTERVAL_SECONDS,
    IMMEDIATE_CANDIDATE_LIMIT,
    PAIRING_BATCH_LIMIT,
    PAIRING_INTERVAL_SECONDS,
)
from .extensions import backend, scheduler

TRUE_VALUES = ["true", "1", "t", "yes"]
CREDENTIALS_FILE = "firebase_credentials.json"


def _env_int(name, default):
    value = os.environ.get(name)
    return int(value) if value else default


def _certificate_from_env(app):
    raw = os.environ.get("FIREBASE_CREDENTIALS_JSON")
    if not raw:
        return None, None
    try:
        info = json.loads(raw)
        return credentials.Certificate(info), info.get("project_id")
    except (json.JSONDecodeError, ValueError) as e:
        app.logger.error(f"FIREBASE_CREDENTIALS_JSON is not a service account: {e}")
        return None, None


def _certificate_from_file(app):
    path = os.path.join(os.path.dirname(os.path.dirname(__file__)), CREDENTIALS_FILE)
    if not os.path.exists(path):
        return None, None
    try:
        with open(path) as f:
            project_id = json.load(f).get("project_id")
        return credentials.Certificate(path), project_id
    except (json.JSONDecodeError, ValueError) as e:
        app.logger.error(f"Unreadable {CREDENTIALS_FILE}: {e}")
        return None, None


def init_firebase(app):
    """Initialize the Firebase Admin SDK.

    Credentials are taken from FIREBASE_CREDENTIALS_JSON, then from
    firebase_credentials.json at the project root, then from the
    environment's application default credentials.
    """
    if firebase_admin._apps:
        app.logger.info("Firebase Admin already initialized")
        return

    cred, project_id = _certificate_from_env(app)
    if cred is None:
        cred, project_id = _certificate_from_file(app)
    if cred is None:
        try:
            cred = credentials.ApplicationDefault()
        except Exception as e:
            app.logger.error(f"No Firebase credentials available: {e}")
            return
        project_id = os.environ.get("FIREBASE_PROJECT_ID")

    firebase_admin.initialize_app(cred, {"projectId": project_id} if project_id else None)


def create_app(test_config=None):
    """Create and configure an instance of the Flask application."""
    app = Flask(__name__, instance_relative_config=True)

    # Load configuration
    app.config.from_mapping(
        SECRET_KEY=os.environ.get("SECRET_KEY") or "dev",
        STORE_BACKEND=os.environ.get("STORE_BACKEND") or "firestore",
        SCHEDULER_ENABLED=(os.environ.get("SCHEDULER_ENABLED") or "false").lower()
        in TRUE_VALUES,
        PAIRING_INTERVAL_SECONDS=_env_int(
            "PAIRING_INTERVAL_SECONDS", PAIRING_INTERVAL_SECONDS
        ),
        EXPIRATION_INTERVAL_SECONDS=_env_int(
            "EXPIRATION_INTERVAL_SECONDS", EXPIRATION_INTERVAL_SECONDS
        ),
        PAIRING_BATCH_LIMIT=PAIRING_BATCH_LIMIT,
        EXPIRATION_BATCH_LIMIT=EXPIRATION_BATCH_LIMIT,
        IMMEDIATE_CANDIDATE_LIMIT=IMMEDIATE_CANDIDATE_LIMIT,
        DEFAULT_MAX_WAIT_SECONDS=DEFAULT_MAX_WAIT_SECONDS,
        BRACKET_SEED=_env_int("BRACKET_SEED", None),
    )

    if test_config:
        app.config.update(test_config)

    # Firebase Admin is needed for token checks and the Firestore store
    if not app.config.get("TESTING") and app.config["STORE_BACKEND"] != "memory":
        init_firebase(app)

    # Initialize extensions
    backend.init_app(app)
    scheduler.init_app(app)

    from . import cli

    cli.init_app(app)

    # Register blueprints
    from . import matchmaking as matchmaking_bp

    app.register_blueprint(matchmaking_bp.bp)

    from . import tournament as tournament_bp

    app.register_blueprint(tournament_bp.bp)

    from . import error_handlers

    app.register_blueprint(error_handlers.error_handlers_bp)

    @app.route("/health")
    def health():
        """Liveness probe."""
        return jsonify({"status": "ok", "store": app.config["STORE_BACKEND"]})

    if app.config["SCHEDULER_ENABLED"] and not scheduler.running:
        cli.register_jobs(app)
        scheduler.start()

    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1, x_prefix=1)

    return app
