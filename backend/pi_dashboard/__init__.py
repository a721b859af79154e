"""Flask application factory."""

from flask import Flask, g, jsonify, request
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

from pi_services.annotation_store import AnnotationStore
from pi_services.errors import DashboardError, NetworkError, UpstreamError

from pi_dashboard.config import load_config

INDEX_HTML = """
<h1>PI Dashboard API</h1>
<p>API is running</p>
<ul>
  <li><a href="/health">/health</a></li>
  <li><a href="/api/projects">/api/projects</a></li>
</ul>
"""


def register_error_handlers(app):
    """Translate service errors into JSON responses."""

    @app.errorhandler(DashboardError)
    def handle_dashboard_error(error):
        if isinstance(error, UpstreamError):
            app.logger.error(f"{request.path} upstream error {error.status_code}: {error.body}")
        elif isinstance(error, NetworkError):
            app.logger.error(f"{request.path} {error.message}")
        elif error.status_code >= 500:
            app.logger.error(f"{request.path} failed: {error.message}")
        return jsonify(error.to_body()), error.status_code

    @app.errorhandler(Exception)
    def handle_unexpected_error(error):
        if isinstance(error, HTTPException):
            return error
        app.logger.exception(f"{request.path} failed")
        return jsonify({"error": str(error)}), 500


def create_app(config_override=None):
    """Create and configure the Flask application.

    Args:
        config_override: Config mapping used instead of the environment
    """
    app = Flask(__name__)
    app.config.update(config_override if config_override is not None else load_config())

    # Enable CORS for the dashboard frontend
    CORS(app, resources={
        r"/api/*": {
            "origins": app.config.get("CORS_ORIGINS", ["*"]),
            "methods": ["GET", "POST", "PUT", "OPTIONS"],
            "allow_headers": ["Content-Type"]
        }
    })

    # Register blueprints
    from pi_dashboard.api import jira, notes, search, sprints
    app.register_blueprint(jira.bp)
    app.register_blueprint(sprints.bp)
    app.register_blueprint(notes.bp)
    app.register_blueprint(search.bp)

    register_error_handlers(app)

    # Create the notes file on first boot
    AnnotationStore(app.config["NOTES_FILE"]).ensure_file()

    @app.teardown_appcontext
    def close_jira_client(exc):
        client = g.pop("jira_client", None)
        if client is not None:
            client.close()

    @app.before_request
    def log_request():
        app.logger.info(f"{request.method} {request.full_path.rstrip('?')}")

    @app.route("/")
    def index():
        return INDEX_HTML, 200, {"Content-Type": "text/html; charset=utf-8"}

    # Health check endpoint
    @app.route("/health")
    def health():
        return {"ok": True}

    return app
