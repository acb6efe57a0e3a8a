# clima/__init__.py
import logging
import os
from datetime import datetime

from flask import Flask, jsonify, request

from .config import config
from .extensions import celery_init_app, cors, db
from .routes.dashboard import bp as dashboard_bp
from .routes.export import bp as export_bp
from .routes.survey import bp as survey_bp

logger = logging.getLogger(__name__)


def _configure_logging(app):
    logging.basicConfig(
        level=app.config.get("LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    app.logger.setLevel(app.config.get("LOG_LEVEL", "INFO"))


def create_app(config_name=None, test_config=None):
    config_name = config_name or os.environ.get("FLASK_CONFIG", "default")
    app = Flask(__name__)
    app.config.from_object(config[config_name])
    if test_config:
        app.config.update(test_config)
    app.url_map.strict_slashes = False  # /api/survey and /api/survey/ are the same route
    app.json.ensure_ascii = False
    app.json.sort_keys = False

    _configure_logging(app)
    db.init_app(app)
    cors.init_app(app, resources={r"/api/*": {"origins": app.config["CORS_ORIGINS"]}})
    celery_init_app(app)

    app.register_blueprint(survey_bp)
    app.register_blueprint(dashboard_bp)
    app.register_blueprint(export_bp)

    def health():
        return {"status": "ok", "timestamp": datetime.utcnow().isoformat()}

    app.add_url_rule("/api/health", "api_health", health)
    app.add_url_rule("/health", "health", health)

    # every /api/* error is JSON, the dashboard never parses an HTML error page
    @app.errorhandler(404)
    def _404(e):
        if request.path.startswith("/api/"):
            return jsonify({"success": False, "message": "not found", "path": request.path}), 404
        return e

    @app.errorhandler(405)
    def _405(e):
        if request.path.startswith("/api/"):
            return jsonify({"success": False, "message": "method not allowed", "path": request.path}), 405
        return e

    with app.app_context():
        db.create_all()
        logger.debug("Routes: %s", [str(r) for r in app.url_map.iter_rules()])

    return app
