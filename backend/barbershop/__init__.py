# backend/barbershop/__init__.py
import logging

from flask import Flask, request, jsonify
from werkzeug.exceptions import HTTPException

from .config import Config, engine_options
from .errors import DomainError, StorageError
from .extensions import db, migrate
from .routes.responses import status_for


def create_app(config_overrides: dict | None = None) -> Flask:
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(Config)
    # Overrides must land before extensions bind their engines
    if config_overrides:
        app.config.update(config_overrides)

    app.config.setdefault(
        "SQLALCHEMY_ENGINE_OPTIONS",
        engine_options(app.config["SQLALCHEMY_DATABASE_URI"], app.config["STORE_TIMEOUT_SECONDS"]),
    )
    app.logger.setLevel(getattr(logging, str(app.config.get("LOG_LEVEL", "INFO")).upper(), logging.INFO))

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)

    # Import models so Alembic can discover metadata reliably
    from . import models  # noqa: F401

    # Register blueprints
    from .routes.system import system_bp
    from .routes.auth import auth_bp
    from .routes.barbers import barbers_bp
    from .routes.catalog import catalog_bp
    from .routes.haircuts import haircuts_bp
    from .routes.inventory import inventory_bp
    from .routes.appointments import appointments_bp
    from .routes.expenses import expenses_bp
    from .routes.reports import reports_bp

    app.register_blueprint(system_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(barbers_bp)
    app.register_blueprint(catalog_bp)
    app.register_blueprint(haircuts_bp)
    app.register_blueprint(inventory_bp)
    app.register_blueprint(appointments_bp)
    app.register_blueprint(expenses_bp)
    app.register_blueprint(reports_bp)

    @app.errorhandler(StorageError)
    def handle_storage_error(exc):
        app.logger.warning("Storage unavailable on %s %s", request.method, request.path)
        return jsonify(exc.to_dict()), 503

    @app.errorhandler(DomainError)
    def handle_domain_error(exc):
        return jsonify(exc.to_dict()), status_for(exc)

    @app.errorhandler(Exception)
    def handle_unexpected_error(exc):
        if isinstance(exc, HTTPException):
            return exc
        app.logger.exception("Unhandled error on %s %s", request.method, request.path)
        return jsonify({"error": "Internal server error"}), 500

    @app.after_request
    def add_cors_headers(response):
        origin = request.headers.get("Origin")
        if origin in app.config["CORS_ALLOWED_ORIGINS"]:
            response.headers["Access-Control-Allow-Origin"] = origin
            response.headers["Vary"] = "Origin"
            response.headers["Access-Control-Allow-Headers"] = "Authorization, Content-Type"
            response.headers["Access-Control-Allow-Methods"] = "GET,POST,PUT,DELETE,PATCH,OPTIONS"
        return response

    # Register CLI commands
    from .cli import register_commands
    register_commands(app)

    return app
