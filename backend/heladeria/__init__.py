# backend/heladeria/__init__.py
import logging

from flask import Flask, jsonify, request

from .config import Config
from .extensions import db, migrate


def create_app(config_overrides: dict | None = None) -> Flask:
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(Config)
    if config_overrides:
        app.config.update(config_overrides)

    app.logger.setLevel(getattr(logging, str(app.config["LOG_LEVEL"]).upper(), logging.INFO))

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)

    # Import models so Alembic can discover metadata reliably
    from . import models  # noqa: F401

    from .services import init_services
    services = init_services(app, db.session)

    # Register blueprints
    from .routes.system import system_bp
    from .routes.flavors import flavors_bp
    from .routes.orders import orders_bp
    from .routes.store_flavors import store_flavors_bp

    app.register_blueprint(system_bp)
    app.register_blueprint(flavors_bp)
    app.register_blueprint(orders_bp)
    app.register_blueprint(store_flavors_bp)

    @app.errorhandler(404)
    def not_found(_exc):
        return jsonify({"error": "Not found"}), 404

    @app.errorhandler(405)
    def method_not_allowed(_exc):
        return jsonify({"error": "Method not allowed"}), 405

    @app.after_request
    def add_cors_headers(response):
        origin = request.headers.get("Origin")
        allowed_origins = set(app.config["CORS_ALLOWED_ORIGINS"])
        if origin in allowed_origins:
            response.headers["Access-Control-Allow-Origin"] = origin
            response.headers["Vary"] = "Origin"
            response.headers["Access-Control-Allow-Headers"] = "Content-Type"
            response.headers["Access-Control-Allow-Methods"] = "GET,POST,PUT,DELETE,OPTIONS"
        return response

    if app.config["AUTO_CREATE_SCHEMA"]:
        with app.app_context():
            db.create_all()
            if app.config["SEED_DEFAULT_FLAVORS"]:
                services.catalog.seed_defaults(price=app.config["DEFAULT_FLAVOR_PRICE"])

    # Register CLI commands
    from .cli import register_commands
    register_commands(app)

    return app
