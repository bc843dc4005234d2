import logging

import click
from flask import Flask, jsonify
from flask_cors import CORS
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address

from storefront.config.settings import Config
from storefront.models.database import db
from storefront.api import auth_bp, orders_bp, products_bp, users_bp
from storefront.middleware.auth import authenticate
from storefront.middleware.error_handler import register_error_handlers
from storefront.utils.activity_log import ensure_log_file


def create_app(config_object=Config) -> Flask:
    """Application factory."""
    app = Flask(__name__, static_folder="public", static_url_path="/ui")
    app.config.from_object(config_object)

    logging.basicConfig(
        level=app.config["LOG_LEVEL"],
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Initialize extensions
    db.init_app(app)

    CORS(app, origins=app.config["CORS_ORIGINS"])

    Limiter(
        app=app,
        key_func=get_remote_address,
        default_limits=[app.config["RATE_LIMIT_DEFAULT"]],
    )

    # Every route is protected unless it is on the public allowlist
    app.before_request(authenticate)

    @app.route("/", methods=["GET"])
    def status():
        return jsonify({"status": "ok", "message": "E-commerce API is running"})

    @app.route("/ui/", methods=["GET"])
    def ui_index():
        return app.send_static_file("index.html")

    # Register blueprints
    app.register_blueprint(auth_bp)
    app.register_blueprint(users_bp)
    app.register_blueprint(products_bp)
    app.register_blueprint(orders_bp)

    # Register error handlers
    register_error_handlers(app)

    @app.cli.command("init-db")
    def init_db():
        """Create database tables and the activity log file."""
        db.create_all()
        ensure_log_file(app.config["ACTIVITY_LOG_PATH"])
        click.echo("Database initialized")

    return app
