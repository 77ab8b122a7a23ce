import logging
from typing import Any, Mapping, Optional

from flask import Flask

from dotenv import load_dotenv
load_dotenv()

from .config import Config  # noqa: E402  (reads the environment loaded above)
from .extensions import db  # noqa: E402

# Application version
APP_VERSION = "1.0.0"


def _configure_logging(app: Flask) -> None:
    """Apply LOG_LEVEL to Flask's logger and to the app.* module loggers."""
    level = str(app.config.get("LOG_LEVEL") or "INFO").upper()
    if not logging.getLogger().handlers:
        logging.basicConfig(format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    app.logger.setLevel(level)
    logging.getLogger(__name__).setLevel(level)


def create_app(config_overrides: Optional[Mapping[str, Any]] = None):
    """Application factory for the subscription manager.

    ``config_overrides`` is applied last (tests point it at in-memory SQLite).
    """
    app = Flask(__name__)
    app.config.from_object(Config)
    app.config.setdefault("APP_VERSION", APP_VERSION)
    if config_overrides:
        app.config.update(config_overrides)

    # Database configuration (fail loudly if missing)
    if not app.config.get("SQLALCHEMY_DATABASE_URI"):
        raise RuntimeError("DATABASE_URL is not set. Refusing to start with an implicit SQLite database.")

    _configure_logging(app)

    # Initialize extensions (register this app with the shared db instance)
    db.init_app(app)

    # Register blueprints
    from .routes import bp as main_bp
    from .routes.helpers import register_error_handlers

    app.register_blueprint(main_bp)
    register_error_handlers(app)

    # Create tables if they don't exist
    with app.app_context():
        from . import models  # noqa: F401  (ensure models are registered)

        db.create_all()

    app.logger.info("Subscription manager %s started", app.config["APP_VERSION"])
    return app
