# app.py

import logging
import os

from dotenv import load_dotenv
from flask import Flask

# Load environment variables from .env file first
load_dotenv()

# Module imports after load_dotenv() - E402 is intentional
from config import DevelopmentConfig, ProductionConfig, TestingConfig  # noqa: E402
from index_app.importer import init_importer  # noqa: E402
from index_app.models import db  # noqa: E402
from index_app.utils.logging_config import setup_logging  # noqa: E402

logger = logging.getLogger(__name__)


def _config_for_env(flask_env):
    if flask_env == "production":
        return ProductionConfig
    if flask_env == "testing":
        return TestingConfig
    return DevelopmentConfig


def create_app(config_object=None, **overrides):
    """Build the application, its database binding and the importer extension."""
    app = Flask(__name__)
    app.config.from_object(config_object or _config_for_env(os.environ.get("FLASK_ENV", "development")))
    app.config.update(overrides)

    db.init_app(app)
    setup_logging(app)
    init_importer(app)

    with app.app_context():
        # Create the database tables only if not in testing mode
        if not app.config.get("TESTING", False):
            db.create_all()

    return app


app = create_app()


if __name__ == "__main__":
    port = int(os.environ.get("PORT", 5000))
    app.run(host="0.0.0.0", port=port)
