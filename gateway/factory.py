"""Application factory for the API gateway."""

import logging

from flask import Flask

from freshbonds import app_logging, web

from .routes import blueprint, health
from .services import upstream

logger = logging.getLogger(__name__)


def create_web_app() -> Flask:
    """Initialize and configure the gateway application."""
    app = Flask('gateway')
    app.config.from_pyfile('config.py')

    upstream.init_app(app)
    web.init_app(app)

    app.before_request(app_logging.log_request)
    app.register_blueprint(blueprint)
    app.register_blueprint(health)
    return app
