"""Application factory for the user service."""

import logging

from flask import Flask

from freshbonds import app_logging, web
from freshbonds.auth import Auth, ratelimit

from .routes import blueprint, health
from .services import users

logger = logging.getLogger(__name__)


def create_web_app() -> Flask:
    """Initialize and configure the user service application."""
    app = Flask('user_service')
    app.config.from_pyfile('config.py')

    users.init_app(app)
    ratelimit.init_app(app)
    Auth(app)   # Handles sessions and authn/z.
    web.init_app(app)

    app.before_request(app_logging.log_request)
    app.register_blueprint(blueprint)
    app.register_blueprint(health)

    if app.config['CREATE_DB']:
        with app.app_context():
            users.create_all()

    return app
