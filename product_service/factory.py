"""Application factory for the product service."""

import logging

from flask import Flask

from freshbonds import app_logging, web
from freshbonds.auth import Auth

from .routes import blueprint, health
from .services import datastore

logger = logging.getLogger(__name__)


def create_web_app() -> Flask:
    """Initialize and configure the product service application."""
    app = Flask('product_service')
    app.config.from_pyfile('config.py')

    datastore.init_app(app)
    Auth(app)
    web.init_app(app)

    app.before_request(app_logging.log_request)
    app.register_blueprint(blueprint)
    app.register_blueprint(health)

    if app.config['CREATE_DB']:
        with app.app_context():
            datastore.create_all()

    return app
