"""Provides tools for working with authenticated sessions."""

import logging
from datetime import timedelta
from typing import Optional, Union

from flask import Flask, request

from . import decorators, middleware, roles, tokens
from .exceptions import ConfigurationError
from .. import domain

logger = logging.getLogger(__name__)

MIN_SECRET_LENGTH = 32
"""Signing secrets shorter than this are refused at startup."""


class Auth(object):
    """
    Attaches session information to the request.

    Intended for use in a Flask application factory, for example:

    .. code-block:: python

       from flask import Flask
       from freshbonds.auth import Auth
       from someapp import routes


       def create_web_app() -> Flask:
          app = Flask('someapp')
          app.config.from_pyfile('config.py')
          Auth(app)   # Installs the token middleware.
          app.register_blueprint(routes.blueprint)    # Your blueprint.
          return app

    The session is then available as ``request.auth``, or ``None`` if the
    request did not carry a token.
    """

    def __init__(self, app: Optional[Flask] = None) -> None:
        """
        Initialize ``app`` with the token middleware.

        Parameters
        ----------
        app : :class:`Flask`

        """
        if app is not None:
            self.init_app(app)

    def init_app(self, app: Flask) -> None:
        """
        Install :class:`.middleware.AuthMiddleware` and :meth:`.load_session`.

        Raises
        ------
        :class:`.ConfigurationError`
            Raised if ``JWT_SECRET`` is missing or too short to sign tokens
            safely.

        """
        secret = app.config.get('JWT_SECRET')
        if not secret or len(secret) < MIN_SECRET_LENGTH:
            raise ConfigurationError(
                f'JWT_SECRET must be at least {MIN_SECRET_LENGTH} characters'
            )
        self.app = app
        app.wsgi_app = middleware.AuthMiddleware(app.wsgi_app, app.config)
        app.before_request(self.load_session)

    def load_session(self) -> None:
        """
        Attach the session unpacked by the middleware to the request.

        If the middleware found a bad token, the session is ``None`` and the
        error stays in the environ; the :func:`.decorators.scoped` guard
        raises it on protected routes. Public routes are unaffected by a bad
        token.
        """
        session: Optional[Union[domain.Session, Exception]] = \
            request.environ.get('session')

        if isinstance(session, Exception):
            logger.debug('Middleware passed an exception: %s', session)
            session = None
        request.auth = session


def issue_token(user: domain.User, secret: str, duration: int) -> str:
    """Issue a session token for ``user``, valid for ``duration`` seconds."""
    return tokens.issue(user.user_id, user.email, user.role, secret,
                        duration=timedelta(seconds=duration))
