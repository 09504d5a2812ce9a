"""Middleware for verifying bearer tokens on requests."""

import logging
from typing import Callable, Iterable, Mapping, Tuple

from werkzeug.exceptions import Unauthorized

from . import tokens
from .exceptions import InvalidToken, ExpiredToken, ConfigurationError
from .. import domain

logger = logging.getLogger(__name__)

WSGIRequest = Tuple[dict, Callable]


class AuthMiddleware(object):
    """
    Middleware to handle auth information on requests.

    Before the request is handled by the application, the ``Authorization``
    header is parsed for a bearer token. If the token is verified, the
    :class:`.domain.Session` that it carries is attached to the WSGI environ
    as ``session``. If the token is malformed, has a bad signature or has
    expired, an :class:`.Unauthorized` exception is attached instead, so that
    the application can raise it within the request context. If there is no
    ``Authorization`` header, ``session`` is ``None``.

    The signing secret is read from ``config['JWT_SECRET']`` on each request,
    where ``config`` is usually the Flask app config.
    """

    def __init__(self, wsgi_app: Callable, config: Mapping) -> None:
        self.wsgi_app = wsgi_app
        self.config = config

    def __call__(self, environ: dict,
                 start_response: Callable) -> Iterable[bytes]:
        environ, start_response = self.before(environ, start_response)
        return self.wsgi_app(environ, start_response)

    def before(self, environ: dict, start_response: Callable) -> WSGIRequest:
        """Decode and unpack the auth token on the request."""
        environ['session'] = None      # Create the session key, at a minimum.
        environ['token'] = None
        header = environ.get('HTTP_AUTHORIZATION')  # We may not have a token.
        if header is None:
            logger.debug('No auth token')
            return environ, start_response

        secret = self.config.get('JWT_SECRET')
        if not secret:
            raise ConfigurationError('Missing JWT_SECRET')

        scheme, _, token = header.partition(' ')
        if scheme.lower() != 'bearer' or not token.strip():
            logger.info('Authorization header is not a bearer token')
            environ['session'] = Unauthorized('Invalid token')
            return environ, start_response

        token = token.strip()
        try:
            session: domain.Session = tokens.decode(token, secret)
            environ['session'] = session
            # Keep the token so that it can be forwarded in subrequests.
            environ['token'] = token
        except ExpiredToken:
            logger.info('Auth token has expired')
            environ['session'] = Unauthorized('Invalid token')
        except InvalidToken as e:
            logger.info('Auth token not valid: %s', e)
            environ['session'] = Unauthorized('Invalid token')
        return environ, start_response
