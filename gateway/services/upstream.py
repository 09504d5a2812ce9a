"""Forwards requests to the user and product services."""

import logging
from typing import Dict, Mapping, Optional
from urllib.parse import urljoin

import requests
from flask import Flask, current_app, g

logger = logging.getLogger(__name__)

USERS = 'users'
PRODUCTS = 'products'

SERVICES = {USERS: 'USER_SERVICE_URL', PRODUCTS: 'PRODUCT_SERVICE_URL'}
"""Upstream service names, and the settings that hold their base URLs."""


class Unavailable(IOError):
    """An upstream service could not be reached."""


class UpstreamSession(object):
    """An HTTP session with one of the services behind the gateway."""

    def __init__(self, base_url: str, timeout: float = 30.) -> None:
        """Create a new HTTP session."""
        self.base_url = base_url
        self.timeout = timeout
        self._session = requests.Session()
        logger.debug('New UpstreamSession for %s', base_url)

    def status(self) -> bool:
        """Check the availability of the upstream service."""
        try:
            response = self._session.get(urljoin(self.base_url, '/health'),
                                         timeout=self.timeout)
        except requests.exceptions.RequestException:
            return False
        return response.ok

    def forward(self, method: str, path: str, query: bytes = b'',
                headers: Optional[Mapping[str, str]] = None,
                body: bytes = b'') -> requests.Response:
        """
        Send a request to the upstream service.

        Parameters
        ----------
        method : str
            HTTP method.
        path : str
            Path of the request, which is the same upstream as at the gateway.
        query : bytes
            Raw query string, without the ``?``.
        headers : dict
            Headers to send. Should already be filtered by the caller.
        body : bytes
            Request body.

        Returns
        -------
        :class:`requests.Response`
            Whatever the upstream service responded, including errors.

        Raises
        ------
        :class:`Unavailable`
            If the upstream service could not be reached, or did not respond
            in time.

        """
        url = urljoin(self.base_url, path)
        if query:
            url = f'{url}?{query.decode("latin-1")}'
        try:
            response = self._session.request(method, url, data=body or None,
                                             headers=dict(headers or {}),
                                             timeout=self.timeout,
                                             allow_redirects=False)
        except requests.exceptions.RequestException as e:
            logger.error('%s %s failed: %s', method, url, e)
            raise Unavailable(f'Could not reach {self.base_url}') from e
        self._session.cookies.clear()
        logger.debug('%s %s: %i', method, url, response.status_code)
        return response


def init_app(app: Flask) -> None:
    """Set required configuration defaults for the application."""
    app.config.setdefault('USER_SERVICE_URL', 'http://localhost:3001')
    app.config.setdefault('PRODUCT_SERVICE_URL', 'http://localhost:3002')
    app.config.setdefault('UPSTREAM_TIMEOUT', 30.)


def get_session(name: str) -> UpstreamSession:
    """Create a new session with the upstream service called ``name``."""
    config = current_app.config
    return UpstreamSession(config[SERVICES[name]],
                           config['UPSTREAM_TIMEOUT'])


def current_session(name: str) -> UpstreamSession:
    """Get the session with ``name`` for this request context."""
    sessions: Dict[str, UpstreamSession] = g.setdefault('upstream', {})
    if name not in sessions:
        sessions[name] = get_session(name)
    return sessions[name]


def forward(name: str, *args, **kwargs) -> requests.Response:
    """Forward a request to the upstream service called ``name``."""
    return current_session(name).forward(*args, **kwargs)


def status(name: str) -> bool:
    """Wrapper for :meth:`UpstreamSession.status`."""
    return current_session(name).status()
