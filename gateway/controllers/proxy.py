"""
Relays requests to the upstream services, and their responses back.

The gateway passes the method, path, query, body and the ``Authorization``
header through unchanged. Cookies and hop-by-hop headers are dropped in both
directions, and the client address is passed on in ``X-Forwarded-For`` and
``X-Real-IP`` so that the services can rate-limit by client.
"""

import logging
from typing import Iterable, Mapping, Tuple

from flask import Response
from werkzeug.exceptions import ServiceUnavailable

from ..services import upstream

logger = logging.getLogger(__name__)

HOP_BY_HOP = frozenset([
    'connection', 'keep-alive', 'proxy-authenticate', 'proxy-authorization',
    'te', 'trailer', 'trailers', 'transfer-encoding', 'upgrade'
])
"""Headers that apply to a single connection, and are never relayed."""

NOT_FORWARDED = HOP_BY_HOP | frozenset([
    'host', 'content-length', 'cookie', 'x-forwarded-for', 'x-real-ip'
])
"""Request headers that the gateway drops or replaces."""

NOT_RETURNED = HOP_BY_HOP | frozenset([
    'content-length', 'content-encoding', 'set-cookie'
])
"""Response headers that the gateway drops or replaces."""


def _filter(headers: Iterable[Tuple[str, str]],
            excluded: frozenset) -> Iterable[Tuple[str, str]]:
    # Headers named in the Connection header are hop-by-hop too.
    headers = list(headers)
    named = {name.strip().lower() for key, value in headers
             if key.lower() == 'connection' for name in value.split(',')}
    return [(key, value) for key, value in headers
            if key.lower() not in excluded and key.lower() not in named]


def request_headers(headers: Iterable[Tuple[str, str]],
                    client: str) -> Mapping[str, str]:
    """Headers to send upstream for a request from ``client``."""
    forwarded = dict(_filter(headers, NOT_FORWARDED))
    forwarded['X-Forwarded-For'] = client
    forwarded['X-Real-IP'] = client
    return forwarded


def relay(service: str, method: str, path: str, query: bytes,
          headers: Iterable[Tuple[str, str]], body: bytes,
          client: str) -> Response:
    """
    Forward a request to ``service``, and relay its response.

    Raises
    ------
    :class:`.ServiceUnavailable`
        If the service could not be reached.

    """
    try:
        response = upstream.forward(service, method, path, query,
                                    request_headers(headers, client), body)
    except upstream.Unavailable as e:
        raise ServiceUnavailable('Service unavailable') from e
    relayed = Response(response.content, status=response.status_code)
    for key, value in _filter(response.headers.items(), NOT_RETURNED):
        relayed.headers[key] = value
    return relayed
