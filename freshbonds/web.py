"""Flask wiring shared by the Fresh Bonds services."""

import logging
from typing import List

from flask import Flask, Response, jsonify
from flask_cors import CORS
from werkzeug.exceptions import HTTPException, Forbidden, Unauthorized, \
    BadRequest, MethodNotAllowed, InternalServerError, NotFound, Conflict, \
    TooManyRequests, ServiceUnavailable, UnsupportedMediaType, \
    RequestEntityTooLarge
from werkzeug.middleware.proxy_fix import ProxyFix

logger = logging.getLogger(__name__)

SECURITY_HEADERS = {
    'X-Content-Type-Options': 'nosniff',
    'X-Frame-Options': 'DENY',
    'Referrer-Policy': 'no-referrer',
    'Content-Security-Policy': "default-src 'none'; frame-ancestors 'none'"
}
"""Added to every response; the services only ever serve JSON."""


def register_error_handlers(app: Flask) -> None:
    """Register error handlers for the Flask app."""
    app.errorhandler(Forbidden)(jsonify_exception)
    app.errorhandler(Unauthorized)(jsonify_exception)
    app.errorhandler(BadRequest)(jsonify_exception)
    app.errorhandler(InternalServerError)(jsonify_exception)
    app.errorhandler(NotFound)(jsonify_exception)
    app.errorhandler(MethodNotAllowed)(jsonify_exception)
    app.errorhandler(Conflict)(jsonify_exception)
    app.errorhandler(TooManyRequests)(jsonify_exception)
    app.errorhandler(ServiceUnavailable)(jsonify_exception)
    app.errorhandler(UnsupportedMediaType)(jsonify_exception)
    app.errorhandler(RequestEntityTooLarge)(jsonify_exception)


def jsonify_exception(error: HTTPException) -> Response:
    """
    Render exceptions as JSON.

    The body is ``{"reason": ...}``, plus ``details`` (a list of validation
    messages) and ``retry_after`` (seconds) when the exception carries them.
    """
    exc_resp = error.get_response()
    data = {'reason': error.description}
    details = getattr(error, 'details', None)
    if details:
        data['details'] = details
    retry_after = getattr(error, 'retry_after', None)
    if retry_after is not None:
        data['retry_after'] = retry_after
    if exc_resp.status_code >= 500:
        logger.error('Request failed: %s', error)
    response: Response = jsonify(data)
    response.status_code = exc_resp.status_code
    for header in ('Retry-After', 'Allow'):
        if header in exc_resp.headers:
            response.headers[header] = exc_resp.headers[header]
    return response


def apply_response_headers(response: Response) -> Response:
    """Apply security headers to all responses."""
    for name, value in SECURITY_HEADERS.items():
        response.headers.setdefault(name, value)
    return response


CORS_METHODS = ['GET', 'POST', 'PUT', 'PATCH', 'DELETE', 'OPTIONS']
CORS_HEADERS = ['Content-Type', 'Authorization']


def cors_origins(value: str) -> List[str]:
    """Split a comma-separated list of origins, as given in config."""
    return [origin.strip() for origin in value.split(',') if origin.strip()]


def init_app(app: Flask) -> None:
    """
    Install the shared error handlers, response headers and proxy support.

    Browsers at the origins listed in ``CORS_ORIGINS`` may call the service
    with credentials and an ``Authorization`` header. Request bodies larger
    than ``MAX_CONTENT_LENGTH`` are refused with 413.

    If ``PROXY_FIX_X_FOR`` is set, that many ``X-Forwarded-For`` hops are
    trusted, so that ``request.remote_addr`` is the address of the client
    rather than that of the gateway.
    """
    register_error_handlers(app)
    app.after_request(apply_response_headers)
    origins = cors_origins(app.config.get('CORS_ORIGINS', ''))
    if origins:
        CORS(app, origins=origins, methods=CORS_METHODS,
             allow_headers=CORS_HEADERS, supports_credentials=True)
    x_for = int(app.config.get('PROXY_FIX_X_FOR', 0))
    if x_for:
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=x_for)  # type: ignore
