"""Routes of the API gateway."""

import logging
from http import HTTPStatus

from flask import Blueprint, Response, jsonify, request

from .controllers import proxy
from .services import upstream

logger = logging.getLogger(__name__)

METHODS = ['GET', 'POST', 'PUT', 'PATCH', 'DELETE']
"""Relayed methods. CORS preflights are answered by the gateway itself."""

blueprint = Blueprint('gateway', __name__, url_prefix='/api')
health = Blueprint('health', __name__, url_prefix='/health')


def _relay(service: str) -> Response:
    return proxy.relay(service, request.method, request.path,
                       request.query_string, request.headers.items(),
                       request.get_data(), request.remote_addr or '')


@blueprint.route('', methods=['GET'])
def index() -> Response:
    """Describe the services behind the gateway."""
    return jsonify(service='Fresh Bonds API Gateway', endpoints={
        'users': '/api/users', 'products': '/api/products',
        'health': '/health'
    })


@blueprint.route('/users', defaults={'path': ''}, methods=METHODS)
@blueprint.route('/users/<path:path>', methods=METHODS)
def users(path: str) -> Response:
    """Forward to the user service."""
    return _relay(upstream.USERS)


@blueprint.route('/products', defaults={'path': ''}, methods=METHODS)
@blueprint.route('/products/<path:path>', methods=METHODS)
def products(path: str) -> Response:
    """Forward to the product service."""
    return _relay(upstream.PRODUCTS)


@health.route('', methods=['GET'])
def status() -> Response:
    """Report that the gateway is up."""
    return jsonify(status='UP', service='api-gateway')


@health.route('/live', methods=['GET'])
def live() -> Response:
    """Liveness check."""
    return jsonify(status='UP')


@health.route('/ready', methods=['GET'])
def ready() -> Response:
    """Readiness check: the gateway is ready when its upstreams are up."""
    services = {name: 'UP' if upstream.status(name) else 'DOWN'
                for name in upstream.SERVICES}
    up = all(value == 'UP' for value in services.values())
    response: Response = jsonify(status='UP' if up else 'DOWN',
                                 services=services)
    if not up:
        response.status_code = HTTPStatus.SERVICE_UNAVAILABLE
    return response
