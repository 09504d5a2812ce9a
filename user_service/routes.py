"""Provides the JSON API of the user service."""

import logging
from http import HTTPStatus

from flask import Blueprint, Response, jsonify, make_response, request

from freshbonds.auth.decorators import scoped
from freshbonds.auth.ratelimit import rate_limited

from .controllers import authentication, profile, registration
from .services import users

logger = logging.getLogger(__name__)

blueprint = Blueprint('users', __name__, url_prefix='/api/users')
health = Blueprint('health', __name__, url_prefix='/health')


def _respond(data: dict, code: int, headers: dict) -> Response:
    response: Response = make_response(jsonify(data), code, headers)
    return response


@blueprint.route('/register', methods=['POST'])
@rate_limited('register')
def register() -> Response:
    """Create a new account."""
    return _respond(*registration.register(request.get_json(silent=True)))


@blueprint.route('/login', methods=['POST'])
@rate_limited('login')
def login() -> Response:
    """Log in with e-mail and password."""
    return _respond(*authentication.login(request.get_json(silent=True)))


@blueprint.route('/logout', methods=['POST'])
def logout() -> Response:
    """Log out. Tokens are stateless, so this is only an acknowledgement."""
    return _respond(*authentication.logout())


@blueprint.route('/profile', methods=['GET'])
@scoped()
def get_profile() -> Response:
    """Get the account of the authenticated user."""
    return _respond(*profile.get_profile(request.auth))


@blueprint.route('/profile', methods=['PUT'])
@scoped()
def update_profile() -> Response:
    """Update the account of the authenticated user."""
    return _respond(*profile.update_profile(request.auth,
                                            request.get_json(silent=True)))


@blueprint.route('/password', methods=['PUT'])
@scoped()
@rate_limited('password')
def change_password() -> Response:
    """Change the password of the authenticated user."""
    return _respond(*profile.change_password(request.auth,
                                             request.get_json(silent=True)))


@health.route('', methods=['GET'])
def status() -> Response:
    """Report that the service is up."""
    return jsonify(status='UP', service='user-service')


@health.route('/live', methods=['GET'])
def live() -> Response:
    """Liveness check."""
    return jsonify(status='UP')


@health.route('/ready', methods=['GET'])
def ready() -> Response:
    """Readiness check: the credential store must be reachable."""
    if not users.is_available():
        return _respond({'status': 'DOWN', 'database': 'disconnected'},
                        HTTPStatus.SERVICE_UNAVAILABLE, {})
    return jsonify(status='UP', database='connected')
