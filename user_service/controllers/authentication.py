"""
Controllers for logging in and out.

Sessions are stateless bearer tokens: logging in issues a token, and logging
out is done by the client discarding it.
"""

import logging
from http import HTTPStatus
from typing import Optional

from werkzeug.exceptions import Unauthorized, ServiceUnavailable

from freshbonds.forms import to_formdata, validate
from ..services import users
from .forms import LoginForm
from .util import ResponseData, user_data, new_token

logger = logging.getLogger(__name__)


def login(payload: Optional[dict]) -> ResponseData:
    """
    Authenticate with e-mail and password, and issue a session token.

    Unknown addresses, wrong passwords and locked accounts all get the same
    response.

    Returns
    -------
    dict
        The ``user`` and a session ``token``.
    int
        200 (OK).
    dict
        Headers to add to the response.

    Raises
    ------
    :class:`.ValidationFailed`
        If the credentials are missing or malformed.
    :class:`.Unauthorized`
        If authentication fails, for whatever reason.

    """
    form = LoginForm(to_formdata(payload))
    validate(form)
    try:
        user = users.authenticate(form.email.data, form.password.data)
    except users.AuthenticationFailed as e:
        logger.debug('Authentication failed: %s', e)
        raise Unauthorized('Invalid email or password') from e
    except users.Unavailable as e:
        raise ServiceUnavailable('Service unavailable') from e
    logger.info('User %s logged in', user.user_id)
    return {'user': user_data(user), 'token': new_token(user)}, \
        HTTPStatus.OK, {}


def logout() -> ResponseData:
    """Acknowledge a logout. The client discards its token."""
    return {'message': 'Logged out successfully'}, HTTPStatus.OK, {}
