"""Controller for creating new accounts."""

import logging
from http import HTTPStatus
from typing import Optional

from werkzeug.exceptions import Conflict, ServiceUnavailable

from freshbonds.forms import to_formdata, validate
from ..services import users
from .forms import RegistrationForm
from .util import ResponseData, user_data, new_token

logger = logging.getLogger(__name__)


def register(payload: Optional[dict]) -> ResponseData:
    """
    Create a new account, and log the new user in.

    Parameters
    ----------
    payload : dict
        The decoded JSON request body.

    Returns
    -------
    dict
        The new ``user`` and a session ``token``.
    int
        201 (Created).
    dict
        Headers to add to the response.

    Raises
    ------
    :class:`.ValidationFailed`
        If the registration data are not valid.
    :class:`.Conflict`
        If an account with the same e-mail address already exists.

    """
    form = RegistrationForm(to_formdata(payload))
    validate(form)
    try:
        user = users.register(form.to_domain(), form.password.data)
    except users.UserExists as e:
        logger.debug('Registration with an existing email')
        raise Conflict('An account with this email already exists') from e
    except users.Unavailable as e:
        raise ServiceUnavailable('Service unavailable') from e
    return {'user': user_data(user), 'token': new_token(user)}, \
        HTTPStatus.CREATED, {}
