"""Controllers for viewing and editing the authenticated user's account."""

import logging
from http import HTTPStatus
from typing import Optional

from werkzeug.exceptions import NotFound, Unauthorized, ServiceUnavailable

from freshbonds import domain
from freshbonds.forms import to_formdata, validate
from ..services import users
from .forms import ProfileForm, PasswordForm
from .util import ResponseData, user_data

logger = logging.getLogger(__name__)


def _get_user(user_id: str) -> domain.User:
    try:
        return users.get_user_by_id(user_id)
    except users.NoSuchUser as e:
        raise NotFound('User not found') from e
    except users.Unavailable as e:
        raise ServiceUnavailable('Service unavailable') from e


def get_profile(session: domain.Session) -> ResponseData:
    """Get the account of the authenticated user."""
    user = _get_user(session.user_id)
    return user_data(user), HTTPStatus.OK, {}


def update_profile(session: domain.Session,
                   payload: Optional[dict]) -> ResponseData:
    """
    Update the name and profile of the authenticated user.

    The role of the account is taken from the store, not from the token, and
    cannot be changed.
    """
    user = _get_user(session.user_id)
    form = ProfileForm(to_formdata(payload), role=user.role)
    validate(form)
    try:
        user = users.update_profile(user.user_id, form.name.data,
                                    form.profile_to_domain())
    except users.NoSuchUser as e:
        raise NotFound('User not found') from e
    except users.Unavailable as e:
        raise ServiceUnavailable('Service unavailable') from e
    return user_data(user), HTTPStatus.OK, {}


def change_password(session: domain.Session,
                    payload: Optional[dict]) -> ResponseData:
    """
    Change the password of the authenticated user.

    Raises
    ------
    :class:`.ValidationFailed`
        If the new password is not acceptable.
    :class:`.Unauthorized`
        If the current password is not correct.

    """
    form = PasswordForm(to_formdata(payload))
    validate(form)
    try:
        users.change_password(session.user_id, form.current_password.data,
                              form.new_password.data)
    except users.PasswordAuthenticationFailed as e:
        logger.debug('Wrong current password for %s', session.user_id)
        raise Unauthorized('Current password is incorrect') from e
    except users.NoSuchUser as e:
        raise NotFound('User not found') from e
    except users.Unavailable as e:
        raise ServiceUnavailable('Service unavailable') from e
    return {'message': 'Password updated successfully'}, HTTPStatus.OK, {}
