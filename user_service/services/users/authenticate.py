"""Provide an API for password authentication, with account lockout."""

import logging

from flask import current_app

from freshbonds import domain
from . import lockout, util
from .accounts import get_db_user_by_email, get_db_user_by_id, to_domain
from .exceptions import NoSuchUser, AuthenticationFailed, \
    PasswordAuthenticationFailed

logger = logging.getLogger(__name__)


def authenticate(email: str, password: str) -> domain.User:
    """
    Validate email/password. If successful, retrieve user details.

    Unknown addresses, inactive accounts, wrong passwords and locked accounts
    all fail in the same way, so that callers cannot tell them apart. Every
    failure against an existing account counts towards its lockout, including
    attempts made while it is locked.

    Parameters
    ----------
    email : str
    password : str
        Password (as entered). Never logged.

    Returns
    -------
    :class:`domain.User`

    Raises
    ------
    :class:`AuthenticationFailed`
        Failed to authenticate user with provided credentials.

    """
    threshold = int(current_app.config.get('LOCKOUT_THRESHOLD',
                                           lockout.LOCKOUT_THRESHOLD))
    duration = int(current_app.config.get('LOCKOUT_DURATION',
                                          lockout.LOCKOUT_DURATION))
    try:
        db_user = get_db_user_by_email(email)
    except NoSuchUser as e:
        logger.debug('No such user')
        raise AuthenticationFailed('Invalid email or password') from e

    user_id = db_user.user_id
    if not db_user.is_active:
        logger.info('Login attempt for inactive user %s', user_id)
        raise AuthenticationFailed('Invalid email or password')

    if lockout.is_locked(db_user):
        logger.info('Login attempt for locked user %s', user_id)
        lockout.record_failure(user_id, threshold, duration)
        raise AuthenticationFailed('Invalid email or password')

    try:
        util.check_password(password, db_user.password_hash)
    except PasswordAuthenticationFailed as e:
        logger.debug('Wrong password for user %s', user_id)
        lockout.record_failure(user_id, threshold, duration)
        raise AuthenticationFailed('Invalid email or password') from e

    lockout.record_success(user_id)
    logger.debug('Authenticated user %s', user_id)
    return to_domain(get_db_user_by_id(user_id))
