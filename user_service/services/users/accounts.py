"""Provide methods for working with user accounts."""

import logging
from typing import Optional

from flask import current_app
from sqlalchemy.exc import IntegrityError

from freshbonds import domain
from freshbonds.auth import roles
from . import util
from .models import DBUser
from .exceptions import NoSuchUser, UserExists

logger = logging.getLogger(__name__)


def _rounds() -> int:
    return int(current_app.config.get('BCRYPT_ROUNDS', util.DEFAULT_ROUNDS))


def to_domain(db_user: DBUser) -> domain.User:
    """Get a :class:`.domain.User` from a :class:`.DBUser`."""
    return domain.User(
        user_id=db_user.user_id,
        email=db_user.email,
        name=db_user.name,
        role=db_user.role,
        profile=domain.UserProfile(
            location=db_user.location,
            farm_name=db_user.farm_name,
            mobile=db_user.mobile
        ),
        is_active=bool(db_user.is_active),
        last_login=util.from_epoch(db_user.last_login),
        created=util.from_epoch(db_user.created)
    )


def email_exists(email: str) -> bool:
    """
    Determine whether a user with a particular address already exists.

    Parameters
    ----------
    email : str

    Returns
    -------
    bool

    """
    with util.transaction() as session:
        data = session.query(DBUser) \
            .filter(DBUser.email == email.lower()) \
            .first()
        return data is not None


def register(user: domain.User, password: str) -> domain.User:
    """
    Create a new user.

    Parameters
    ----------
    user : :class:`.domain.User`
        User data for the new account.
    password : str
        The user's chosen password. Only a bcrypt hash is stored.

    Returns
    -------
    :class:`.domain.User`
        The new user, with its ``user_id``.

    Raises
    ------
    :class:`.UserExists`
        If an account with the same e-mail address already exists.

    """
    email = user.email.lower()
    if email_exists(email):
        raise UserExists('An account with this email already exists')

    profile = user.profile or domain.UserProfile()
    db_user = DBUser(
        user_id=domain.new_id(),
        name=user.name,
        email=email,
        password_hash=util.hash_password(password, rounds=_rounds()),
        role=user.role,
        location=profile.location,
        farm_name=profile.farm_name,
        mobile=profile.mobile,
        is_active=True,
        login_attempts=0,
        created=util.now()
    )
    try:
        with util.transaction() as session:
            session.add(db_user)
    except IntegrityError as e:
        # Another registration with the same address won the race.
        raise UserExists('An account with this email already exists') from e
    logger.info('Registered %s user %s', db_user.role, db_user.user_id)
    return to_domain(db_user)


def get_db_user_by_id(user_id: str) -> DBUser:
    """
    Load the :class:`.DBUser` for ``user_id``.

    Raises
    ------
    :class:`.NoSuchUser`

    """
    with util.transaction() as session:
        db_user: Optional[DBUser] = session.get(DBUser, user_id)
    if db_user is None:
        raise NoSuchUser(f'No user with id {user_id}')
    return db_user


def get_db_user_by_email(email: str) -> DBUser:
    """
    Load the :class:`.DBUser` with address ``email``.

    Raises
    ------
    :class:`.NoSuchUser`

    """
    with util.transaction() as session:
        db_user: Optional[DBUser] = session.query(DBUser) \
            .filter(DBUser.email == email.lower()) \
            .first()
    if db_user is None:
        raise NoSuchUser('No such user')
    return db_user


def get_user_by_id(user_id: str) -> domain.User:
    """Get the :class:`.domain.User` with ``user_id``."""
    return to_domain(get_db_user_by_id(user_id))


def update_profile(user_id: str, name: str,
                   profile: domain.UserProfile) -> domain.User:
    """
    Update the name and profile of an existing user.

    The role and e-mail address cannot be changed. ``farm_name`` is only kept
    for farmers.

    Raises
    ------
    :class:`.NoSuchUser`

    """
    with util.transaction() as session:
        db_user: Optional[DBUser] = session.get(DBUser, user_id)
        if db_user is None:
            raise NoSuchUser(f'No user with id {user_id}')
        db_user.name = name
        db_user.location = profile.location
        db_user.mobile = profile.mobile
        if db_user.role == roles.FARMER:
            db_user.farm_name = profile.farm_name
        db_user.updated = util.now()
    logger.debug('Updated profile of %s', user_id)
    return to_domain(db_user)


def change_password(user_id: str, current_password: str,
                    new_password: str) -> None:
    """
    Replace the password of a user, after checking the current one.

    Raises
    ------
    :class:`.NoSuchUser`
    :class:`.PasswordAuthenticationFailed`
        If ``current_password`` is not correct.

    """
    db_user = get_db_user_by_id(user_id)
    util.check_password(current_password, db_user.password_hash)
    with util.transaction():
        db_user.password_hash = util.hash_password(new_password,
                                                   rounds=_rounds())
        db_user.updated = util.now()
    logger.info('Changed password of %s', user_id)
