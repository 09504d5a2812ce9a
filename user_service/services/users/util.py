"""Helpers and Flask application integration."""

import logging
import time
from contextlib import contextmanager
from datetime import datetime
from typing import Generator, Optional

import bcrypt
from flask import Flask
from pytz import UTC
from sqlalchemy import text
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm.session import Session

from .models import db
from .exceptions import PasswordAuthenticationFailed, Unavailable

logger = logging.getLogger(__name__)

DEFAULT_ROUNDS = 12
MAX_PASSWORD_BYTES = 72
"""bcrypt only considers this many bytes of a password."""


def now() -> int:
    """Get the current epoch/unix time."""
    return int(time.time())


def from_epoch(t: Optional[int]) -> Optional[datetime]:
    """Get a :class:`datetime` from an UNIX timestamp."""
    if t is None:
        return None
    return datetime.fromtimestamp(t, tz=UTC)


@contextmanager
def transaction() -> Generator[Session, None, None]:
    """
    Context manager for database transaction.

    Commits when the block exits normally, and rolls back otherwise. Lost
    database connections are raised as :class:`.Unavailable`.
    """
    try:
        yield db.session
        db.session.commit()
    except OperationalError as e:
        logger.error('Credential store unavailable: %s', str(e))
        db.session.rollback()
        raise Unavailable('Credential store unavailable') from e
    except Exception as e:
        logger.debug('Rolling back: %s', str(e))
        db.session.rollback()
        raise


def init_app(app: Flask) -> None:
    """Set configuration defaults and attach session to the application."""
    app.config.setdefault('SQLALCHEMY_TRACK_MODIFICATIONS', False)
    db.init_app(app)


def create_all() -> None:
    """Create all tables in the database."""
    db.create_all()


def drop_all() -> None:
    """Drop all tables in the database."""
    db.drop_all()


def is_available() -> bool:
    """Check our connection to the database."""
    try:
        db.session.execute(text('SELECT 1'))
    except OperationalError as e:
        logger.error('Credential store unavailable: %s', e)
        return False
    finally:
        db.session.rollback()
    return True


def hash_password(password: str, rounds: int = DEFAULT_ROUNDS) -> str:
    """Generate a salted bcrypt hash of a password."""
    encoded = password.encode('utf-8')[:MAX_PASSWORD_BYTES]
    return bcrypt.hashpw(encoded, bcrypt.gensalt(rounds)).decode('ascii')


def check_password(password: str, encrypted: str) -> None:
    """
    Check a password against a bcrypt hash.

    Raises
    ------
    :class:`PasswordAuthenticationFailed`
        If the password does not match.

    """
    encoded = password.encode('utf-8')[:MAX_PASSWORD_BYTES]
    if not bcrypt.checkpw(encoded, encrypted.encode('ascii')):
        raise PasswordAuthenticationFailed('Incorrect password')
