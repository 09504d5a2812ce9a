"""Helpers and Flask application integration."""

import logging
import time
from contextlib import contextmanager
from datetime import datetime
from typing import Generator, Optional

from flask import Flask
from pytz import UTC
from sqlalchemy import text
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm.session import Session

from .models import db

logger = logging.getLogger(__name__)


class Unavailable(RuntimeError):
    """The product database cannot be reached."""


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
    """Context manager for database transaction."""
    try:
        yield db.session
        db.session.commit()
    except OperationalError as e:
        logger.error('Product database unavailable: %s', str(e))
        db.session.rollback()
        raise Unavailable('Product database unavailable') from e
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
        logger.error('Product database unavailable: %s', e)
        return False
    finally:
        db.session.rollback()
    return True
