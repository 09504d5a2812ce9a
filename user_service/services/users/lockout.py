"""
Account lockout after repeated failed logins.

Each failed login for an identity increments its counter. When the counter
reaches the threshold (5 by default), the account is locked for a fixed
duration (2 hours by default). A locked account cannot log in, even with the
correct password. The lock lifts lazily: the first failure after the lock has
expired restarts the counter at 1, and a successful login clears the counter
and the lock.

Counters are updated with conditional ``UPDATE`` statements rather than a
read-modify-write, so that concurrent failures are all counted.
"""

import logging

from sqlalchemy import update, or_

from . import util
from .models import DBUser

logger = logging.getLogger(__name__)

LOCKOUT_THRESHOLD = 5
LOCKOUT_DURATION = 2 * 60 * 60


def is_locked(db_user: DBUser) -> bool:
    """Check whether an identity is locked at the current time."""
    return db_user.lock_until is not None and db_user.lock_until > util.now()


def record_failure(user_id: str, threshold: int = LOCKOUT_THRESHOLD,
                   duration: int = LOCKOUT_DURATION) -> None:
    """
    Count a failed login for ``user_id``, locking the account if needed.

    Parameters
    ----------
    user_id : str
    threshold : int
        Consecutive failures at which the account is locked.
    duration : int
        Seconds for which the account is locked.

    """
    current = util.now()
    with util.transaction() as session:
        # A lock that has run out starts the count again.
        restarted = session.execute(
            update(DBUser)
            .where(DBUser.user_id == user_id,
                   DBUser.lock_until.isnot(None),
                   DBUser.lock_until < current)
            .values(login_attempts=1, lock_until=None)
        ).rowcount
        if restarted:
            logger.debug('Lock on %s expired; counting from 1', user_id)
            return

        session.execute(
            update(DBUser)
            .where(DBUser.user_id == user_id)
            .values(login_attempts=DBUser.login_attempts + 1)
        )
        locked = session.execute(
            update(DBUser)
            .where(DBUser.user_id == user_id,
                   DBUser.login_attempts >= threshold,
                   or_(DBUser.lock_until.is_(None),
                       DBUser.lock_until <= current))
            .values(lock_until=current + duration)
        ).rowcount
        if locked:
            logger.info('Locked account %s for %i seconds', user_id, duration)


def record_success(user_id: str) -> None:
    """Clear the failure counter and any lock, and note the login time."""
    with util.transaction() as session:
        session.execute(
            update(DBUser)
            .where(DBUser.user_id == user_id)
            .values(login_attempts=0, lock_until=None,
                    last_login=util.now())
        )
