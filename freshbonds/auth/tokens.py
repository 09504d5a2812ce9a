"""
Functions for issuing and verifying session tokens.

A token is an HS256-signed JWT carrying the claims ``user_id``, ``email``,
``role``, ``iat`` and ``exp``. Verification has no side effects: decoding the
same token twice yields equal sessions (until the token expires).
"""

from datetime import datetime, timedelta
from typing import Optional

import jwt
from pytz import UTC

from . import exceptions, roles
from .. import domain

ALGORITHM = 'HS256'
DEFAULT_DURATION = timedelta(hours=8)
REQUIRED_CLAIMS = ('user_id', 'email', 'role', 'iat', 'exp')


def issue(user_id: str, email: str, role: str, secret: str,
          duration: timedelta = DEFAULT_DURATION,
          start_time: Optional[datetime] = None) -> str:
    """
    Issue a new token for an authenticated identity.

    Parameters
    ----------
    user_id : str
    email : str
    role : str
        One of :data:`.roles.ALL`.
    secret : str
        Signing secret shared by all services.
    duration : :class:`timedelta`
        Token lifetime. Defaults to eight hours.
    start_time : :class:`datetime`
        Issue time. Defaults to now.

    Returns
    -------
    str

    """
    if start_time is None:
        start_time = datetime.now(tz=UTC)
    session = domain.Session(user_id=user_id, email=email, role=role,
                             start_time=start_time,
                             end_time=start_time + duration)
    return encode(session, secret)


def encode(session: domain.Session, secret: str) -> str:
    """Encode session information as a signed JWT."""
    claims = {
        'user_id': session.user_id,
        'email': session.email,
        'role': session.role,
        'iat': int(session.start_time.timestamp()),
        'exp': int(session.end_time.timestamp())
    }
    return jwt.encode(claims, secret, algorithm=ALGORITHM)


def decode(token: str, secret: str) -> domain.Session:
    """
    Verify a token and get the session that it carries.

    Raises
    ------
    :class:`.exceptions.ExpiredToken`
        The signature is valid but the token has expired.
    :class:`.exceptions.InvalidToken`
        The token is malformed, the signature is not valid, or a required
        claim is missing.

    """
    try:
        data: dict = jwt.decode(token, secret, algorithms=[ALGORITHM],
                                options={'require': ['exp', 'iat']})
    except jwt.exceptions.ExpiredSignatureError as e:
        raise exceptions.ExpiredToken('Token has expired') from e
    except jwt.exceptions.InvalidTokenError as e:
        raise exceptions.InvalidToken('Not a valid token') from e

    missing = [claim for claim in REQUIRED_CLAIMS if not data.get(claim)]
    if missing:
        raise exceptions.InvalidToken(f'Missing claims: {", ".join(missing)}')
    if data['role'] not in roles.ALL:
        raise exceptions.InvalidToken('Unknown role')
    return domain.Session(
        user_id=data['user_id'],
        email=data['email'],
        role=data['role'],
        start_time=datetime.fromtimestamp(data['iat'], tz=UTC),
        end_time=datetime.fromtimestamp(data['exp'], tz=UTC)
    )
