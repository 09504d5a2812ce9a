"""Flask configuration for the user service."""

import os

NAME = 'user_service'

#################### Tokens ####################
JWT_SECRET = os.environ.get('JWT_SECRET', '')
"""
Secret used to sign session tokens. Shared by all services.

Must be at least 32 characters; the service refuses to start otherwise.
"""

TOKEN_DURATION = int(os.environ.get('TOKEN_DURATION', '28800'))
"""Lifetime of a session token, in seconds. Defaults to eight hours."""

#################### Credential store ####################
SQLALCHEMY_DATABASE_URI = os.environ.get('SQLALCHEMY_DATABASE_URI',
                                         'sqlite:///users.db')
"""Database in which identities and credentials are stored."""

SQLALCHEMY_TRACK_MODIFICATIONS = False

CREATE_DB = bool(int(os.environ.get('CREATE_DB', '1')))
"""Create tables at startup if they do not exist."""

BCRYPT_ROUNDS = int(os.environ.get('BCRYPT_ROUNDS', '12'))
"""bcrypt work factor for password hashes."""

#################### Account lockout ####################
LOCKOUT_THRESHOLD = int(os.environ.get('LOCKOUT_THRESHOLD', '5'))
"""Consecutive failed logins after which an account is locked."""

LOCKOUT_DURATION = int(os.environ.get('LOCKOUT_DURATION', '7200'))
"""How long an account stays locked, in seconds. Defaults to two hours."""

#################### Rate limits ####################
RATE_LIMIT_BACKEND = os.environ.get('RATE_LIMIT_BACKEND', 'memory')
"""
Where rate limit windows are kept: ``memory`` or ``redis``.

Use ``redis`` when more than one process serves the app.
"""

REDIS_HOST = os.environ.get('REDIS_HOST', 'localhost')
REDIS_PORT = os.environ.get('REDIS_PORT', '6379')
REDIS_DATABASE = os.environ.get('REDIS_DATABASE', '0')

REDIS_FAKE = bool(int(os.environ.get('REDIS_FAKE', '0')))
"""Use the FakeRedis library instead of a redis service.

Useful for testing, dev, beta."""

REGISTER_RATE_LIMIT = int(os.environ.get('REGISTER_RATE_LIMIT', '5'))
"""Registration attempts allowed per client address, per window."""

REGISTER_RATE_WINDOW = int(os.environ.get('REGISTER_RATE_WINDOW', '900'))

LOGIN_RATE_LIMIT = int(os.environ.get('LOGIN_RATE_LIMIT', '10'))
"""Login attempts allowed per client address, per window."""

LOGIN_RATE_WINDOW = int(os.environ.get('LOGIN_RATE_WINDOW', '900'))

PASSWORD_RATE_LIMIT = int(os.environ.get('PASSWORD_RATE_LIMIT', '5'))
"""Password changes allowed per client address, per window."""

PASSWORD_RATE_WINDOW = int(os.environ.get('PASSWORD_RATE_WINDOW', '3600'))

#################### Deployment ####################
PROXY_FIX_X_FOR = int(os.environ.get('PROXY_FIX_X_FOR', '0'))
"""
Number of trusted ``X-Forwarded-For`` hops.

Set to 1 when the service is only reachable through the gateway. Otherwise
every client appears to come from the gateway's address, and one client can
use up the login and registration limits of everyone. Leave at 0 only if
clients connect to the service directly, since a client can then forge the
header.
"""

MAX_CONTENT_LENGTH = int(os.environ.get('MAX_CONTENT_LENGTH',
                                        1024 * 1024))
"""Largest request body accepted, in bytes. Larger bodies get a 413."""

CORS_ORIGINS = os.environ.get('CORS_ORIGINS',
                              'http://localhost:3000,http://localhost:8080')
"""Comma-separated origins from which browsers may call the service."""
