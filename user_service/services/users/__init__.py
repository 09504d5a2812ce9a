"""
Credential store for marketplace identities.

Identities, their bcrypt password hashes and their lockout state are kept in
a SQL database via Flask-SQLAlchemy. Nothing outside this package sees a
password hash.
"""

from .accounts import register, email_exists, get_user_by_id, \
    update_profile, change_password
from .authenticate import authenticate
from .exceptions import AuthenticationFailed, NoSuchUser, \
    PasswordAuthenticationFailed, UserExists, Unavailable
from .util import init_app, create_all, drop_all, is_available, transaction
from . import lockout
