"""SQLAlchemy models for identities and their credentials."""

from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import Column, Integer, String, Boolean, Enum

from freshbonds.auth import roles

db: SQLAlchemy = SQLAlchemy()


class DBUser(db.Model):  # type: ignore
    """An identity, its credentials and its lockout state."""

    __tablename__ = 'users'

    user_id = Column(String(32), primary_key=True)
    name = Column(String(100), nullable=False)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(60), nullable=False)
    role = Column(Enum(*roles.ALL, name='user_role'), nullable=False,
                  default=roles.FARMER)
    location = Column(String(255))
    farm_name = Column(String(100))
    mobile = Column(String(20))
    is_active = Column(Boolean, nullable=False, default=True)

    last_login = Column(Integer)
    login_attempts = Column(Integer, nullable=False, default=0)
    lock_until = Column(Integer)
    """UNIX time until which the account is locked. NULL when not locked."""

    created = Column(Integer, nullable=False)
    updated = Column(Integer)
