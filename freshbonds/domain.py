"""Defines user and session concepts shared by the Fresh Bonds services."""

import re
import uuid
import typing
from typing import Any, Optional, NamedTuple
from datetime import datetime, date

import dateutil.parser
from pytz import UTC

ID_PATTERN = re.compile(r'^[0-9a-f]{32}$')


def new_id() -> str:
    """Generate a new opaque identifier for a user or resource."""
    return uuid.uuid4().hex


def is_valid_id(value: Any) -> bool:
    """Check whether ``value`` is syntactically a Fresh Bonds identifier."""
    return isinstance(value, str) and bool(ID_PATTERN.match(value))


class UserProfile(NamedTuple):
    """Marketplace profile data for a user."""

    location: Optional[str] = None
    """Free-text location, e.g. a town and district."""

    farm_name: Optional[str] = None
    """Name of the farm. Required for farmers."""

    mobile: Optional[str] = None
    """
    Sri Lankan mobile or landline number, stored without separators.

    Required for farmers.
    """


class User(NamedTuple):
    """Represents a marketplace identity, without its credentials."""

    email: str
    """The user's e-mail address. Unique, stored lower-case."""

    name: str
    """Display name."""

    role: str
    """One of :data:`freshbonds.auth.roles.ALL`."""

    user_id: Optional[str] = None
    """Unique identifier for the user. If ``None``, the user does not exist."""

    profile: Optional[UserProfile] = None
    """The user's marketplace profile (if available)."""

    is_active: bool = True
    """Inactive users cannot log in."""

    last_login: Optional[datetime] = None
    """When the user last authenticated successfully."""

    created: Optional[datetime] = None
    """When the account was registered."""


class Session(NamedTuple):
    """An authenticated session, as carried by a bearer token."""

    user_id: str
    """Identifier of the authenticated :class:`.User`."""

    email: str
    """E-mail address of the user when the token was issued."""

    role: str
    """Role of the user when the token was issued."""

    start_time: datetime
    """When the token was issued."""

    end_time: datetime
    """When the token expires."""

    @property
    def expired(self) -> bool:
        """Expiry check, relative to the current time."""
        return datetime.now(tz=UTC) >= self.end_time

    @property
    def is_admin(self) -> bool:
        """Whether the session belongs to an administrator."""
        # Imported here to keep the domain free of auth dependencies.
        from .auth import roles
        return self.role == roles.ADMIN


def to_dict(obj: tuple) -> dict:
    """
    Generate a dict representation of a NamedTuple instance.

    This just uses the built-in ``_asdict`` method on the instance, but also
    calls this on any child NamedTuple instances (recursively) so that the
    entire tree is cast to ``dict``. Dates and datetimes are rendered as
    ISO-8601 strings.

    Parameters
    ----------
    obj : tuple
        A NamedTuple instance.

    Returns
    -------
    dict

    """
    if not hasattr(obj, '_asdict'):  # NamedTuple-generated classes have this.
        return {}
    data = obj._asdict()  # type: ignore

    def _cast(obj: Any) -> Any:
        if hasattr(obj, '_asdict'):
            obj = to_dict(obj)
        elif isinstance(obj, (datetime, date)):
            obj = obj.isoformat()
        elif isinstance(obj, list):
            obj = [_cast(o) for o in obj]
        return obj

    return {key: _cast(value) for key, value in data.items()}


def from_dict(cls: type, data: dict) -> Any:
    """
    Generate a NamedTuple instance from a dict, with recursion.

    This is the inverse of :func:`to_dict`. Fields typed with another
    NamedTuple are instantiated from their nested dicts, and ISO-8601 strings
    are parsed for ``datetime`` and ``date`` fields. Keys that are not fields
    of ``cls`` are ignored.

    Parameters
    ----------
    cls: type
        Any NamedTuple class.

    data: dict
        Data with which to instantiate ``cls`` and its children.

    Returns
    -------
    NamedTuple
        An instance of ``cls``.

    """
    hints = typing.get_type_hints(cls)
    kwargs = {}
    for field in cls._fields:  # type: ignore
        if field not in data:
            continue
        value = data[field]
        field_type = _unwrap_optional(hints.get(field))
        if value is None or field_type is None:
            kwargs[field] = value
        elif hasattr(field_type, '_fields') and isinstance(value, dict):
            kwargs[field] = from_dict(field_type, value)
        elif field_type is datetime and isinstance(value, str):
            kwargs[field] = dateutil.parser.parse(value)
        elif field_type is date and isinstance(value, str):
            kwargs[field] = date.fromisoformat(value)
        else:
            kwargs[field] = value
    return cls(**kwargs)


def _unwrap_optional(hint: Any) -> Any:
    """Get ``T`` from ``Optional[T]``; other hints are returned unchanged."""
    if typing.get_origin(hint) is typing.Union:
        args = [arg for arg in typing.get_args(hint) if arg is not type(None)]
        if len(args) == 1:
            return args[0]
    return hint
