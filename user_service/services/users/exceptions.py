"""Exceptions."""


class AuthenticationFailed(RuntimeError):
    """Failed to authenticate user with provided credentials."""


class NoSuchUser(RuntimeError):
    """User does not exist."""


class PasswordAuthenticationFailed(RuntimeError):
    """Password is not correct."""


class UserExists(RuntimeError):
    """An identity with the same e-mail address already exists."""


class Unavailable(RuntimeError):
    """The credential store cannot be reached."""
