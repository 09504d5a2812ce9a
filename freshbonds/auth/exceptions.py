"""Exceptions raised by the auth core."""


class InvalidToken(ValueError):
    """Token is malformed, has a bad signature, or lacks required claims."""


class ExpiredToken(ValueError):
    """Token signature is valid, but the token has expired."""


class ConfigurationError(RuntimeError):
    """The auth core is not configured correctly."""


class RateLimiterUnavailable(RuntimeError):
    """The shared rate-limit store cannot be reached."""
