"""
Per-client fixed-window rate limiting.

A :class:`RateLimiter` counts requests per key (usually a namespace and the
client address) in fixed windows. The first request for a key opens a window
that lasts ``window`` seconds. Within a live window at most ``max_requests``
requests are allowed; further requests are throttled, and are not counted.
Once the window has passed, the next request opens a new window with a count
of one.

Two backends are provided. :class:`InMemoryRateLimiter` keeps its windows in
process memory, and suits a single-process deployment or tests.
:class:`RedisRateLimiter` keeps them in redis, so that the limit holds across
processes and hosts. The backend is selected with ``RATE_LIMIT_BACKEND``
(``memory`` or ``redis``) by :func:`init_app`.

Routes are protected with :func:`rate_limited`:

.. code-block:: python

   @blueprint.route('/login', methods=['POST'])
   @rate_limited('login')
   def login() -> Response:
       ...

which reads ``LOGIN_RATE_LIMIT`` and ``LOGIN_RATE_WINDOW`` from the app
config.
"""

import logging
import math
import time
import threading
from functools import wraps
from typing import Any, Callable, Dict, NamedTuple, Optional, Tuple, Union

import redis
from flask import Flask, current_app, request
from werkzeug.exceptions import TooManyRequests, ServiceUnavailable

from .exceptions import RateLimiterUnavailable

logger = logging.getLogger(__name__)


class Allowed(NamedTuple):
    """The request may proceed."""

    remaining: int
    """Requests left in the current window."""


class Throttled(NamedTuple):
    """The request must be rejected."""

    retry_after: int
    """Seconds until the current window resets."""


Decision = Union[Allowed, Throttled]


class RateLimiter(object):
    """Base class for rate limiter backends."""

    def allow(self, key: str, max_requests: int, window: float) -> Decision:
        """
        Count a request for ``key``, and decide whether it may proceed.

        Parameters
        ----------
        key : str
            Identifies the client and the class of request.
        max_requests : int
            Requests allowed per window.
        window : float
            Window length, in seconds.

        Returns
        -------
        :class:`Allowed` or :class:`Throttled`

        """
        raise NotImplementedError('Implemented in a child class')


class InMemoryRateLimiter(RateLimiter):
    """
    Rate limiter that keeps windows in process memory.

    Windows are guarded by a lock, so that the limiter can be shared by the
    threads of a threaded WSGI server. Expired windows are evicted every
    ``sweep_interval`` seconds, so memory use is bounded by the number of
    clients seen in the longest window.
    """

    def __init__(self, clock: Callable[[], float] = time.time,
                 sweep_interval: float = 60.) -> None:
        self._clock = clock
        self._sweep_interval = sweep_interval
        self._windows: Dict[str, Tuple[int, float]] = {}
        self._lock = threading.Lock()
        self._last_sweep = clock()

    def allow(self, key: str, max_requests: int, window: float) -> Decision:
        """Count a request for ``key``, and decide whether it may proceed."""
        with self._lock:
            now = self._clock()
            if now - self._last_sweep >= self._sweep_interval:
                self._sweep(now)

            count, reset_time = self._windows.get(key, (0, 0.))
            if count == 0 or now > reset_time:
                self._windows[key] = (1, now + window)
                return Allowed(max_requests - 1)
            if count >= max_requests:
                return Throttled(max(1, math.ceil(reset_time - now)))
            self._windows[key] = (count + 1, reset_time)
            return Allowed(max_requests - count - 1)

    def _sweep(self, now: float) -> None:
        expired = [key for key, (_, reset_time) in self._windows.items()
                   if now > reset_time]
        for key in expired:
            del self._windows[key]
        self._last_sweep = now
        logger.debug('Evicted %i expired rate limit windows', len(expired))

    def __len__(self) -> int:
        return len(self._windows)


class RedisRateLimiter(RateLimiter):
    """
    Rate limiter that keeps windows in redis.

    Each window is a counter key that expires when the window ends. The
    read-and-update is done in an optimistic transaction (``WATCH``/``MULTI``)
    so that concurrent requests from many processes cannot push the count
    past the limit.
    """

    def __init__(self, connection: redis.Redis,
                 prefix: str = 'ratelimit:') -> None:
        self._redis = connection
        self._prefix = prefix

    def allow(self, key: str, max_requests: int, window: float) -> Decision:
        """Count a request for ``key``, and decide whether it may proceed."""
        name = f'{self._prefix}{key}'
        window_ms = int(window * 1000)

        def _count(pipe: redis.client.Pipeline) -> Decision:
            count = pipe.get(name)
            ttl = pipe.pttl(name)
            pipe.multi()
            if count is None or ttl <= 0:
                pipe.set(name, 1, px=window_ms)
                return Allowed(max_requests - 1)
            if int(count) >= max_requests:
                return Throttled(max(1, math.ceil(ttl / 1000)))
            pipe.incr(name)
            return Allowed(max_requests - int(count) - 1)

        try:
            decision: Decision = self._redis.transaction(
                _count, name, value_from_callable=True
            )
        except redis.exceptions.ConnectionError as e:
            raise RateLimiterUnavailable('Cannot reach redis') from e
        return decision


def init_app(app: Flask) -> None:
    """Create the rate limiter selected by the app config."""
    backend = app.config.get('RATE_LIMIT_BACKEND', 'memory')
    if backend == 'redis':
        params = dict(host=app.config.get('REDIS_HOST', 'localhost'),
                      port=int(app.config.get('REDIS_PORT', 6379)),
                      db=int(app.config.get('REDIS_DATABASE', 0)))
        if app.config.get('REDIS_FAKE'):
            import fakeredis
            connection = fakeredis.FakeStrictRedis(**params)
        else:
            connection = redis.StrictRedis(**params)
        limiter: RateLimiter = RedisRateLimiter(connection)
    elif backend == 'memory':
        limiter = InMemoryRateLimiter()
    else:
        raise ValueError(f'Unknown rate limit backend: {backend}')
    logger.debug('Using %s rate limiter', backend)
    app.extensions['rate_limiter'] = limiter


def get_limiter() -> RateLimiter:
    """Get the rate limiter for the current app."""
    limiter: RateLimiter = current_app.extensions['rate_limiter']
    return limiter


def rate_limited(namespace: str, max_requests: Optional[int] = None,
                 window: Optional[float] = None) -> Callable:
    """
    Generate a decorator that rate limits a route per client address.

    Parameters
    ----------
    namespace : str
        Each namespace counts requests separately, so that e.g. logins do not
        use up the allowance for registrations.
    max_requests : int
        Requests allowed per window. If not given, read from the app config as
        ``<NAMESPACE>_RATE_LIMIT``.
    window : float
        Length of the window in seconds. If not given, read from the app
        config as ``<NAMESPACE>_RATE_WINDOW``.

    Raises
    ------
    :class:`.TooManyRequests`
        With ``retry_after`` set to the seconds until the window resets.
    :class:`.ServiceUnavailable`
        If the rate limit store cannot be reached.

    """
    limit_key = f'{namespace.upper()}_RATE_LIMIT'
    window_key = f'{namespace.upper()}_RATE_WINDOW'

    def decorator(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            limit = max_requests or int(current_app.config[limit_key])
            length = window or float(current_app.config[window_key])
            key = f'{namespace}:{request.remote_addr}'
            try:
                decision = get_limiter().allow(key, limit, length)
            except RateLimiterUnavailable as e:
                logger.error('Rate limiter unavailable: %s', e)
                raise ServiceUnavailable('Service unavailable') from e
            if isinstance(decision, Throttled):
                logger.info('Rate limit exceeded for %s', key)
                raise TooManyRequests('Too many requests, try again later',
                                      retry_after=decision.retry_after)
            return func(*args, **kwargs)
        return wrapper
    return decorator
