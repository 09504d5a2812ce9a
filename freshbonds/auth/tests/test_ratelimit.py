"""Tests for :mod:`freshbonds.auth.ratelimit`."""

import threading
from unittest import TestCase, mock
from http import HTTPStatus

import fakeredis
import redis
from flask import Flask, jsonify

from .. import ratelimit
from ... import web


class FakeClock(object):
    """A clock that only moves when told to."""

    def __init__(self, now: float = 1_000_000.) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class TestInMemoryRateLimiter(TestCase):
    """Tests for :class:`.ratelimit.InMemoryRateLimiter`."""

    def setUp(self):
        """Create a limiter with a controllable clock."""
        self.clock = FakeClock()
        self.limiter = ratelimit.InMemoryRateLimiter(clock=self.clock)

    def test_limit(self):
        """The (N+1)-th request within a window is throttled."""
        for i in range(10):
            decision = self.limiter.allow('login:1.2.3.4', 10, 900)
            self.assertIsInstance(decision, ratelimit.Allowed)
            self.assertEqual(decision.remaining, 9 - i)
        decision = self.limiter.allow('login:1.2.3.4', 10, 900)
        self.assertIsInstance(decision, ratelimit.Throttled)
        self.assertGreater(decision.retry_after, 0)
        self.assertLessEqual(decision.retry_after, 900)

    def test_retry_after_counts_down(self):
        """Retry-after is the time left in the window."""
        for _ in range(5):
            self.limiter.allow('register:1.2.3.4', 5, 900)
        self.clock.advance(600)
        decision = self.limiter.allow('register:1.2.3.4', 5, 900)
        self.assertEqual(decision, ratelimit.Throttled(300))

    def test_window_resets(self):
        """A new window starts once the old one has passed."""
        for _ in range(6):
            self.limiter.allow('login:1.2.3.4', 5, 900)
        self.clock.advance(901)
        decision = self.limiter.allow('login:1.2.3.4', 5, 900)
        self.assertEqual(decision, ratelimit.Allowed(4))

    def test_keys_are_independent(self):
        """Clients and namespaces are counted separately."""
        for _ in range(5):
            self.limiter.allow('login:1.2.3.4', 5, 900)
        self.assertIsInstance(self.limiter.allow('login:5.6.7.8', 5, 900),
                              ratelimit.Allowed)
        self.assertIsInstance(self.limiter.allow('register:1.2.3.4', 5, 900),
                              ratelimit.Allowed)
        self.assertIsInstance(self.limiter.allow('login:1.2.3.4', 5, 900),
                              ratelimit.Throttled)

    def test_sweep(self):
        """Expired windows are evicted."""
        for i in range(20):
            self.limiter.allow(f'login:10.0.0.{i}', 5, 30)
        self.assertEqual(len(self.limiter), 20)
        self.clock.advance(61)
        self.limiter.allow('login:1.2.3.4', 5, 30)
        self.assertEqual(len(self.limiter), 1)

    def test_concurrent_requests(self):
        """Concurrent requests never exceed the limit."""
        limiter = ratelimit.InMemoryRateLimiter()
        results = []

        def hit():
            results.append(limiter.allow('login:1.2.3.4', 10, 900))

        threads = [threading.Thread(target=hit) for _ in range(50)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()
        allowed = [r for r in results if isinstance(r, ratelimit.Allowed)]
        self.assertEqual(len(allowed), 10)


class TestRedisRateLimiter(TestCase):
    """Tests for :class:`.ratelimit.RedisRateLimiter`."""

    def setUp(self):
        """Create a limiter backed by fake redis."""
        self.connection = fakeredis.FakeStrictRedis()
        self.limiter = ratelimit.RedisRateLimiter(self.connection)

    def test_limit(self):
        """The (N+1)-th request within a window is throttled."""
        for _ in range(5):
            self.assertIsInstance(self.limiter.allow('register:1.2.3.4', 5, 900),
                                  ratelimit.Allowed)
        decision = self.limiter.allow('register:1.2.3.4', 5, 900)
        self.assertIsInstance(decision, ratelimit.Throttled)
        self.assertLessEqual(decision.retry_after, 900)
        self.assertEqual(int(self.connection.get('ratelimit:register:1.2.3.4')),
                         5, "Throttled requests are not counted")

    def test_window_expires(self):
        """The counter expires with the window."""
        self.limiter.allow('login:1.2.3.4', 5, 900)
        ttl = self.connection.pttl('ratelimit:login:1.2.3.4')
        self.assertGreater(ttl, 0)
        self.assertLessEqual(ttl, 900_000)
        self.connection.delete('ratelimit:login:1.2.3.4')
        self.assertEqual(self.limiter.allow('login:1.2.3.4', 5, 900),
                         ratelimit.Allowed(4))

    def test_unavailable(self):
        """A connection failure is reported as such."""
        connection = mock.MagicMock()
        connection.transaction.side_effect = redis.exceptions.ConnectionError
        limiter = ratelimit.RedisRateLimiter(connection)
        with self.assertRaises(ratelimit.RateLimiterUnavailable):
            limiter.allow('login:1.2.3.4', 5, 900)


class TestRateLimitedRoute(TestCase):
    """Tests for :func:`.ratelimit.rate_limited`."""

    def setUp(self):
        """Create an app with a rate limited route."""
        self.app = Flask('test_ratelimit')
        self.app.config.update(LOGIN_RATE_LIMIT=2, LOGIN_RATE_WINDOW=60)
        ratelimit.init_app(self.app)
        web.init_app(self.app)

        @self.app.route('/login', methods=['POST'])
        @ratelimit.rate_limited('login')
        def login():
            return jsonify(ok=True)

        self.client = self.app.test_client()

    def _post(self, address='1.2.3.4'):
        return self.client.post('/login',
                                environ_base={'REMOTE_ADDR': address})

    def test_throttled(self):
        """The third request is throttled, with a retry-after value."""
        self.assertEqual(self._post().status_code, HTTPStatus.OK)
        self.assertEqual(self._post().status_code, HTTPStatus.OK)
        response = self._post()
        self.assertEqual(response.status_code, HTTPStatus.TOO_MANY_REQUESTS)
        retry_after = response.get_json()['retry_after']
        self.assertGreater(retry_after, 0)
        self.assertLessEqual(retry_after, 60)
        self.assertEqual(response.headers['Retry-After'], str(retry_after))

    def test_other_client(self):
        """Another client is not affected."""
        for _ in range(3):
            self._post()
        self.assertEqual(self._post('5.6.7.8').status_code, HTTPStatus.OK)

    def test_redis_backend(self):
        """The redis backend is selected by config."""
        app = Flask('test_ratelimit_redis')
        app.config.update(RATE_LIMIT_BACKEND='redis', REDIS_FAKE=True)
        ratelimit.init_app(app)
        self.assertIsInstance(app.extensions['rate_limiter'],
                              ratelimit.RedisRateLimiter)

    def test_unknown_backend(self):
        """An unknown backend is a configuration error."""
        app = Flask('test_ratelimit_bad')
        app.config['RATE_LIMIT_BACKEND'] = 'carrier-pigeon'
        with self.assertRaises(ValueError):
            ratelimit.init_app(app)

    def test_explicit_limits(self):
        """Limits given to the decorator take precedence over config."""
        @self.app.route('/signup', methods=['POST'])
        @ratelimit.rate_limited('register', max_requests=1, window=30)
        def signup():
            return jsonify(ok=True)

        first = self.client.post('/signup')
        second = self.client.post('/signup')
        self.assertEqual(first.status_code, HTTPStatus.OK)
        self.assertEqual(second.status_code, HTTPStatus.TOO_MANY_REQUESTS)
        self.assertLessEqual(second.get_json()['retry_after'], 30)
