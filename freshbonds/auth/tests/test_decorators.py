"""Tests for :mod:`freshbonds.auth.decorators`."""

from unittest import TestCase, mock
from datetime import datetime, timedelta
from typing import NamedTuple

from pytz import UTC
from werkzeug.exceptions import Unauthorized, Forbidden, NotFound, BadRequest

from .. import decorators, roles
from ... import domain

REQUEST = f'{decorators.__name__}.request'
"""Patched with a plain mock, since there is no request context here."""


def make_session(role: str = roles.FARMER, user_id: str = None):
    """Generate a live session for ``role``."""
    start = datetime.now(tz=UTC)
    return domain.Session(user_id=user_id or domain.new_id(),
                          email='someone@example.lk', role=role,
                          start_time=start,
                          end_time=start + timedelta(hours=8))


class Thing(NamedTuple):
    """An owned resource."""

    farmer_id: str
    name: str = 'Thing'


class TestScoped(TestCase):
    """Tests for :func:`.decorators.scoped`."""

    @mock.patch(REQUEST, new_callable=mock.MagicMock)
    def test_no_session(self, mock_request):
        """No session is present on the request."""
        mock_request.auth = None
        mock_request.environ = {'session': None}

        @decorators.scoped()
        def protected():
            """A protected function."""

        with self.assertRaises(Unauthorized):
            protected()

    @mock.patch(REQUEST, new_callable=mock.MagicMock)
    def test_rejected_token(self, mock_request):
        """The middleware rejected the token on the request."""
        mock_request.auth = None
        mock_request.environ = {'session': Unauthorized('Invalid token')}

        @decorators.scoped()
        def protected():
            """A protected function."""

        with self.assertRaises(Unauthorized) as ctx:
            protected()
        self.assertEqual(ctx.exception.description, 'Invalid token')

    @mock.patch(REQUEST, new_callable=mock.MagicMock)
    def test_role_not_allowed(self, mock_request):
        """Session role is not one of the allowed roles."""
        mock_request.auth = make_session(roles.ADMIN)

        @decorators.scoped([roles.FARMER])
        def protected():
            """A protected function."""

        with self.assertRaises(Forbidden):
            protected()

    @mock.patch(REQUEST, new_callable=mock.MagicMock)
    def test_role_allowed(self, mock_request):
        """Session role is one of the allowed roles."""
        mock_request.auth = make_session(roles.FARMER)

        @decorators.scoped([roles.FARMER])
        def protected():
            """A protected function."""
            return 'ok'

        self.assertEqual(protected(), 'ok')

    @mock.patch(REQUEST, new_callable=mock.MagicMock)
    def test_authorizer_returns_false(self, mock_request):
        """The authorizer declines the request."""
        mock_request.auth = make_session(roles.FARMER)

        @decorators.scoped(authorizer=decorators.user_is_owner)
        def protected(farmer_id):
            """A protected function."""

        with self.assertRaises(Forbidden):
            protected(farmer_id=domain.new_id())

    @mock.patch(REQUEST, new_callable=mock.MagicMock)
    def test_authorizer_returns_true(self, mock_request):
        """The authorizer approves the request."""
        session = make_session(roles.FARMER)
        mock_request.auth = session
        mock_authorizer = mock.MagicMock(return_value=True)

        @decorators.scoped(authorizer=mock_authorizer)
        def protected(farmer_id):
            """A protected function."""
            return farmer_id

        self.assertEqual(protected(farmer_id=session.user_id),
                         session.user_id)
        mock_authorizer.assert_called_once_with(session,
                                                farmer_id=session.user_id)

    def test_user_is_owner(self):
        """Admins and the owner pass the owner check."""
        owner = make_session(roles.FARMER)
        self.assertTrue(decorators.user_is_owner(owner, owner.user_id))
        self.assertTrue(decorators.user_is_owner(make_session(roles.ADMIN),
                                                 owner.user_id))
        self.assertFalse(decorators.user_is_owner(make_session(roles.FARMER),
                                                  owner.user_id))


class TestOwned(TestCase):
    """Tests for :func:`.decorators.owned`."""

    def setUp(self):
        """Create a resource owned by a farmer."""
        self.owner = make_session(roles.FARMER)
        self.thing_id = domain.new_id()
        self.thing = Thing(farmer_id=self.owner.user_id)
        self.things = {self.thing_id: self.thing}

        @decorators.owned(self.things.get)
        def protected(product_id, resource):
            """A protected function."""
            return resource

        self.protected = protected

    @mock.patch(REQUEST, new_callable=mock.MagicMock)
    def test_owner(self, mock_request):
        """The owner gets the resource."""
        mock_request.auth = self.owner
        self.assertEqual(self.protected(product_id=self.thing_id), self.thing)

    @mock.patch(REQUEST, new_callable=mock.MagicMock)
    def test_admin(self, mock_request):
        """An administrator may act on any resource."""
        mock_request.auth = make_session(roles.ADMIN)
        self.assertEqual(self.protected(product_id=self.thing_id), self.thing)

    @mock.patch(REQUEST, new_callable=mock.MagicMock)
    def test_other_farmer(self, mock_request):
        """Another farmer is forbidden."""
        mock_request.auth = make_session(roles.FARMER)
        with self.assertRaises(Forbidden):
            self.protected(product_id=self.thing_id)

    @mock.patch(REQUEST, new_callable=mock.MagicMock)
    def test_missing_before_ownership(self, mock_request):
        """A missing resource is reported as missing, even to non-owners."""
        mock_request.auth = make_session(roles.FARMER)
        with self.assertRaises(NotFound):
            self.protected(product_id=domain.new_id())

    @mock.patch(REQUEST, new_callable=mock.MagicMock)
    def test_invalid_id(self, mock_request):
        """A malformed id is a bad request."""
        mock_request.auth = self.owner
        with self.assertRaises(BadRequest):
            self.protected(product_id='not-an-id')

    @mock.patch(REQUEST, new_callable=mock.MagicMock)
    def test_no_session(self, mock_request):
        """Without a session, nothing is loaded."""
        mock_request.auth = None
        loader = mock.MagicMock()

        @decorators.owned(loader)
        def protected(product_id, resource):
            """A protected function."""

        with self.assertRaises(Unauthorized):
            protected(product_id=self.thing_id)
        self.assertEqual(loader.call_count, 0)
