"""Tests for :mod:`user_service.services.users.lockout`."""

from unittest import TestCase, mock

from mimesis import Person

from freshbonds import domain
from freshbonds.auth import roles
from user_service.factory import create_web_app
from ... import users
from .. import accounts, lockout, util

NOW = 1_700_000_000
TWO_HOURS = 2 * 60 * 60


class TestLockout(TestCase):
    """Five consecutive failures lock an account for two hours."""

    def setUp(self):
        """Create an app with one admin."""
        self.app = create_web_app()
        self.context = self.app.app_context()
        self.context.push()
        self.email = Person().email(unique=True)
        self.user = users.register(
            domain.User(email=self.email, name='Admin User',
                        role=roles.ADMIN),
            'Password1'
        )

    def tearDown(self):
        """Discard the credential store."""
        users.drop_all()
        self.context.pop()

    def _fail(self, times: int = 1) -> None:
        for _ in range(times):
            with self.assertRaises(users.AuthenticationFailed):
                users.authenticate(self.email, 'WrongPass1')

    def _db_user(self):
        return accounts.get_db_user_by_id(self.user.user_id)

    @mock.patch(f'{util.__name__}.now')
    def test_lock_and_expire(self, mock_now):
        """The correct password fails while locked, and works afterwards."""
        mock_now.return_value = NOW
        self._fail(5)
        self.assertTrue(lockout.is_locked(self._db_user()))
        self.assertEqual(self._db_user().lock_until, NOW + TWO_HOURS)

        with self.assertRaises(users.AuthenticationFailed):
            users.authenticate(self.email, 'Password1')

        mock_now.return_value = NOW + TWO_HOURS + 1
        user = users.authenticate(self.email, 'Password1')
        self.assertEqual(user.user_id, self.user.user_id)
        self.assertEqual(self._db_user().login_attempts, 0)
        self.assertIsNone(self._db_user().lock_until)
        self.assertEqual(self._db_user().last_login, NOW + TWO_HOURS + 1)

    @mock.patch(f'{util.__name__}.now')
    def test_four_failures(self, mock_now):
        """Fewer failures than the threshold do not lock the account."""
        mock_now.return_value = NOW
        self._fail(4)
        self.assertFalse(lockout.is_locked(self._db_user()))
        self.assertEqual(self._db_user().login_attempts, 4)
        users.authenticate(self.email, 'Password1')
        self.assertEqual(self._db_user().login_attempts, 0,
                         "Success clears the counter")

    @mock.patch(f'{util.__name__}.now')
    def test_locked_attempts_do_not_extend_lock(self, mock_now):
        """Failures while locked are counted, but do not move the lock."""
        mock_now.return_value = NOW
        self._fail(5)
        mock_now.return_value = NOW + 60
        self._fail(3)
        self.assertEqual(self._db_user().login_attempts, 8)
        self.assertEqual(self._db_user().lock_until, NOW + TWO_HOURS)

    @mock.patch(f'{util.__name__}.now')
    def test_failure_after_expiry_restarts_count(self, mock_now):
        """The first failure after the lock has expired counts from 1."""
        mock_now.return_value = NOW
        self._fail(5)
        mock_now.return_value = NOW + TWO_HOURS + 1
        self._fail(1)
        self.assertEqual(self._db_user().login_attempts, 1)
        self.assertFalse(lockout.is_locked(self._db_user()))

    def test_configured_threshold(self):
        """The threshold and duration come from the app config."""
        self.app.config['LOCKOUT_THRESHOLD'] = 2
        self._fail(2)
        self.assertTrue(lockout.is_locked(self._db_user()))

    def test_unknown_email(self):
        """An unknown address fails like a wrong password."""
        with self.assertRaises(users.AuthenticationFailed) as ctx:
            users.authenticate('nobody@example.lk', 'Password1')
        self.assertEqual(str(ctx.exception), 'Invalid email or password')
