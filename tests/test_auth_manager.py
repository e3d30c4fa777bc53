import os
import sqlite3
import stat
import tempfile
import unittest
from datetime import datetime, timedelta, timezone

from auth_manager import AuthManager, MAX_LOGIN_ATTEMPTS


class TestAuthManager(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.mkdtemp(prefix="olasplay-auth-")
        self.auth = AuthManager(
            db_path=os.path.join(self.tmp, "auth.db"),
            secret_key_path=os.path.join(self.tmp, ".secret_key"),
        )

    def test_first_time_setup_flow(self):
        self.assertTrue(self.auth.is_first_time_setup())
        self.assertTrue(self.auth.get_auth_status()['setup_required'])

        self.auth.create_user('admin', 'supersecret', role='admin')
        self.assertFalse(self.auth.is_first_time_setup())
        status = self.auth.get_auth_status()
        self.assertEqual(status['users'], 1)
        self.assertFalse(status['setup_required'])

    def test_secret_key_file_is_private_and_reused(self):
        key_path = os.path.join(self.tmp, ".secret_key")
        self.assertEqual(stat.S_IMODE(os.stat(key_path).st_mode), 0o600)

        again = AuthManager(db_path=os.path.join(self.tmp, "auth.db"), secret_key_path=key_path)
        self.assertEqual(again.secret_key, self.auth.secret_key)

    def test_create_user_validation(self):
        with self.assertRaises(ValueError):
            self.auth.create_user('editor', 'short', role='editor')
        with self.assertRaises(ValueError):
            self.auth.create_user('editor', 'longenough', role='owner')
        self.auth.create_user('editor', 'longenough', role='editor')
        with self.assertRaises(ValueError):
            self.auth.create_user('editor', 'longenough', role='editor')

    def test_verify_password_returns_role(self):
        self.auth.create_user('ada', 'password123', role='editor')
        self.assertEqual(self.auth.verify_password('ada', 'password123'), 'editor')
        self.assertIsNone(self.auth.verify_password('ada', 'wrong-password'))
        self.assertIsNone(self.auth.verify_password('nobody', 'password123'))

    def test_lockout_after_failed_attempts(self):
        self.auth.create_user('ada', 'password123', role='editor')
        for _ in range(MAX_LOGIN_ATTEMPTS - 1):
            self.assertIsNone(self.auth.verify_password('ada', 'nope-nope'))
        with self.assertRaises(ValueError):
            self.auth.verify_password('ada', 'nope-nope')
        # Even the right password is refused while locked
        with self.assertRaises(ValueError):
            self.auth.verify_password('ada', 'password123')

    def test_lock_timestamps_with_and_without_offset(self):
        self.auth.create_user('ada', 'password123', role='editor')

        def lock_until(value):
            with sqlite3.connect(self.auth.db_path) as conn:
                conn.execute("UPDATE admin_users SET locked_until = ? WHERE username = 'ada'", (value,))

        # Naive values left by older rows are read as UTC
        lock_until((datetime.now(timezone.utc) - timedelta(minutes=1)).replace(tzinfo=None).isoformat())
        self.assertEqual(self.auth.verify_password('ada', 'password123'), 'editor')

        lock_until((datetime.now(timezone.utc) + timedelta(minutes=5)).isoformat())
        with self.assertRaises(ValueError):
            self.auth.verify_password('ada', 'password123')

    def test_last_login_is_utc(self):
        self.auth.create_user('ada', 'password123', role='editor')
        self.auth.verify_password('ada', 'password123')
        last_login = self.auth.get_auth_status()['last_login']
        self.assertEqual(datetime.fromisoformat(last_login).utcoffset(), timedelta(0))

    def test_set_password_clears_lockout(self):
        self.auth.create_user('ada', 'password123', role='editor')
        for _ in range(MAX_LOGIN_ATTEMPTS - 1):
            self.auth.verify_password('ada', 'nope-nope')
        with self.assertRaises(ValueError):
            self.auth.verify_password('ada', 'nope-nope')

        self.assertTrue(self.auth.set_password('ada', 'brandnewpass'))
        self.assertEqual(self.auth.verify_password('ada', 'brandnewpass'), 'editor')

    def test_token_round_trip(self):
        token = self.auth.generate_token('ada', 'editor')
        self.assertEqual(self.auth.decode_token(token), {'username': 'ada', 'role': 'editor'})
        self.assertIsNone(self.auth.decode_token('not-a-token'))
        self.assertIsNone(self.auth.decode_token(self.auth.generate_token('ada', 'editor', expires_hours=-1)))

    def test_cannot_delete_last_admin(self):
        self.auth.create_user('root', 'password123', role='admin')
        self.auth.create_user('ada', 'password123', role='editor')
        with self.assertRaises(ValueError):
            self.auth.delete_user('root')
        self.assertTrue(self.auth.delete_user('ada'))
        self.assertFalse(self.auth.delete_user('ada'))
        self.assertEqual([u['username'] for u in self.auth.list_users()], ['root'])


if __name__ == '__main__':
    unittest.main()
