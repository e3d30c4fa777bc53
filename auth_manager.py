import hashlib
import secrets
import jwt
from datetime import datetime, timedelta, timezone
from typing import Optional, List, Dict
import sqlite3
from pathlib import Path

import config

ROLES = ('admin', 'editor')
MAX_LOGIN_ATTEMPTS = 5
LOCKOUT_MINUTES = 15


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class AuthManager:
    def __init__(self, db_path: str = None, secret_key_path: str = None):
        self.db_path = db_path or config.DB_PATH
        self.secret_key_path = Path(secret_key_path or config.SECRET_KEY_PATH)
        Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        self.secret_key = self._get_or_create_secret_key()
        self._init_auth_table()

    def _get_or_create_secret_key(self) -> str:
        """Get or create a secret key for JWT signing"""
        secret_file = self.secret_key_path
        secret_file.parent.mkdir(parents=True, exist_ok=True)

        if secret_file.exists():
            return secret_file.read_text().strip()
        else:
            secret_key = secrets.token_urlsafe(32)
            secret_file.write_text(secret_key)
            # Make file readable only by owner
            secret_file.chmod(0o600)
            return secret_key

    def _init_auth_table(self):
        """Initialize the admin users table in the database"""
        with sqlite3.connect(self.db_path) as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS admin_users (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    username TEXT UNIQUE NOT NULL,
                    password_hash TEXT NOT NULL,
                    salt TEXT NOT NULL,
                    role TEXT NOT NULL DEFAULT 'editor',
                    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                    last_login TIMESTAMP,
                    login_attempts INTEGER DEFAULT 0,
                    locked_until TIMESTAMP
                )
            """)
            conn.commit()

    def _hash_password(self, password: str, salt: str = None) -> tuple[str, str]:
        """Hash a password with salt using PBKDF2"""
        if salt is None:
            salt = secrets.token_hex(16)

        # PBKDF2 with SHA-256, 100,000 iterations
        password_hash = hashlib.pbkdf2_hmac(
            'sha256',
            password.encode('utf-8'),
            salt.encode('utf-8'),
            100000
        )
        return password_hash.hex(), salt

    def is_first_time_setup(self) -> bool:
        """Check if this is the first time setup (no admin user yet)"""
        with sqlite3.connect(self.db_path) as conn:
            cursor = conn.execute("SELECT COUNT(*) FROM admin_users")
            return cursor.fetchone()[0] == 0

    def create_user(self, username: str, password: str, role: str = 'editor') -> bool:
        """Create an admin-panel user"""
        username = (username or '').strip()
        if not username:
            raise ValueError("Username is required")
        if len(password) < 8:
            raise ValueError("Password must be at least 8 characters long")
        if role not in ROLES:
            raise ValueError(f"Invalid role '{role}'. Must be one of: {', '.join(ROLES)}")

        password_hash, salt = self._hash_password(password)

        try:
            with sqlite3.connect(self.db_path) as conn:
                conn.execute("""
                    INSERT INTO admin_users (username, password_hash, salt, role, created_at)
                    VALUES (?, ?, ?, ?, ?)
                """, (username, password_hash, salt, role, _utc_now().isoformat()))
                conn.commit()
        except sqlite3.IntegrityError:
            raise ValueError(f"User '{username}' already exists")

        return True

    def set_password(self, username: str, password: str) -> bool:
        """Change a user's password and clear any lockout"""
        if len(password) < 8:
            raise ValueError("Password must be at least 8 characters long")

        password_hash, salt = self._hash_password(password)
        with sqlite3.connect(self.db_path) as conn:
            cursor = conn.execute("""
                UPDATE admin_users
                SET password_hash = ?, salt = ?, login_attempts = 0, locked_until = NULL
                WHERE username = ?
            """, (password_hash, salt, username))
            conn.commit()
            return cursor.rowcount > 0

    def delete_user(self, username: str) -> bool:
        """Delete a user; the last remaining admin can't be removed"""
        with sqlite3.connect(self.db_path) as conn:
            row = conn.execute(
                "SELECT role FROM admin_users WHERE username = ?", (username,)
            ).fetchone()
            if not row:
                return False

            if row[0] == 'admin':
                admins = conn.execute(
                    "SELECT COUNT(*) FROM admin_users WHERE role = 'admin'"
                ).fetchone()[0]
                if admins <= 1:
                    raise ValueError("Cannot delete the last admin user")

            conn.execute("DELETE FROM admin_users WHERE username = ?", (username,))
            conn.commit()
            return True

    def list_users(self) -> List[Dict]:
        with sqlite3.connect(self.db_path) as conn:
            conn.row_factory = sqlite3.Row
            cursor = conn.execute("""
                SELECT username, role, created_at, last_login
                FROM admin_users
                ORDER BY created_at, id
            """)
            return [dict(row) for row in cursor.fetchall()]

    def verify_password(self, username: str, password: str) -> Optional[str]:
        """
        Verify a user's password.

        Returns:
            The user's role on success, None on a wrong password or unknown user.

        Raises:
            ValueError when the account is locked.
        """
        with sqlite3.connect(self.db_path) as conn:
            cursor = conn.execute("""
                SELECT password_hash, salt, role, login_attempts, locked_until
                FROM admin_users
                WHERE username = ?
            """, (username,))
            result = cursor.fetchone()

            if not result:
                return None

            stored_hash, salt, role, login_attempts, locked_until = result

            # Check if account is locked
            if locked_until:
                locked_until_dt = datetime.fromisoformat(str(locked_until))
                if locked_until_dt.tzinfo is None:
                    # Rows written before timestamps carried an offset
                    locked_until_dt = locked_until_dt.replace(tzinfo=timezone.utc)
                if _utc_now() < locked_until_dt:
                    raise ValueError("Account is temporarily locked due to too many failed attempts")

            password_hash, _ = self._hash_password(password, salt)

            if secrets.compare_digest(password_hash, stored_hash):
                conn.execute("""
                    UPDATE admin_users
                    SET login_attempts = 0, last_login = ?, locked_until = NULL
                    WHERE username = ?
                """, (_utc_now().isoformat(), username))
                conn.commit()
                return role

            new_attempts = (login_attempts or 0) + 1
            locked_until = None

            # Lock account after too many failed attempts
            if new_attempts >= MAX_LOGIN_ATTEMPTS:
                locked_until = (_utc_now() + timedelta(minutes=LOCKOUT_MINUTES)).isoformat()

            conn.execute("""
                UPDATE admin_users
                SET login_attempts = ?, locked_until = ?
                WHERE username = ?
            """, (new_attempts, locked_until, username))
            conn.commit()

            if locked_until:
                raise ValueError(f"Too many failed attempts. Account locked for {LOCKOUT_MINUTES} minutes.")

            return None

    def generate_token(self, username: str, role: str, expires_hours: int = 24) -> str:
        """Generate a JWT token for admin-panel authentication"""
        payload = {
            'sub': username,
            'role': role,
            'exp': _utc_now() + timedelta(hours=expires_hours),
            'iat': _utc_now()
        }
        return jwt.encode(payload, self.secret_key, algorithm='HS256')

    def decode_token(self, token: str) -> Optional[Dict]:
        """Decode a JWT token, returning {'username', 'role'} or None when invalid"""
        try:
            payload = jwt.decode(token, self.secret_key, algorithms=['HS256'])
        except jwt.ExpiredSignatureError:
            return None
        except jwt.InvalidTokenError:
            return None

        if payload.get('role') not in ROLES:
            return None
        return {'username': payload.get('sub'), 'role': payload['role']}

    def get_auth_status(self) -> dict:
        """Get authentication status information"""
        with sqlite3.connect(self.db_path) as conn:
            count = conn.execute("SELECT COUNT(*) FROM admin_users").fetchone()[0]
            last_login = conn.execute(
                "SELECT MAX(last_login) FROM admin_users"
            ).fetchone()[0]

        return {
            "setup_required": count == 0,
            "users": count,
            "last_login": last_login
        }
