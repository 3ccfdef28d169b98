# intake/credentials.py
import sqlite3, logging
from typing import Optional

import bcrypt

from intake.errors import PersistenceError, ValidationError
from intake.sqlite_utils import Database, StoreUnavailable

logger = logging.getLogger(__name__)

USERS_DDL = """
CREATE TABLE IF NOT EXISTS "users" (
    "id" INTEGER PRIMARY KEY AUTOINCREMENT,
    "username" TEXT NOT NULL UNIQUE,
    "password_hash" TEXT NOT NULL
);
"""


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


class CredentialStore:
    """Salted bcrypt hashes; passwords never reach the database in clear."""
    def __init__(self, database: Database):
        self.database = database
        self._dummy_hash: Optional[bytes] = None

    def ensure_table(self):
        self.database.execute_script(USERS_DDL)

    def _dummy(self) -> bytes:
        # checked against for unknown users so response time does not reveal them
        if self._dummy_hash is None:
            self._dummy_hash = bcrypt.hashpw(b"not-a-real-password", bcrypt.gensalt())
        return self._dummy_hash

    def create_user(self, username: str, password: str) -> int:
        username = (username or "").strip()
        if not username or not password:
            raise ValidationError("username and password are required")
        try:
            return self.database.insert("users", ("username", "password_hash"), (username, hash_password(password)), returning="id")
        except sqlite3.IntegrityError as exc:
            raise ValidationError(f"user {username} already exists") from exc
        except (sqlite3.Error, StoreUnavailable) as exc:
            raise PersistenceError("could not create user", table="users") from exc

    def verify_credentials(self, username: str, password: str) -> bool:
        username = (username or "").strip()
        password = password or ""
        try:
            row = self.database.fetch_one('SELECT "password_hash" FROM "users" WHERE "username" = ?', [username]) if username else None
        except (sqlite3.Error, StoreUnavailable) as exc:
            logger.error("credential lookup failed: %s", exc)
            raise PersistenceError("could not verify credentials", table="users") from exc
        if row is None:
            bcrypt.checkpw(password.encode("utf-8"), self._dummy())
            return False
        return bcrypt.checkpw(password.encode("utf-8"), row["password_hash"].encode("utf-8"))
