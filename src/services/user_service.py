"""Account registration and login."""

import logging
import sqlite3
from typing import Optional

from passlib.context import CryptContext

from ..clients import SqliteClient
from ..models import User

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

CREATE_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS accounts (
    user_id INTEGER PRIMARY KEY AUTOINCREMENT,
    username TEXT NOT NULL UNIQUE,
    email TEXT NOT NULL UNIQUE,
    hash_password TEXT NOT NULL
)
"""


class UserRegistrationError(Exception):
    """Raised when an account cannot be registered."""

    pass


class AuthenticationError(Exception):
    """Raised when login credentials are not valid."""

    pass


def hash_password(password: str) -> str:
    "Hashes a plain text password"
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    "Verifies a plain text password against a hashed password"
    return pwd_context.verify(plain_password, hashed_password)


class UserService:
    """Service for the accounts table."""

    def __init__(self, sqlite_client: SqliteClient):
        self._sqlite_client = sqlite_client
        self._sqlite_client.execute_query(CREATE_TABLE_SQL)

    def register_user(self, username: str, email: str, password: str) -> User:
        "Registers a new user into the accounts table and returns it"
        if not username or not email or not password:
            raise UserRegistrationError("Username, email and password are required.")

        hashed_pwd = hash_password(password)

        try:
            user_id, _ = self._sqlite_client.execute_write(
                """
                INSERT INTO accounts (username, email, hash_password)
                VALUES (?, ?, ?)
                """,
                (username, email, hashed_pwd),
            )
        except sqlite3.IntegrityError as e:
            raise UserRegistrationError(f"Error registering user: {e}") from e

        logger.info(f"Registered user {user_id} ({username})")
        return User(id=user_id, username=username, email=email, password_hash=hashed_pwd)

    def authenticate(self, username: str, password: str) -> User:
        "Verifies user credentials for login"
        result = self._sqlite_client.execute_query(
            "SELECT user_id, username, email, hash_password FROM accounts WHERE username = ?",
            (username,),
        )

        if not result:
            raise AuthenticationError("Username not found.")

        user = User(*result[0])

        if not verify_password(password, user.password_hash):
            raise AuthenticationError("Password is incorrect.")

        return user

    def get_user(self, user_id: int) -> Optional[User]:
        result = self._sqlite_client.execute_query(
            "SELECT user_id, username, email, hash_password FROM accounts WHERE user_id = ?",
            (user_id,),
        )
        if not result:
            return None
        return User(*result[0])
