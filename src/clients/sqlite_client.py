import sqlite3
import threading
from sqlite3 import Connection


class SqliteClient:
    """SQLite database client with connection management.

    The connection is shared between the worker threads FastAPI runs sync
    endpoints on, so every statement goes through a single lock.
    """

    def __init__(self, connection_string: str):
        self.connection_string = connection_string
        self._connection = sqlite3.connect(self.connection_string, check_same_thread=False)
        self._lock = threading.Lock()

    @property
    def connection(self) -> Connection:
        """Get the database connection."""
        return self._connection

    def execute_query(self, query: str, params=None):
        """Execute a query and return all results."""
        with self._lock:
            cursor = self._connection.cursor()
            try:
                if params:
                    cursor.execute(query, params)
                else:
                    cursor.execute(query)

                # Commit for write operations (INSERT, UPDATE, DELETE)
                if query.strip().upper().startswith(("INSERT", "UPDATE", "DELETE")):
                    self._connection.commit()

                return cursor.fetchall()
            finally:
                cursor.close()

    def execute_write(self, query: str, params=None) -> tuple[int, int]:
        """Execute a write statement and return ``(lastrowid, rowcount)``."""
        with self._lock:
            cursor = self._connection.cursor()
            try:
                cursor.execute(query, params or ())
                self._connection.commit()
                return cursor.lastrowid, cursor.rowcount
            except sqlite3.Error:
                self._connection.rollback()
                raise
            finally:
                cursor.close()

    def close(self):
        """Close the database connection."""
        self._connection.close()

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit with cleanup."""
        self.close()
        return False
