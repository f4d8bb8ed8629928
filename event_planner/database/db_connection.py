"""
PostgreSQL connection helper.
Provides the Database handle that owns the process-wide connection pool.
"""

import logging
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

import psycopg2
from psycopg2.extras import DictCursor
from psycopg2.pool import ThreadedConnectionPool

from event_planner.errors import InfrastructureError

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).with_name("schema.sql")


class Database:
    """
    Single long-lived handle to PostgreSQL.

    Acquired once at process start with open() and released once at shutdown
    with close(). The underlying ThreadedConnectionPool is safe to share
    between concurrent requests; only the stores touch it.

    Usage:
        db = Database(dsn)
        db.open()
        with db.connection() as conn:
            with conn.cursor() as cur:
                cur.execute(...)
        db.close()
    """

    def __init__(self, dsn: Optional[str], min_conn: int = 1, max_conn: int = 10):
        self.dsn = dsn
        self.min_conn = min_conn
        self.max_conn = max_conn
        self._pool: Optional[ThreadedConnectionPool] = None
        self._lock = threading.Lock()
        self._slots = threading.BoundedSemaphore(max_conn)

    @property
    def is_open(self) -> bool:
        return self._pool is not None and not self._pool.closed

    def open(self) -> None:
        """
        Create the connection pool and make sure the tables exist.

        Raises:
            InfrastructureError: DATABASE_URL is unset or the server is unreachable.
        """
        with self._lock:
            if self.is_open:
                return
            if not self.dsn:
                raise InfrastructureError("Database unavailable", details="DATABASE_URL is not set")
            try:
                pool = ThreadedConnectionPool(
                    self.min_conn, self.max_conn, self.dsn, cursor_factory=DictCursor
                )
            except psycopg2.Error as e:
                raise InfrastructureError("Database unavailable", details=type(e).__name__) from e

            try:
                self._apply_schema(pool)
            except psycopg2.Error as e:
                pool.closeall()
                raise InfrastructureError("Database unavailable", details=type(e).__name__) from e

            self._pool = pool
            logger.info(f"Database pool opened ({self.min_conn}-{self.max_conn} connections)")

    def close(self) -> None:
        with self._lock:
            if self._pool is not None and not self._pool.closed:
                self._pool.closeall()
                logger.info("Database pool closed")
            self._pool = None

    @contextmanager
    def connection(self) -> Iterator["psycopg2.extensions.connection"]:
        """
        Borrow a pooled connection for one unit of work.

        Commits when the block exits cleanly, rolls back otherwise, and always
        hands the connection back to the pool. When all max_conn connections
        are in use the caller waits for one to be returned.
        """
        if not self.is_open:
            self.open()

        # getconn() raises PoolError instead of blocking once the pool is exhausted
        self._slots.acquire()
        try:
            conn = self._pool.getconn()
            try:
                yield conn
                conn.commit()
            except Exception:
                conn.rollback()
                raise
            finally:
                self._pool.putconn(conn)
        finally:
            self._slots.release()

    @staticmethod
    def _apply_schema(pool: ThreadedConnectionPool) -> None:
        conn = pool.getconn()
        try:
            with conn.cursor() as cur:
                cur.execute(SCHEMA_PATH.read_text())
            conn.commit()
        finally:
            pool.putconn(conn)
