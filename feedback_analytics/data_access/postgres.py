# feedback_analytics/data_access/postgres.py
"""
Shared PostgreSQL connection handling for the store clients.
"""

import psycopg2
from psycopg2.extras import RealDictCursor
from contextlib import contextmanager
import threading
import logging

from feedback_analytics.config.settings import Settings
from feedback_analytics.exceptions import ConfigurationError, StoreError


logger = logging.getLogger(__name__)


class PostgresClient:
    """Base client: lazy connection, dict cursors, psycopg2 errors surfaced as StoreError."""

    def __init__(self, config: Settings):
        self.config = config
        self.conn = None
        self._lock = threading.Lock()

    def connect(self) -> None:
        """Establish database connection."""
        if not self.config.is_store_configured:
            raise ConfigurationError("Feedback store credentials are not configured")
        try:
            self.conn = psycopg2.connect(
                host=self.config.postgres_host,
                port=self.config.postgres_port,
                database=self.config.postgres_database,
                user=self.config.postgres_username,
                password=self.config.postgres_password,
                sslmode=self.config.postgres_sslmode
            )
        except psycopg2.Error as e:
            raise StoreError(f"Could not connect to feedback store: {e}", operation="connect") from e

    def close(self) -> None:
        """Close database connection."""
        if self.conn:
            self.conn.close()
            self.conn = None

    def _discard_connection(self) -> None:
        """Drop a connection the server has closed so the next call reconnects."""
        try:
            self.conn.close()
        except psycopg2.Error as e:
            logger.debug(f"Ignoring error closing dead connection: {e}")
        self.conn = None

    @contextmanager
    def _cursor(self, operation: str, commit: bool = False):
        """Yield a RealDictCursor, committing afterwards when *commit* is set."""
        # dashboard fan-out may open the first cursor from several threads
        with self._lock:
            if self.conn is not None and self.conn.closed:
                logger.warning("Feedback store connection was closed, reconnecting")
                self._discard_connection()
            if not self.conn:
                self.connect()
        conn = self.conn
        try:
            with conn.cursor(cursor_factory=RealDictCursor) as cursor:
                yield cursor
            if commit:
                conn.commit()
        except psycopg2.Error as e:
            try:
                conn.rollback()
            except psycopg2.Error as rollback_error:
                logger.warning(f"Rollback after failed {operation} also failed: {rollback_error}")
            if conn.closed:
                with self._lock:
                    if self.conn is conn:
                        self._discard_connection()
            logger.error(f"Store {operation} failed: {e}")
            raise StoreError(str(e).strip() or f"{operation} failed", operation=operation) from e
