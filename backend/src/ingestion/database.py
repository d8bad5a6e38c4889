"""
Database initialization and query execution for the Cirec search service.
"""

import sqlite3
import threading
from pathlib import Path
from typing import Any, Dict, List, Optional
import logging

logger = logging.getLogger(__name__)


class StoreExecutionError(Exception):
    """A statement failed inside the backing store."""

    def __init__(self, label: str, original: Exception):
        """
        Args:
            label: Short name of the statement that failed (e.g. "count")
            original: Exception raised by the sqlite3 driver
        """
        super().__init__(f"{label} statement failed: {original}")
        self.label = label
        self.original = original


class Database:
    """Manages the SQLite connection, schema and statement execution."""

    def __init__(self, db_path: str):
        """
        Initialize database handle.

        The connection is opened lazily on first use and shared by every
        caller of this handle; statements are serialized with a lock.

        Args:
            db_path: Path to the SQLite database file
        """
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self.connection: Optional[sqlite3.Connection] = None
        self.lock = threading.RLock()

    def connect(self) -> sqlite3.Connection:
        """
        Create and return a database connection.

        Returns:
            SQLite connection object
        """
        with self.lock:
            if self.connection is None:
                self.connection = sqlite3.connect(self.db_path, check_same_thread=False)
                self.connection.row_factory = sqlite3.Row
            return self.connection

    def initialize_schema(self):
        """Create all database tables, full-text index and triggers."""
        with self.lock:
            conn = self.connect()

            conn.executescript("""
                CREATE TABLE IF NOT EXISTS articles (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    title TEXT NOT NULL,
                    content TEXT NOT NULL DEFAULT '',
                    published_date DATETIME NOT NULL
                );

                CREATE VIRTUAL TABLE IF NOT EXISTS articles_fts USING fts5(
                    title,
                    content,
                    content='articles',
                    content_rowid='id',
                    tokenize='porter unicode61'
                );

                CREATE TRIGGER IF NOT EXISTS articles_ai AFTER INSERT ON articles BEGIN
                    INSERT INTO articles_fts(rowid, title, content)
                    VALUES (new.id, new.title, new.content);
                END;

                CREATE TRIGGER IF NOT EXISTS articles_ad AFTER DELETE ON articles BEGIN
                    INSERT INTO articles_fts(articles_fts, rowid, title, content)
                    VALUES ('delete', old.id, old.title, old.content);
                END;

                CREATE TRIGGER IF NOT EXISTS articles_au AFTER UPDATE ON articles BEGIN
                    INSERT INTO articles_fts(articles_fts, rowid, title, content)
                    VALUES ('delete', old.id, old.title, old.content);
                    INSERT INTO articles_fts(rowid, title, content)
                    VALUES (new.id, new.title, new.content);
                END;

                CREATE TABLE IF NOT EXISTS search_keywords (
                    id INTEGER PRIMARY KEY,
                    user_keyword TEXT NOT NULL,
                    suggested_keyword TEXT NOT NULL DEFAULT '',
                    display BOOLEAN NOT NULL DEFAULT 0
                );

                CREATE UNIQUE INDEX IF NOT EXISTS idx_search_keywords_user_keyword
                    ON search_keywords(user_keyword);
                CREATE INDEX IF NOT EXISTS idx_published_date ON articles(published_date);
            """)

            conn.commit()
            logger.info("Database schema initialized successfully")

    def execute_query(
        self,
        statement: str,
        params: Optional[Dict[str, Any]] = None,
        label: str = "query"
    ) -> List[sqlite3.Row]:
        """
        Run a read statement with bound named parameters.

        Args:
            statement: SQL text using :name placeholders
            params: Values for the placeholders
            label: Statement name used in logs and errors

        Returns:
            All rows produced by the statement

        Raises:
            StoreExecutionError: If the driver rejects or fails the statement
        """
        with self.lock:
            try:
                cursor = self.connect().execute(statement, params or {})
                return cursor.fetchall()
            except sqlite3.Error as e:
                logger.error(f"Error executing {label} statement: {e}")
                raise StoreExecutionError(label, e) from e

    def execute_write(
        self,
        statement: str,
        params: Optional[Dict[str, Any]] = None,
        label: str = "write"
    ) -> int:
        """
        Run a write statement and commit it.

        Returns:
            Number of rows affected

        Raises:
            StoreExecutionError: If the statement fails (the transaction is rolled back)
        """
        with self.lock:
            conn = self.connect()
            try:
                cursor = conn.execute(statement, params or {})
                conn.commit()
                return cursor.rowcount
            except sqlite3.Error as e:
                conn.rollback()
                logger.error(f"Error executing {label} statement: {e}")
                raise StoreExecutionError(label, e) from e

    def execute_insert(
        self,
        statement: str,
        params: Optional[Dict[str, Any]] = None,
        label: str = "insert"
    ) -> int:
        """Run an INSERT, commit it and return the new row id."""
        with self.lock:
            conn = self.connect()
            try:
                cursor = conn.execute(statement, params or {})
                conn.commit()
                return cursor.lastrowid
            except sqlite3.Error as e:
                conn.rollback()
                logger.error(f"Error executing {label} statement: {e}")
                raise StoreExecutionError(label, e) from e

    def list_tables(self) -> List[str]:
        """Names of the base tables in the store."""
        rows = self.execute_query(
            "SELECT name FROM sqlite_master WHERE type = 'table' AND name NOT LIKE 'sqlite_%' ORDER BY name",
            label="list_tables"
        )
        return [row['name'] for row in rows]

    def ping(self) -> bool:
        """Check that the store answers a trivial statement."""
        try:
            self.execute_query("SELECT 1", label="ping")
            return True
        except StoreExecutionError:
            return False

    def close(self):
        """Close database connection."""
        with self.lock:
            if self.connection:
                self.connection.close()
                self.connection = None

    def __enter__(self):
        """Context manager entry."""
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()


def init_database(db_path: str) -> Database:
    """
    Initialize database with schema.

    Args:
        db_path: Path to SQLite database file

    Returns:
        Database instance
    """
    db = Database(db_path)
    db.initialize_schema()
    return db
