"""Core database connection with serialized, transactional access."""

from __future__ import annotations

import logging
import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Generator, Optional

from tin.db.schema import COLUMN_MIGRATIONS, SCHEMA_DDL
from tin.errors import DatabaseError, InternalError, LedgerError

logger = logging.getLogger(__name__)

MEMORY_PATH = ":memory:"


class Database:
    """
    Process-wide handle to the single SQLite store.

    One connection, one lock. ``read()`` and ``write()`` both hand out the
    connection to exactly one caller at a time; ``write()`` additionally wraps
    the borrow in a transaction that commits on success and rolls back on
    any exception.

    An unexpected (non-ledger) exception escaping a borrow poisons the
    handle: every later borrow fails with :class:`InternalError`.
    """

    def __init__(self, path: Optional[Path | str] = None):
        from tin.config import get_db_path
        if path is None:
            self.path: Path | str = get_db_path()
        elif str(path) == MEMORY_PATH:
            self.path = MEMORY_PATH
        else:
            self.path = Path(path)
        self._conn: Optional[sqlite3.Connection] = None
        self._lock = threading.Lock()
        self._poisoned = False

    @classmethod
    def in_memory(cls) -> "Database":
        db = cls(MEMORY_PATH)
        db.init()
        return db

    # -- connection lifecycle --------------------------------------------------

    @property
    def is_memory(self) -> bool:
        return self.path == MEMORY_PATH

    def _ensure_dir(self) -> None:
        if not self.is_memory:
            Path(self.path).parent.mkdir(parents=True, exist_ok=True)

    def _connect(self) -> sqlite3.Connection:
        self._ensure_dir()
        # isolation_level=None: transactions are opened explicitly in write()
        conn = sqlite3.connect(str(self.path), check_same_thread=False, isolation_level=None)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        if not self.is_memory:
            conn.execute("PRAGMA journal_mode = WAL")
        return conn

    def init(self) -> None:
        """Open the connection and create all tables. Fails if already initialized."""
        with self._lock:
            if self._conn is not None:
                raise InternalError("Database already initialized")
            conn = None
            try:
                conn = self._connect()
                conn.executescript(SCHEMA_DDL)
                self._migrate(conn)
            except sqlite3.Error as exc:
                if conn is not None:
                    conn.close()
                raise DatabaseError(exc) from exc
            self._conn = conn
        logger.info(f"Database initialized at {self.path}")

    @staticmethod
    def _migrate(conn: sqlite3.Connection) -> None:
        for table, column, decl in COLUMN_MIGRATIONS:
            existing = {row["name"] for row in conn.execute(f"PRAGMA table_info({table})")}
            if column not in existing:
                conn.execute(f"ALTER TABLE {table} ADD COLUMN {column} {decl}")
                logger.info(f"Added column {table}.{column}")

    def close(self) -> None:
        with self._lock:
            if self._conn:
                self._conn.close()
                self._conn = None

    # -- scoped borrows --------------------------------------------------------

    def _acquire(self) -> sqlite3.Connection:
        if self._poisoned:
            raise InternalError("Database lock poisoned")
        if self._conn is None:
            raise InternalError("Database not initialized")
        return self._conn

    def _fail(self, exc: BaseException) -> None:
        """Classify an exception escaping a borrow, poisoning on unexpected ones."""
        if isinstance(exc, LedgerError):
            raise exc
        if isinstance(exc, sqlite3.Error):
            raise DatabaseError(exc) from exc
        self._poisoned = True
        logger.error("Unexpected failure while holding the database lock; handle poisoned")
        raise exc

    @contextmanager
    def read(self) -> Generator[sqlite3.Connection, None, None]:
        """Scoped read-only borrow of the connection."""
        with self._lock:
            conn = self._acquire()
            try:
                yield conn
            except BaseException as exc:
                self._fail(exc)

    @contextmanager
    def write(self) -> Generator[sqlite3.Connection, None, None]:
        """Scoped read-write borrow: commits on success, rolls back on exception."""
        with self._lock:
            conn = self._acquire()
            try:
                conn.execute("BEGIN IMMEDIATE")
                yield conn
                conn.execute("COMMIT")
            except BaseException as exc:
                if conn.in_transaction:
                    conn.execute("ROLLBACK")
                self._fail(exc)
