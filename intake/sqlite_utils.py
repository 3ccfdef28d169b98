# intake/sqlite_utils.py
import sqlite3, re, queue, threading, logging
from contextlib import contextmanager
from typing import Any, Dict, List, Optional, Sequence

logger = logging.getLogger(__name__)

_RE_IDENT = re.compile(r'^[A-Za-z_][A-Za-z0-9_]*$')


class StoreUnavailable(Exception):
    """No pooled connection became free within the pool timeout."""


def quote_ident(name: str) -> str:
    # identifiers only ever come from the registry, reject anything odd anyway
    if not _RE_IDENT.match(name or ""):
        raise ValueError(f"unsafe SQL identifier: {name!r}")
    return f'"{name}"'


def build_insert(table: str, columns: Sequence[str], returning: Optional[str] = None) -> str:
    col_clause = ", ".join(quote_ident(c) for c in columns)
    placeholders = ", ".join(["?"] * len(columns))
    sql = f"INSERT INTO {quote_ident(table)} ({col_clause}) VALUES ({placeholders})"
    if returning:
        sql += f" RETURNING {quote_ident(returning)}"
    return sql


def _casefold(value):
    return value.casefold() if isinstance(value, str) else value


class Database:
    """
    Process-wide SQLite handle with a bounded pool of connections.

    connection() is the only way to touch the database: it blocks until a
    slot is free (up to timeout), commits on success, rolls back on error and
    always returns the connection to the pool.
    """
    def __init__(self, db_path: str, pool_size: int = 5, timeout: float = 30.0):
        self.db_path = db_path
        self.pool_size = pool_size
        self.timeout = timeout
        self._slots = threading.BoundedSemaphore(pool_size)
        self._idle: "queue.LifoQueue[sqlite3.Connection]" = queue.LifoQueue()
        self._all: List[sqlite3.Connection] = []
        self._lock = threading.Lock()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path, timeout=self.timeout, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        # built-in lower() and LIKE only fold ASCII
        conn.create_function("casefold", 1, _casefold, deterministic=True)
        if self.db_path != ":memory:":
            conn.execute("PRAGMA journal_mode=WAL")
        with self._lock:
            self._all.append(conn)
        return conn

    @contextmanager
    def connection(self):
        if not self._slots.acquire(timeout=self.timeout):
            raise StoreUnavailable(f"no database connection free after {self.timeout}s")
        conn = None
        try:
            try:
                conn = self._idle.get_nowait()
            except queue.Empty:
                conn = self._connect()
            try:
                yield conn
                conn.commit()
            except BaseException:
                conn.rollback()
                raise
        finally:
            if conn is not None:
                self._idle.put(conn)
            self._slots.release()

    def execute_script(self, ddl: str):
        with self.connection() as conn:
            conn.executescript(ddl)

    def insert(self, table: str, columns: Sequence[str], values: Sequence[Any], returning: Optional[str] = None):
        """Insert one row; returns the generated id when returning names the id column."""
        if len(columns) != len(values):
            raise ValueError(f"{table}: {len(values)} values for {len(columns)} columns")
        sql = build_insert(table, columns, returning)
        with self.connection() as conn:
            cur = conn.execute(sql, list(values))
            row = cur.fetchone() if returning else None
            cur.close()
        return row[0] if row is not None else None

    def fetch_all(self, sql: str, params: Sequence[Any] = ()) -> List[Dict[str, Any]]:
        with self.connection() as conn:
            rows = conn.execute(sql, list(params)).fetchall()
        return [dict(r) for r in rows]

    def fetch_one(self, sql: str, params: Sequence[Any] = ()) -> Optional[Dict[str, Any]]:
        with self.connection() as conn:
            row = conn.execute(sql, list(params)).fetchone()
        return dict(row) if row is not None else None

    def close(self):
        with self._lock:
            conns, self._all = self._all, []
        for conn in conns:
            try:
                conn.close()
            except sqlite3.Error:
                logger.warning("failed to close sqlite connection", exc_info=True)
        while True:
            try:
                self._idle.get_nowait()
            except queue.Empty:
                break
