"""Abstract DatabaseService interface and shared pooling logic."""

import logging
import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from queue import Empty, Queue
from typing import Any, ClassVar, Iterator

from custimport.db.types import Params, ParamsList, Row

logger = logging.getLogger(__name__)

ACQUIRE_TIMEOUT = 30


class DatabaseService(ABC):
    """Database-agnostic interface used by the import pipeline.

    Connections live in a fixed-size pool (Queue). Each transaction()
    call takes a dedicated connection, binds it to the calling thread,
    and returns it to the pool on exit. Backends only supply how to open
    a connection and how to run statements on it.
    """

    #: Paramstyle placeholder used when building INSERT statements.
    placeholder: ClassVar[str] = "?"

    #: Exceptions raised by the underlying driver, for callers that translate them.
    driver_errors: ClassVar[tuple[type[BaseException], ...]] = ()

    def __init__(self, pool_size: int = 4):
        self._pool_size = pool_size
        self._pool: Queue = Queue(maxsize=pool_size)
        self._local = threading.local()

    @abstractmethod
    def _open_connection(self) -> Any:
        """Open one new driver connection."""

    def connect(self) -> None:
        """Fill the connection pool."""
        for _ in range(self._pool_size):
            self._pool.put(self._open_connection())
        logger.debug("%s: opened %d connections", type(self).__name__, self._pool_size)

    def close(self) -> None:
        """Close all pooled connections."""
        while not self._pool.empty():
            try:
                conn = self._pool.get_nowait()
                conn.close()
            except Empty:
                break

    def _acquire(self):
        return self._pool.get(timeout=ACQUIRE_TIMEOUT)

    def _release(self, conn) -> None:
        self._pool.put(conn)

    def _get_conn(self):
        conn = getattr(self._local, "conn", None)
        if conn is not None:
            return conn
        raise RuntimeError(
            "No active transaction. Wrap calls in a `with service.transaction():` block."
        )

    @contextmanager
    def transaction(self) -> Iterator[None]:
        """Acquire a connection, commit on success, roll back on error."""
        conn = self._acquire()
        self._local.conn = conn
        try:
            yield
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            self._local.conn = None
            self._release(conn)

    @abstractmethod
    def execute(self, sql: str, params: Params | None = None) -> list[Row]:
        """Execute a single SQL statement and return rows as dicts."""

    @abstractmethod
    def execute_many(self, sql: str, params_list: ParamsList) -> None:
        """Execute a SQL statement for each parameter set."""

    @abstractmethod
    def execute_ddl(self, sql: str) -> None:
        """Execute DDL statements (CREATE TABLE, CREATE INDEX, etc.) in their own commit."""

    def _insert_sql(self, table: str, columns: list[str]) -> str:
        cols = ", ".join(columns)
        placeholders = ", ".join(self.placeholder for _ in columns)
        return f"INSERT INTO {table} ({cols}) VALUES ({placeholders})"

    def batch_insert(self, table: str, columns: list[str], rows: list[tuple]) -> None:
        """Insert multiple rows into a table within the current transaction."""
        if not rows:
            return
        self.execute_many(self._insert_sql(table, columns), rows)

    def upsert(
        self,
        table: str,
        columns: list[str],
        rows: list[tuple],
        conflict_columns: list[str],
    ) -> None:
        """Insert rows, updating the non-key columns on conflict."""
        if not rows:
            return
        conflict_cols = ", ".join(conflict_columns)
        update_cols = [c for c in columns if c not in conflict_columns]
        if update_cols:
            update_clause = ", ".join(f"{c} = excluded.{c}" for c in update_cols)
            action = f"DO UPDATE SET {update_clause}"
        else:
            action = "DO NOTHING"
        sql = f"{self._insert_sql(table, columns)} ON CONFLICT ({conflict_cols}) {action}"
        self.execute_many(sql, rows)
