"""SQLite implementation of DatabaseService."""

import sqlite3
from typing import ClassVar

from custimport.db.service import DatabaseService
from custimport.db.types import Params, ParamsList, Row


class SQLiteDatabaseService(DatabaseService):
    """SQLite backend using stdlib sqlite3.

    Connections are opened with check_same_thread=False so the pool can
    hand them to whichever thread runs the transaction.
    """

    placeholder: ClassVar[str] = "?"
    driver_errors: ClassVar[tuple[type[BaseException], ...]] = (sqlite3.Error,)

    def __init__(self, db_path: str, pool_size: int = 4):
        super().__init__(pool_size)
        self._db_path = db_path

    def _open_connection(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path, check_same_thread=False)
        conn.execute("PRAGMA journal_mode=WAL")
        conn.execute("PRAGMA foreign_keys=ON")
        return conn

    def execute(self, sql: str, params: Params | None = None) -> list[Row]:
        conn = self._get_conn()
        cursor = conn.execute(sql, params or ())
        if cursor.description is None:
            return []
        columns = [desc[0] for desc in cursor.description]
        return [dict(zip(columns, row)) for row in cursor.fetchall()]

    def execute_many(self, sql: str, params_list: ParamsList) -> None:
        conn = self._get_conn()
        conn.executemany(sql, params_list)

    def execute_ddl(self, sql: str) -> None:
        conn = self._acquire()
        try:
            conn.executescript(sql)
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            self._release(conn)
