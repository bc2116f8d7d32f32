"""PostgreSQL implementation of DatabaseService."""

from typing import ClassVar

import psycopg2
import psycopg2.extras

from custimport.db.service import DatabaseService
from custimport.db.types import Params, ParamsList, Row

# Rows per VALUES list sent by execute_values; one batch may span several pages.
INSERT_PAGE_SIZE = 1000


class PostgresDatabaseService(DatabaseService):
    """PostgreSQL backend using psycopg2.

    batch_insert sends multi-row INSERT ... VALUES statements through
    psycopg2.extras.execute_values instead of one statement per row.
    """

    placeholder: ClassVar[str] = "%s"
    driver_errors: ClassVar[tuple[type[BaseException], ...]] = (psycopg2.Error,)

    def __init__(self, dsn: str, pool_size: int = 4):
        super().__init__(pool_size)
        self._dsn = dsn

    def _open_connection(self):
        conn = psycopg2.connect(self._dsn)
        conn.autocommit = False
        return conn

    def execute(self, sql: str, params: Params | None = None) -> list[Row]:
        conn = self._get_conn()
        with conn.cursor(cursor_factory=psycopg2.extras.RealDictCursor) as cur:
            cur.execute(sql, params or ())
            if cur.description is None:
                return []
            return [dict(row) for row in cur.fetchall()]

    def execute_many(self, sql: str, params_list: ParamsList) -> None:
        conn = self._get_conn()
        with conn.cursor() as cur:
            cur.executemany(sql, params_list)

    def execute_ddl(self, sql: str) -> None:
        conn = self._acquire()
        try:
            with conn.cursor() as cur:
                for statement in sql.split(";"):
                    statement = statement.strip()
                    if statement:
                        cur.execute(statement)
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            self._release(conn)

    def batch_insert(self, table: str, columns: list[str], rows: list[tuple]) -> None:
        if not rows:
            return
        conn = self._get_conn()
        sql = f"INSERT INTO {table} ({', '.join(columns)}) VALUES %s"
        with conn.cursor() as cur:
            psycopg2.extras.execute_values(cur, sql, rows, page_size=INSERT_PAGE_SIZE)
