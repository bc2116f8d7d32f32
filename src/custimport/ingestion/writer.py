"""Bulk writes of customer batches."""

import logging

from custimport.config import DEFAULT_TABLE
from custimport.db.service import DatabaseService
from custimport.errors import StorageError
from custimport.ingestion.records import Batch, WriteResult
from custimport.ingestion.schema import (
    CUSTOMER_COLUMNS,
    CUSTOMER_CONFLICT_COLUMNS,
    customer_table_ddl,
    customer_unique_index_ddl,
)

logger = logging.getLogger(__name__)


class BulkWriter:
    """Commit each batch with a single bulk insert in its own transaction.

    If the database rejects the batch, the transaction rolls back and none
    of its records are persisted. Writing the same batch twice inserts it
    twice unless upsert is enabled, in which case rows are matched on
    customer_id and updated.
    """

    def __init__(self, service: DatabaseService, table: str = DEFAULT_TABLE, upsert: bool = False):
        self._service = service
        self._table = table
        self._upsert = upsert

    @property
    def table(self) -> str:
        return self._table

    def ensure_schema(self) -> None:
        """Create the destination table (and the upsert key index) if missing."""
        ddl = customer_table_ddl(self._table)
        if self._upsert:
            ddl += customer_unique_index_ddl(self._table)
        try:
            self._service.execute_ddl(ddl)
        except self._service.driver_errors as e:
            raise StorageError(f"Cannot create table {self._table}: {e}") from e

    def write(self, batch: Batch) -> WriteResult:
        rows = [record.as_row() for record in batch]
        try:
            with self._service.transaction():
                if self._upsert:
                    self._service.upsert(
                        self._table, CUSTOMER_COLUMNS, rows, CUSTOMER_CONFLICT_COLUMNS
                    )
                else:
                    self._service.batch_insert(self._table, CUSTOMER_COLUMNS, rows)
        except (*self._service.driver_errors, ValueError, TypeError) as e:
            # Parameter binding errors (e.g. NUL characters on PostgreSQL) are not driver errors.
            raise StorageError(
                f"Bulk insert of {len(rows)} rows into {self._table} failed: {e}"
            ) from e
        logger.debug("Wrote %d rows to %s", len(rows), self._table)
        return WriteResult(rows_written=len(rows), table=self._table)
