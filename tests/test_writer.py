"""Tests for BulkWriter against SQLite."""

from contextlib import contextmanager

import pytest

from conftest import customer_row
from custimport import StorageError
from custimport.ingestion import BulkWriter, ImportPipeline, ImportStatus, WriteResult, transform_row
from custimport.ingestion.schema import CSV_COLUMNS


def batch(start: int, n: int):
    return [transform_row(dict(zip(CSV_COLUMNS, customer_row(i)))) for i in range(start, start + n)]


def count(service, table="customers") -> int:
    with service.transaction():
        return service.execute(f"SELECT COUNT(*) AS cnt FROM {table}")[0]["cnt"]


class TestBulkWriter:
    def test_write_batch(self, db_service):
        writer = BulkWriter(db_service)
        writer.ensure_schema()
        result = writer.write(batch(0, 3))
        assert result == WriteResult(rows_written=3, table="customers")

        with db_service.transaction():
            rows = db_service.execute("SELECT * FROM customers ORDER BY customer_id")
        assert [r["customer_id"] for r in rows] == ["CUST000000", "CUST000001", "CUST000002"]
        assert rows[0]["subscription_date"] == "2023-12-25"
        assert rows[0]["company"] == "Acme, Inc."
        assert rows[0]["phone2"] == ""

    def test_custom_table(self, db_service):
        writer = BulkWriter(db_service, table="imported_customers")
        writer.ensure_schema()
        writer.write(batch(0, 2))
        assert count(db_service, "imported_customers") == 2

    def test_ensure_schema_is_repeatable(self, db_service):
        writer = BulkWriter(db_service)
        writer.ensure_schema()
        writer.ensure_schema()
        assert count(db_service) == 0

    def test_rewriting_batch_duplicates_rows(self, db_service):
        writer = BulkWriter(db_service)
        writer.ensure_schema()
        same = batch(0, 2)
        writer.write(same)
        writer.write(same)
        assert count(db_service) == 4

    def test_upsert_mode_does_not_duplicate(self, db_service):
        writer = BulkWriter(db_service, upsert=True)
        writer.ensure_schema()
        writer.write(batch(0, 2))
        writer.write(batch(0, 3))
        assert count(db_service) == 3

    def test_rejected_batch_raises_storage_error_and_persists_nothing(self, db_service):
        writer = BulkWriter(db_service)
        writer.ensure_schema()
        db_service.execute_ddl("CREATE UNIQUE INDEX uq_test ON customers(customer_id)")
        writer.write(batch(0, 1))

        with pytest.raises(StorageError, match="Bulk insert of 3 rows") as exc_info:
            writer.write(batch(1, 2) + batch(0, 1))
        assert exc_info.value.__cause__ is not None
        assert count(db_service) == 1

    def test_missing_table_raises_storage_error(self, db_service):
        writer = BulkWriter(db_service)
        with pytest.raises(StorageError):
            writer.write(batch(0, 1))

    def test_ensure_schema_failure_raises_storage_error(self, db_service):
        db_service.execute_ddl("CREATE VIEW customers AS SELECT 1 AS customer_id")
        with pytest.raises(StorageError, match="Cannot create table"):
            BulkWriter(db_service).ensure_schema()


class BindingFailureService:
    """Service whose bulk insert rejects a parameter, the way psycopg2 rejects NUL characters."""

    driver_errors = ()

    def __init__(self):
        self.rolled_back = False

    @contextmanager
    def transaction(self):
        try:
            yield
        except Exception:
            self.rolled_back = True
            raise

    def batch_insert(self, table, columns, rows):
        raise ValueError("A string literal cannot contain NUL (0x00) characters.")


class TestParameterErrors:
    def test_binding_error_raises_storage_error(self):
        service = BindingFailureService()
        writer = BulkWriter(service)

        with pytest.raises(StorageError, match="NUL") as exc_info:
            writer.write(batch(0, 2))
        assert isinstance(exc_info.value.__cause__, ValueError)
        assert service.rolled_back

    def test_binding_error_fails_import_with_result(self, write_csv):
        result = ImportPipeline(BulkWriter(BindingFailureService())).run(
            write_csv([customer_row(1)])
        )
        assert result.status is ImportStatus.FAILED
        assert isinstance(result.error, StorageError)
        assert result.rows_processed == 0
