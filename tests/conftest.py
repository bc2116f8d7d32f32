"""Shared test fixtures."""

import csv
from pathlib import Path

import pytest

from custimport import create_service
from custimport.ingestion.schema import CSV_COLUMNS


def customer_row(i: int, subscription_date: str = "25-12-2023") -> list[str]:
    """A valid CSV data row for customer number i."""
    return [
        f"CUST{i:06d}",
        f"First{i}",
        f"Last{i}",
        "Acme, Inc.",
        "Springfield",
        "Chile",
        "229.077.5154",
        "",
        f"customer{i}@example.com",
        subscription_date,
        "https://example.com",
    ]


@pytest.fixture
def db_service(tmp_path):
    """Provide a fresh SQLite DatabaseService for each test."""
    db_path = tmp_path / "test.db"
    service = create_service(f"sqlite:///{db_path}")
    service.connect()
    yield service
    service.close()


@pytest.fixture
def write_csv(tmp_path):
    """Write rows under the customer header (or a custom one) and return the path."""

    def _write(rows: list[list[str]], header: list[str] | None = None, name: str = "customers.csv") -> Path:
        csv_file = tmp_path / name
        with open(csv_file, "w", newline="", encoding="utf-8") as f:
            writer = csv.writer(f)
            writer.writerow(CSV_COLUMNS if header is None else header)
            writer.writerows(rows)
        return csv_file

    return _write
