"""Turn raw CSV rows into validated CustomerRecords."""

from datetime import datetime

from custimport.errors import MalformedRowError, ValidationError
from custimport.ingestion.records import CustomerRecord, RawRow
from custimport.ingestion.schema import (
    CSV_FIELD_MAP,
    SOURCE_DATE_FORMAT,
    STORAGE_DATE_FORMAT,
    SUBSCRIPTION_DATE_COLUMN,
)


def parse_subscription_date(value: str) -> str:
    """Convert DD-MM-YYYY to YYYY-MM-DD."""
    try:
        parsed = datetime.strptime(value, SOURCE_DATE_FORMAT)
    except ValueError:
        raise ValidationError(
            SUBSCRIPTION_DATE_COLUMN, f"{value!r} is not a valid DD-MM-YYYY date"
        ) from None
    return parsed.strftime(STORAGE_DATE_FORMAT)


def transform_row(raw: RawRow) -> CustomerRecord:
    """Map a RawRow onto the customers table.

    Only the subscription date is checked and reformatted; every other
    value is copied as-is, empty strings included.
    """
    values = {}
    for csv_column, field_name in CSV_FIELD_MAP.items():
        if csv_column not in raw:
            raise MalformedRowError(csv_column, "column is missing from the row")
        values[field_name] = raw[csv_column]

    values["subscription_date"] = parse_subscription_date(values["subscription_date"])
    return CustomerRecord(**values)
