"""Streaming CSV import of customer records."""

from custimport.ingestion.batching import BatchAccumulator
from custimport.ingestion.pipeline import ImportPipeline, PipelineState, import_customers
from custimport.ingestion.reader import RecordReader, open_records
from custimport.ingestion.records import (
    Batch,
    CustomerRecord,
    ImportResult,
    ImportStatus,
    RawRow,
    RowFailure,
    WriteResult,
)
from custimport.ingestion.transform import parse_subscription_date, transform_row
from custimport.ingestion.writer import BulkWriter

__all__ = [
    "Batch",
    "BatchAccumulator",
    "BulkWriter",
    "CustomerRecord",
    "ImportPipeline",
    "ImportResult",
    "ImportStatus",
    "PipelineState",
    "RawRow",
    "RecordReader",
    "RowFailure",
    "WriteResult",
    "import_customers",
    "open_records",
    "parse_subscription_date",
    "transform_row",
]
