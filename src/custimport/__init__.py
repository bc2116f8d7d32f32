"""Customer CSV import: batched, streaming CSV-to-database loading."""

from custimport.config import ImportConfig
from custimport.db import DatabaseService, create_service
from custimport.errors import (
    ConfigError,
    CustomerImportError,
    ImportCancelled,
    MalformedRowError,
    SourceError,
    StorageError,
    ValidationError,
)
from custimport.ingestion import ImportResult, ImportStatus, import_customers

__all__ = [
    "ConfigError",
    "CustomerImportError",
    "DatabaseService",
    "ImportCancelled",
    "ImportConfig",
    "ImportResult",
    "ImportStatus",
    "MalformedRowError",
    "SourceError",
    "StorageError",
    "ValidationError",
    "create_service",
    "import_customers",
]
