"""Exception hierarchy for customer imports.

Row-level problems are ValidationErrors and are recoverable; source and
storage problems end the import.
"""


class CustomerImportError(Exception):
    """Base exception for all import failures."""


class ConfigError(CustomerImportError):
    """Raised for invalid import configuration."""


class SourceError(CustomerImportError):
    """Raised when the source file is missing, unreadable or has no header."""


class ValidationError(CustomerImportError):
    """Raised when a single row cannot be turned into a CustomerRecord."""

    def __init__(self, field: str, reason: str):
        super().__init__(f"{field}: {reason}")
        self.field = field
        self.reason = reason

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return (self.field, self.reason) == (other.field, other.reason)

    def __hash__(self) -> int:
        return hash((type(self), self.field, self.reason))


class MalformedRowError(ValidationError):
    """Raised when a row lacks one of the expected columns."""


class StorageError(CustomerImportError):
    """Raised when a batch cannot be written to the database."""


class ImportCancelled(CustomerImportError):
    """Raised when the caller cancels an import in progress."""
