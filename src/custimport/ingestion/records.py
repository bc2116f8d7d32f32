"""Record types passed between the import stages."""

from dataclasses import astuple, dataclass, field
from enum import Enum

RawRow = dict[str, str]


@dataclass(frozen=True)
class CustomerRecord:
    """One validated customer row, shaped like the customers table."""

    customer_id: str
    first_name: str
    last_name: str
    company: str
    city: str
    country: str
    phone1: str
    phone2: str
    email: str
    subscription_date: str
    website: str

    def as_row(self) -> tuple:
        """Values in CUSTOMER_COLUMNS order, ready for batch_insert."""
        return astuple(self)


Batch = list[CustomerRecord]


@dataclass(frozen=True)
class RowFailure:
    """A source row that was skipped because it failed validation."""

    line_number: int
    field: str
    reason: str


@dataclass(frozen=True)
class WriteResult:
    rows_written: int
    table: str


class ImportStatus(str, Enum):
    PENDING = "pending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass
class ImportResult:
    """Outcome of one import run.

    rows_processed counts only records in batches that were committed.
    elapsed is wall-clock seconds from the start of reading.
    """

    status: ImportStatus = ImportStatus.PENDING
    rows_read: int = 0
    rows_processed: int = 0
    batches_written: int = 0
    elapsed: float = 0.0
    error: Exception | None = None
    failures: list[RowFailure] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.status is ImportStatus.SUCCEEDED

    @property
    def rows_skipped(self) -> int:
        return len(self.failures)
