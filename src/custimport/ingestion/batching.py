"""Fixed-size batching of transformed records."""

from custimport.config import DEFAULT_BATCH_SIZE
from custimport.ingestion.records import Batch, CustomerRecord


class BatchAccumulator:
    """Buffer records and hand them out in batches of batch_size.

    Every batch but the last is exactly batch_size long; flush() returns
    the remainder. Records come out in the order they were pushed.
    """

    def __init__(self, batch_size: int = DEFAULT_BATCH_SIZE):
        if batch_size < 1:
            raise ValueError(f"batch_size must be positive, got {batch_size}")
        self._batch_size = batch_size
        self._buffer: Batch = []

    @property
    def batch_size(self) -> int:
        return self._batch_size

    @property
    def pending(self) -> int:
        return len(self._buffer)

    def push(self, record: CustomerRecord) -> Batch | None:
        self._buffer.append(record)
        if len(self._buffer) >= self._batch_size:
            return self._take()
        return None

    def flush(self) -> Batch | None:
        if not self._buffer:
            return None
        return self._take()

    def clear(self) -> int:
        """Drop buffered records without returning them; returns how many were dropped."""
        dropped = len(self._buffer)
        self._buffer = []
        return dropped

    def _take(self) -> Batch:
        batch, self._buffer = self._buffer, []
        return batch
