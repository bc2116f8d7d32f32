"""Import pipeline: read -> transform -> batch -> write.

A run makes one forward pass over the source. Invalid rows are skipped
and reported (or abort the run in strict mode); a failed batch write
ends the run, leaving earlier batches committed since each batch is
its own transaction.
"""

import logging
import threading
import time
from contextlib import closing
from enum import Enum
from queue import Full, Queue
from typing import Iterator, Protocol

from custimport.config import ImportConfig
from custimport.db.service import DatabaseService
from custimport.errors import CustomerImportError, ImportCancelled, ValidationError
from custimport.ingestion.batching import BatchAccumulator
from custimport.ingestion.reader import RecordReader, Source
from custimport.ingestion.records import (
    Batch,
    CustomerRecord,
    ImportResult,
    ImportStatus,
    RowFailure,
    WriteResult,
)
from custimport.ingestion.transform import transform_row
from custimport.ingestion.writer import BulkWriter

logger = logging.getLogger(__name__)

# (line_number, record or the error that rejected the row)
Outcome = tuple[int, CustomerRecord | ValidationError]

_END = object()
_PUT_POLL_SECONDS = 0.1


class PipelineState(str, Enum):
    IDLE = "idle"
    READING = "reading"
    TRANSFORMING = "transforming"
    ACCUMULATING = "accumulating"
    WRITING = "writing"
    FINALIZING = "finalizing"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class BatchWriter(Protocol):
    def write(self, batch: Batch) -> WriteResult: ...


class ImportPipeline:
    """Run customer imports against a BatchWriter.

    With config.queue_size > 0, reading and transforming happen in a
    producer thread that feeds a bounded queue; batching and writing stay
    in the calling thread, so writes are never concurrent and batches
    keep file order.
    """

    def __init__(self, writer: BatchWriter, config: ImportConfig | None = None):
        self._writer = writer
        self._config = config or ImportConfig()
        self._state = PipelineState.IDLE

    @property
    def state(self) -> PipelineState:
        return self._state

    def run(self, source: Source, cancel: threading.Event | None = None) -> ImportResult:
        """Import one source and return the outcome; import errors are returned, not raised."""
        result = ImportResult()
        accumulator = BatchAccumulator(self._config.batch_size)
        self._state = PipelineState.READING
        started = time.perf_counter()
        try:
            reader = RecordReader(
                source, delimiter=self._config.delimiter, encoding=self._config.encoding
            )
            with reader, closing(self._outcomes(reader, cancel)) as outcomes:
                self._consume(outcomes, accumulator, result, cancel)
                batch = accumulator.flush()
                if batch:
                    self._write(batch, result)
            self._state = PipelineState.FINALIZING
            result.status = ImportStatus.SUCCEEDED
        except CustomerImportError as e:
            result.error = e
        except Exception as e:
            # Unexpected errors still propagate, after the run is recorded as failed.
            result.error = e
            raise
        finally:
            result.elapsed = time.perf_counter() - started
            if not result.succeeded:
                dropped = accumulator.clear()
                if dropped:
                    logger.warning("Discarding %d buffered rows that were not written", dropped)
                result.status = ImportStatus.FAILED
            self._state = (
                PipelineState.SUCCEEDED if result.succeeded else PipelineState.FAILED
            )
            _log_completion(source, result)
        return result

    def _consume(
        self,
        outcomes: Iterator[Outcome],
        accumulator: BatchAccumulator,
        result: ImportResult,
        cancel: threading.Event | None,
    ) -> None:
        for line_number, outcome in outcomes:
            _check_cancelled(cancel)
            self._state = PipelineState.TRANSFORMING
            result.rows_read += 1
            if isinstance(outcome, ValidationError):
                result.failures.append(RowFailure(line_number, outcome.field, outcome.reason))
                logger.warning("Skipping row %d: %s", line_number, outcome)
                if self._config.strict:
                    raise outcome
                continue

            self._state = PipelineState.ACCUMULATING
            batch = accumulator.push(outcome)
            if batch is not None:
                self._write(batch, result)

    def _write(self, batch: Batch, result: ImportResult) -> None:
        self._state = PipelineState.WRITING
        written = self._writer.write(batch)
        result.rows_processed += written.rows_written
        result.batches_written += 1
        logger.info(
            "Batch %d: wrote %d rows (total: %d)",
            result.batches_written,
            written.rows_written,
            result.rows_processed,
        )

    def _outcomes(self, reader: RecordReader, cancel: threading.Event | None) -> Iterator[Outcome]:
        if self._config.queue_size > 0:
            return _threaded(_transformed(reader, cancel), self._config.queue_size)
        return _transformed(reader, cancel)


def _transformed(reader: RecordReader, cancel: threading.Event | None) -> Iterator[Outcome]:
    for line_number, raw in reader:
        _check_cancelled(cancel)
        try:
            yield line_number, transform_row(raw)
        except ValidationError as e:
            yield line_number, e


def _threaded(outcomes: Iterator[Outcome], queue_size: int) -> Iterator[Outcome]:
    """Move production of outcomes to a thread, bounded by a queue of queue_size."""
    channel: Queue = Queue(maxsize=queue_size)
    stop = threading.Event()

    def put(item) -> bool:
        # Block while the queue is full, but give up once the consumer has stopped.
        while not stop.is_set():
            try:
                channel.put(item, timeout=_PUT_POLL_SECONDS)
                return True
            except Full:
                continue
        return False

    def produce() -> None:
        try:
            for outcome in outcomes:
                if not put(outcome):
                    return
            put(_END)
        except Exception as e:
            put(e)

    producer = threading.Thread(target=produce, name="customer-import-producer", daemon=True)
    producer.start()
    try:
        while True:
            item = channel.get()
            if item is _END:
                return
            if isinstance(item, Exception):
                raise item
            yield item
    finally:
        stop.set()
        producer.join()


def _check_cancelled(cancel: threading.Event | None) -> None:
    if cancel is not None and cancel.is_set():
        raise ImportCancelled("Import cancelled by caller")


def _log_completion(source: Source, result: ImportResult) -> None:
    name = getattr(source, "name", source)
    level = logging.INFO if result.succeeded else logging.ERROR
    logger.log(
        level,
        "Import of %s %s: %d rows written in %d batches, %d skipped, %.3fs elapsed%s",
        name,
        result.status.value,
        result.rows_processed,
        result.batches_written,
        result.rows_skipped,
        result.elapsed,
        f" ({type(result.error).__name__}: {result.error})" if result.error else "",
        extra={
            "import_status": result.status.value,
            "rows_processed": result.rows_processed,
            "batches_written": result.batches_written,
            "rows_skipped": result.rows_skipped,
            "elapsed": result.elapsed,
        },
    )


def import_customers(
    service: DatabaseService,
    source: Source,
    config: ImportConfig | None = None,
    cancel: threading.Event | None = None,
) -> ImportResult:
    """Create the customers table if needed and import source into it.

    Raises StorageError if the table cannot be created; every other
    failure is reported through the returned ImportResult.
    """
    config = config or ImportConfig()
    writer = BulkWriter(service, table=config.table, upsert=config.upsert)
    writer.ensure_schema()
    return ImportPipeline(writer, config).run(source, cancel=cancel)
