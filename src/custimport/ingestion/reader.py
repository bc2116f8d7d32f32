"""Streaming CSV reader for customer files."""

import csv
import logging
from pathlib import Path
from typing import Iterator, TextIO

from custimport.errors import SourceError
from custimport.ingestion.records import RawRow
from custimport.ingestion.schema import CSV_COLUMNS

logger = logging.getLogger(__name__)

Source = str | Path | TextIO


class RecordReader:
    """Lazily read a header-delimited CSV file as (line_number, RawRow) pairs.

    Never loads the full file into memory. The header is parsed on open(),
    so an unreadable file or a missing header fails before any row is
    produced. Rows can be iterated once only.

    A source given as an open text handle is read but never closed here.
    """

    def __init__(self, source: Source, delimiter: str = ",", encoding: str = "utf-8-sig"):
        self._source = source
        self._delimiter = delimiter
        self._encoding = encoding
        self._handle: TextIO | None = None
        self._owns_handle = False
        self._reader = None
        self._consumed = False
        self.header: list[str] = []

    @property
    def missing_columns(self) -> list[str]:
        return [col for col in CSV_COLUMNS if col not in self.header]

    def open(self) -> "RecordReader":
        if isinstance(self._source, (str, Path)):
            try:
                self._handle = open(self._source, newline="", encoding=self._encoding)
            except OSError as e:
                raise SourceError(f"Cannot open source {self._source}: {e}") from e
            self._owns_handle = True
        else:
            self._handle = self._source

        self._reader = csv.reader(self._handle, delimiter=self._delimiter)
        try:
            header = next(self._reader)
        except StopIteration:
            self.close()
            raise SourceError(f"Source {self._name} has no header row") from None
        except (csv.Error, UnicodeDecodeError, OSError) as e:
            self.close()
            raise SourceError(f"Cannot read header of {self._name}: {e}") from e

        # Handle a BOM left over when the handle was opened without utf-8-sig
        if header and header[0].startswith("\ufeff"):
            header[0] = header[0][1:]
        if not any(cell.strip() for cell in header):
            self.close()
            raise SourceError(f"Source {self._name} has a blank header row")

        self.header = header
        if self.missing_columns:
            logger.warning(
                "Source %s is missing columns %s; affected rows will be skipped",
                self._name,
                self.missing_columns,
            )
        return self

    def close(self) -> None:
        if self._owns_handle and self._handle is not None:
            self._handle.close()
        self._handle = None
        self._owns_handle = False

    def __enter__(self) -> "RecordReader":
        if self._handle is None:
            self.open()
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def __iter__(self) -> Iterator[tuple[int, RawRow]]:
        if self._reader is None:
            raise RuntimeError("RecordReader is not open")
        if self._consumed:
            raise RuntimeError("RecordReader rows can only be iterated once")
        self._consumed = True
        return self._rows()

    def _rows(self) -> Iterator[tuple[int, RawRow]]:
        header = self.header
        reader = self._reader
        while True:
            try:
                values = next(reader)
            except StopIteration:
                return
            except (csv.Error, UnicodeDecodeError, OSError) as e:
                raise SourceError(
                    f"Cannot read {self._name} near line {reader.line_num}: {e}"
                ) from e

            if not values:
                continue
            # Short rows keep only the columns that are present; extra fields are dropped.
            yield reader.line_num, dict(zip(header, values))

    @property
    def _name(self) -> str:
        return str(getattr(self._source, "name", self._source))


def open_records(source: Source, delimiter: str = ",", encoding: str = "utf-8-sig") -> RecordReader:
    """Open a source and return a reader positioned after the header row."""
    return RecordReader(source, delimiter=delimiter, encoding=encoding).open()
