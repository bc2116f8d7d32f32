"""Tests for BatchAccumulator."""

import pytest

from conftest import customer_row
from custimport.ingestion import BatchAccumulator, transform_row
from custimport.ingestion.schema import CSV_COLUMNS


def records(n: int):
    return [transform_row(dict(zip(CSV_COLUMNS, customer_row(i)))) for i in range(n)]


def drain(accumulator: BatchAccumulator, items) -> list[list]:
    batches = []
    for item in items:
        batch = accumulator.push(item)
        if batch is not None:
            batches.append(batch)
    final = accumulator.flush()
    if final is not None:
        batches.append(final)
    return batches


class TestBatchAccumulator:
    def test_default_batch_size(self):
        assert BatchAccumulator().batch_size == 5000

    @pytest.mark.parametrize("size", [0, -1])
    def test_rejects_non_positive_size(self, size):
        with pytest.raises(ValueError):
            BatchAccumulator(size)

    def test_push_returns_batch_when_full(self):
        acc = BatchAccumulator(2)
        first, second, third = records(3)
        assert acc.push(first) is None
        assert acc.push(second) == [first, second]
        assert acc.pending == 0
        assert acc.push(third) is None
        assert acc.pending == 1

    def test_flush_empty(self):
        assert BatchAccumulator(3).flush() is None

    def test_flush_resets(self):
        acc = BatchAccumulator(3)
        rec = records(1)[0]
        acc.push(rec)
        assert acc.flush() == [rec]
        assert acc.flush() is None

    @pytest.mark.parametrize("total, size", [(0, 3), (1, 3), (3, 3), (10, 3), (7, 1), (5, 100)])
    def test_no_loss_no_duplication(self, total, size):
        items = records(total)
        batches = drain(BatchAccumulator(size), items)
        assert [rec for batch in batches for rec in batch] == items
        assert all(len(b) == size for b in batches[:-1])
        if batches:
            assert 1 <= len(batches[-1]) <= size

    def test_batches_are_independent(self):
        acc = BatchAccumulator(1)
        a, b = records(2)
        first = acc.push(a)
        second = acc.push(b)
        assert first == [a]
        assert second == [b]

    def test_clear_drops_pending(self):
        acc = BatchAccumulator(5)
        for rec in records(3):
            acc.push(rec)
        assert acc.clear() == 3
        assert acc.flush() is None
