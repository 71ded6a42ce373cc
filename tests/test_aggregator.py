"""Tests for parallel payment aggregation."""

import pytest

from wallet.models import Payment
from wallet.queries import split_into_chunks, sum_payments


def _payments(*amounts):
    return [
        Payment(id=f"p{i}", account_id=1, amount=amount, category="misc")
        for i, amount in enumerate(amounts)
    ]


def _amounts(chunks):
    return [[p.amount for p in chunk] for chunk in chunks]


class TestChunking:
    """Tests for split_into_chunks."""

    def test_remainder_goes_to_last_chunk(self):
        chunks = split_into_chunks(_payments(100, 250, 50, 10, 5), 3)
        assert _amounts(chunks) == [[100], [250], [50, 10, 5]]

    def test_zero_workers_is_one_chunk(self):
        chunks = split_into_chunks(_payments(100, 250, 50), 0)
        assert _amounts(chunks) == [[100, 250, 50]]

    def test_one_worker_is_one_chunk(self):
        assert len(split_into_chunks(_payments(1, 2, 3), 1)) == 1

    def test_more_workers_than_payments(self):
        chunks = split_into_chunks(_payments(1, 2), 4)
        assert _amounts(chunks) == [[], [], [], [1, 2]]

    def test_even_split(self):
        chunks = split_into_chunks(_payments(1, 2, 3, 4), 2)
        assert _amounts(chunks) == [[1, 2], [3, 4]]

    def test_negative_workers_rejected(self):
        with pytest.raises(ValueError):
            split_into_chunks(_payments(1), -1)

    def test_chunks_preserve_order_and_cover_everything(self):
        payments = _payments(*range(1, 24))
        chunks = split_into_chunks(payments, 5)
        assert [p for chunk in chunks for p in chunk] == payments


class TestSumPayments:
    """Tests for sum_payments."""

    def test_zero_workers(self):
        assert sum_payments(_payments(100, 250, 50), 0) == 400

    @pytest.mark.parametrize("workers", [0, 1, 3])
    def test_same_total_for_any_worker_count(self, workers):
        assert sum_payments(_payments(100, 250, 50, 10, 5), workers) == 415

    def test_empty(self):
        assert sum_payments([], 4) == 0

    def test_large_collection(self):
        payments = _payments(*range(1, 10_001))
        assert sum_payments(payments, 7) == 10_000 * 10_001 // 2

    def test_worker_exception_propagates(self):
        class Broken:
            @property
            def amount(self):
                raise RuntimeError("boom")

        with pytest.raises(RuntimeError, match="boom"):
            sum_payments([Broken()], 1)
