"""Aggregation queries over ledger data."""

from wallet.queries.aggregator import split_into_chunks, sum_payments

__all__ = ["split_into_chunks", "sum_payments"]
