"""
Parallel Payment Aggregation

The payment list is cut into contiguous chunks, one per worker. Each
worker sums its chunk and adds the subtotal to a shared total under a
lock. The call returns only after every worker has finished.

Chunking: with N workers every chunk but the last holds len // N
payments and the last takes the remainder. Zero workers means a single
chunk holding everything.
"""

import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Sequence

from wallet.models.entities import Payment


def split_into_chunks(payments: Sequence[Payment], workers: int) -> list[list[Payment]]:
    """
    Partition payments into contiguous chunks.

    Examples:
        5 payments, 3 workers -> sizes [1, 1, 3]
        3 payments, 0 workers -> sizes [3]
        2 payments, 4 workers -> sizes [0, 0, 0, 2]
    """
    if workers < 0:
        raise ValueError(f"worker count must not be negative, got {workers}")

    items = list(payments)
    if workers <= 1:
        return [items]

    size = len(items) // workers
    chunks = [items[i * size:(i + 1) * size] for i in range(workers - 1)]
    chunks.append(items[(workers - 1) * size:])
    return chunks


def sum_payments(payments: Sequence[Payment], workers: int) -> int:
    """Sum payment amounts across `max(1, workers)` concurrent workers."""
    chunks = split_into_chunks(payments, workers)

    total = 0
    lock = threading.Lock()

    def add_chunk(chunk: list[Payment]) -> None:
        nonlocal total
        subtotal = sum(payment.amount for payment in chunk)
        with lock:
            total += subtotal

    with ThreadPoolExecutor(
        max_workers=len(chunks),
        thread_name_prefix="sum-payments",
    ) as pool:
        futures = [pool.submit(add_chunk, chunk) for chunk in chunks]
        # Surface worker exceptions
        for future in futures:
            future.result()

    return total
