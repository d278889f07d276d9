"""Order-preserving batching of texts."""

from collections.abc import Sequence
from typing import TypeVar

T = TypeVar("T")


def to_batches(items: Sequence[T], size: int) -> list[list[T]]:
    """Split items into consecutive batches of at most size elements.

    Args:
        items: Items to split, in order.
        size: Maximum batch size.

    Returns:
        Batches in input order; only the last may be shorter than size.
        Empty input gives no batches.

    Raises:
        ValueError: If size is not positive.
    """
    if size <= 0:
        raise ValueError(f"Batch size must be positive, got {size}")
    return [list(items[start : start + size]) for start in range(0, len(items), size)]
