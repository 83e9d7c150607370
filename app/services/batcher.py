"""Split extracted CV texts into fixed-size batches for the completion service."""
from typing import List, Sequence, TypeVar

T = TypeVar("T")

DEFAULT_BATCH_SIZE = 5


def chunk_texts(texts: Sequence[T], size: int = DEFAULT_BATCH_SIZE) -> List[List[T]]:
    """
    Partition texts into consecutive chunks of ``size``.

    Every chunk except possibly the last has exactly ``size`` items, order is
    preserved and nothing is dropped or repeated.
    """
    if size < 1:
        raise ValueError(f"Batch size must be at least 1, got {size}")
    return [list(texts[i:i + size]) for i in range(0, len(texts), size)]
