"""Out-of-memory backoff for model encode calls.

Halves the encode batch size whenever the runtime runs out of memory, so a
batch that fits on disk can still be embedded on a small host or GPU.
"""

import logging
from collections.abc import Callable
from typing import TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


def is_oom_error(error: BaseException) -> bool:
    """Check if an error signals the runtime ran out of memory.

    Covers Python's MemoryError as well as torch's CUDA/MPS errors, which are
    plain RuntimeErrors distinguished only by their message.
    """
    if isinstance(error, MemoryError):
        return True
    return "out of memory" in str(error).lower()


def _release_accelerator_memory() -> None:
    try:
        import torch

        if torch.cuda.is_available():
            torch.cuda.empty_cache()
    except (ImportError, RuntimeError):
        # torch not available or CUDA not initialized
        pass


def encode_with_oom_backoff(
    encode_fn: Callable[[int], T],
    batch_size: int,
    min_batch_size: int = 1,
) -> T:
    """Run encode_fn, halving its batch size after each out-of-memory error.

    Args:
        encode_fn: Function that takes an encode batch size and returns embeddings
        batch_size: Initial batch size to try
        min_batch_size: Smallest batch size to try before giving up

    Returns:
        Result from encode_fn

    Raises:
        Exception: The out-of-memory error if it persists at min_batch_size,
            or any other error from encode_fn unchanged.
    """
    current = batch_size

    while True:
        try:
            return encode_fn(current)
        except Exception as e:
            if not is_oom_error(e):
                raise
            if current <= min_batch_size:
                logger.error(
                    "Out of memory at minimum encode batch size (%d). "
                    "Consider a smaller model or lowering max_concurrent_chunks.",
                    min_batch_size,
                )
                raise

            _release_accelerator_memory()
            reduced = max(current // 2, min_batch_size)
            logger.warning(
                "Out of memory while encoding. Reducing batch size from %d to %d.",
                current,
                reduced,
            )
            current = reduced
