"""Inference port for feature-extraction models.

Defines the interface between the embedding pipeline and whatever runtime
actually executes the model.
"""

from collections.abc import Sequence
from pathlib import Path
from typing import Any, Protocol

from native_embedder.domain.models import ModelDescriptor


class InferenceCapability(Protocol):
    """Protocol for a loaded feature-extraction model."""

    def __call__(
        self,
        batch: Sequence[str],
        pooling: str = "mean",
        normalize: bool = True,
    ) -> Any:
        """Embed a batch of texts.

        Args:
            batch: Texts to embed, in order.
            pooling: Reduction from token vectors to one vector per text.
                Only "mean" is supported.
            normalize: Whether to L2-normalize each vector.

        Returns:
            One vector per input text, as a 2D numpy array or a list of
            float lists. An empty result means the batch produced nothing.
        """
        ...


class ModelAcquirer(Protocol):
    """Protocol for obtaining an inference capability for a model."""

    def acquire(
        self,
        descriptor: ModelDescriptor,
        cache_dir: Path,
        already_downloaded: bool,
        host_override: str | None = None,
    ) -> InferenceCapability:
        """Obtain a ready-to-use inference capability.

        Args:
            descriptor: Model to acquire.
            cache_dir: Root of the model cache.
            already_downloaded: Whether a complete copy is already in the cache.
            host_override: Fetch from this host instead of the primary source.

        Returns:
            Loaded inference capability.

        Raises:
            ModelAcquisitionError: If the model could not be obtained.
        """
        ...
