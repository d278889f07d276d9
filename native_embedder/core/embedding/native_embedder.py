"""Memory-bounded embedding of text chunks with a local model.

This process was sized for small hosts (2GB RAM, 1 vCPU). Embedding a large
document in one pass, or keeping every batch's vectors in memory until the
end, runs such hosts out of memory. Chunks are therefore embedded in batches
of the model's max_concurrent_chunks, strictly one after another, and each
batch's vectors are spilled to a scratch file before the next batch starts.
It is slow but needs no setup and runs entirely on-instance.
"""

import logging
from collections.abc import Sequence
from pathlib import Path

from native_embedder.core.embedding.batching import to_batches
from native_embedder.core.embedding.scratch_file import ScratchFile
from native_embedder.core.storage import models_dir, tmp_dir
from native_embedder.domain.models import ModelDescriptor
from native_embedder.ports.inference import InferenceCapability, ModelAcquirer
from native_embedder.ports.progress import ProgressCallback

logger = logging.getLogger(__name__)


class NativeEmbedder:
    """Embedding session for one selected model.

    Holds the session state: the selected model, where it is cached, and
    whether it has been downloaded. The inference capability is acquired on
    first use and reused for every later batch.

    Args:
        model: Descriptor of the selected model.
        storage_dir: Base storage directory (models/ and tmp/ live below it).
        acquirer: Client used to obtain the inference capability.
        model_downloaded: Whether the model is already in the cache.
    """

    def __init__(
        self,
        model: ModelDescriptor,
        storage_dir: Path,
        acquirer: ModelAcquirer,
        model_downloaded: bool = False,
    ) -> None:
        self.model = model
        self.cache_dir = models_dir(storage_dir)
        self.tmp_dir = tmp_dir(storage_dir)
        self.model_downloaded = model_downloaded
        self._acquirer = acquirer
        self._capability: InferenceCapability | None = None

        self.cache_dir.mkdir(parents=True, exist_ok=True)
        logger.info("Initialized %s", self.model.identifier)

    @property
    def max_concurrent_chunks(self) -> int:
        """Texts embedded per inference call."""
        return self.model.max_concurrent_chunks

    @property
    def embedding_max_chunk_length(self) -> int:
        """Maximum characters per chunk the model handles well."""
        return self.model.embedding_max_chunk_length

    @property
    def embedding_prefix(self) -> str:
        """Prefix the model expects on document chunks."""
        return self.model.chunk_prefix

    @property
    def query_prefix(self) -> str:
        """Prefix the model expects on search queries."""
        return self.model.query_prefix

    def embedder_client(self) -> InferenceCapability:
        """Get the inference capability, acquiring it on first call.

        Raises:
            ModelAcquisitionError: If the model could not be obtained.
        """
        if self._capability is not None:
            return self._capability

        if not self.model_downloaded:
            logger.info(
                "The native embedding model has never been run and will be downloaded "
                "right now. Subsequent runs will be faster. (~%s)",
                self.model.card.size,
            )

        capability = self._acquirer.acquire(
            self.model, self.cache_dir, self.model_downloaded
        )
        self.model_downloaded = True
        self._capability = capability
        return capability

    def apply_query_prefix(self, text_input: str | list[str]) -> str | list[str]:
        """Prepend the model's query prefix to one text or each text in a list."""
        return _prepend(self.query_prefix, text_input)

    def apply_chunk_prefix(self, text_input: str | list[str]) -> str | list[str]:
        """Prepend the model's document prefix to one text or each text in a list."""
        return _prepend(self.embedding_prefix, text_input)

    def embed_text_input(self, text_input: str | list[str]) -> list[float]:
        """Embed a query.

        Args:
            text_input: Query text, or a list of texts of which only the
                first embedding is returned.

        Returns:
            The embedding vector, or an empty list if nothing was produced.
        """
        text_input = self.apply_query_prefix(text_input)
        texts = text_input if isinstance(text_input, list) else [text_input]
        result = self.embed_chunks(texts)
        return result[0] if result else []

    def embed_chunks(
        self,
        text_chunks: Sequence[str] = (),
        progress: ProgressCallback | None = None,
    ) -> list[list[float]] | None:
        """Embed texts batch by batch, spilling results to a scratch file.

        A batch for which the model returns nothing is skipped, so the result
        can be shorter than the input.

        Args:
            text_chunks: Texts to embed, already prefixed as needed.
            progress: Optional callback notified once per embedded batch.

        Returns:
            One vector per embedded text in input order, or None if nothing
            was embedded.

        Raises:
            ModelAcquisitionError: If the model could not be obtained. The
                scratch file is left on disk in this case.
            ScratchFileCorruptError: If the spilled results cannot be read back.
        """
        batches = to_batches(text_chunks, self.max_concurrent_chunks)
        total = len(batches)
        scratch = ScratchFile.create(self.tmp_dir)
        if progress:
            progress.on_start(total, f"Embedding with {self.model.card.name}")

        for index, batch in enumerate(batches, start=1):
            pipeline = self.embedder_client()
            output = pipeline(batch, pooling="mean", normalize=True)

            if output is None or len(output) == 0:
                logger.debug("Chunk group %d of %d produced no embeddings", index, total)
                output = None
                continue

            scratch.append_batch(output)
            logger.info("Embedded chunk group %d of %d", index, total)
            if progress:
                progress.on_progress(index, f"batch of {len(batch)}")

            # Only one batch of vectors may be alive while the next one is computed
            output = None

        scratch.close()
        if progress:
            progress.on_complete()

        results = scratch.read_back()
        if not results:
            return None
        return [vector for batch_vectors in results for vector in batch_vectors]


def _prepend(prefix: str, text_input: str | list[str]) -> str | list[str]:
    if not prefix:
        return text_input
    if isinstance(text_input, list):
        return [f"{prefix}{text}" for text in text_input]
    return f"{prefix}{text_input}"
