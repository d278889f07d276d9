"""Feature-extraction pipeline backed by sentence-transformers.

Implements the InferenceCapability port for a model that is already present
on disk.
"""

import os
import warnings
from collections.abc import Sequence
from pathlib import Path
from typing import TYPE_CHECKING

from native_embedder.adapters.local_models.oom_retry import encode_with_oom_backoff
from native_embedder.domain.models import ONNX_MODEL_FILE, ModelDescriptor

# Lazy import - only load when actually needed
if TYPE_CHECKING:
    import numpy as np
    from sentence_transformers import SentenceTransformer

SUPPORTED_POOLING = ("mean",)
SUPPORTED_BACKENDS = ("torch", "onnx")


class SentenceTransformerPipeline:
    """Inference capability using a locally stored sentence-transformers model.

    The model is loaded from model_dir with local_files_only, so construction
    never touches the network. Downloading is the acquisition client's job.

    The "torch" backend loads a sentence-transformers checkpoint from the Hub;
    the "onnx" backend loads the quantized ONNX export served by the mirror,
    pooled with sentence-transformers' default mean pooling.
    """

    DEFAULT_ENCODE_BATCH_SIZE = 32

    def __init__(
        self,
        descriptor: ModelDescriptor,
        model_dir: Path,
        device: str | None = None,
        encode_batch_size: int = DEFAULT_ENCODE_BATCH_SIZE,
        backend: str = "torch",
    ):
        """Initialize the pipeline.

        Args:
            descriptor: Model being served.
            model_dir: Directory holding the downloaded checkpoint.
            device: Device to run on ('cpu', 'cuda', 'mps', or None for auto).
            encode_batch_size: Batch size for the model's encode call.
            backend: "torch" for a Hub checkpoint, "onnx" for a mirror copy.

        Raises:
            ValueError: If backend is not supported.
        """
        if backend not in SUPPORTED_BACKENDS:
            raise ValueError(
                f"Unsupported backend '{backend}'. Supported: {', '.join(SUPPORTED_BACKENDS)}"
            )
        self._descriptor = descriptor
        self._model_dir = model_dir
        self._device = device
        self._encode_batch_size = encode_batch_size
        self._backend = backend
        self._model: SentenceTransformer | None = None

    @property
    def model_id(self) -> str:
        """Identifier of the served model."""
        return self._descriptor.identifier

    @property
    def backend(self) -> str:
        """Inference backend the model is loaded with."""
        return self._backend

    def load(self) -> "SentenceTransformer":
        """Load the model into memory if it is not loaded yet.

        Returns:
            Loaded SentenceTransformer model.

        Raises:
            OSError: If the model directory is missing or incomplete.
        """
        if self._model is None:
            # Tokenizer thread pools don't survive fork(); users can still override
            os.environ.setdefault("TOKENIZERS_PARALLELISM", "false")

            # Import here to avoid loading heavy dependencies at module import time
            from sentence_transformers import SentenceTransformer

            extra_kwargs = {}
            if self._backend == "onnx":
                extra_kwargs["model_kwargs"] = {"file_name": ONNX_MODEL_FILE}

            with warnings.catch_warnings():
                # nomic's remote code warns about optional accelerators
                warnings.filterwarnings("ignore", category=UserWarning)
                self._model = SentenceTransformer(
                    str(self._model_dir),
                    device=self._device,
                    trust_remote_code=self._descriptor.trust_remote_code,
                    local_files_only=True,
                    backend=self._backend,
                    **extra_kwargs,
                )
        return self._model

    def __call__(
        self,
        batch: Sequence[str],
        pooling: str = "mean",
        normalize: bool = True,
    ) -> "np.ndarray":
        """Embed a batch of texts.

        Args:
            batch: Texts to embed.
            pooling: Token pooling strategy. Only "mean" is supported.
            normalize: L2-normalize the output vectors.

        Returns:
            2D float array with one row per input text.

        Raises:
            ValueError: If pooling is not supported.
        """
        if pooling not in SUPPORTED_POOLING:
            raise ValueError(
                f"Unsupported pooling '{pooling}'. Supported: {', '.join(SUPPORTED_POOLING)}"
            )

        model = self.load()
        texts = list(batch)

        def encode(batch_size: int) -> "np.ndarray":
            return model.encode(
                texts,
                batch_size=batch_size,
                show_progress_bar=False,
                convert_to_numpy=True,
                normalize_embeddings=normalize,
            )

        return encode_with_oom_backoff(encode, self._encode_batch_size)
