"""Model registry for embedding model selection.

Maps supported Hugging Face model IDs to their operating parameters and
resolves the configured model, degrading to the default when the requested
model is not supported.
"""

import logging
from pathlib import Path

from native_embedder.domain.models import (
    SENTENCE_TRANSFORMER_FILES,
    ModelCard,
    ModelDescriptor,
)

logger = logging.getLogger(__name__)

# Single source of truth for all supported models, in display order
MODEL_REGISTRY: dict[str, ModelDescriptor] = {
    "sentence-transformers/all-MiniLM-L6-v2": ModelDescriptor(
        identifier="sentence-transformers/all-MiniLM-L6-v2",
        card=ModelCard(
            name="all-MiniLM-L6-v2",
            description="A lightweight and fast model for embedding text. The default model.",
            language="English",
            size="23MB",
            reference_url="https://huggingface.co/sentence-transformers/all-MiniLM-L6-v2",
        ),
        # 50 overflows a 2GB host on large documents
        max_concurrent_chunks=25,
        embedding_max_chunk_length=1_000,
        mirror_id="Xenova/all-MiniLM-L6-v2",
    ),
    "nomic-ai/nomic-embed-text-v1": ModelDescriptor(
        identifier="nomic-ai/nomic-embed-text-v1",
        card=ModelCard(
            name="nomic-embed-text-v1",
            description="A high-performing open embedding model with a large token context window.",
            language="English",
            size="139MB",
            reference_url="https://huggingface.co/nomic-ai/nomic-embed-text-v1",
        ),
        max_concurrent_chunks=5,
        embedding_max_chunk_length=16_000,
        chunk_prefix="search_document: ",
        query_prefix="search_query: ",
        trust_remote_code=True,
        # config.json auto_map points at the modeling code in this repository
        remote_code_repos=("nomic-ai/nomic-bert-2048",),
        mirror_id="Xenova/nomic-embed-text-v1",
    ),
    "intfloat/multilingual-e5-small": ModelDescriptor(
        identifier="intfloat/multilingual-e5-small",
        card=ModelCard(
            name="multilingual-e5-small",
            description="A larger multilingual embedding model that supports 100+ languages.",
            language="100+ languages",
            size="487MB",
            reference_url="https://huggingface.co/intfloat/multilingual-e5-small",
        ),
        max_concurrent_chunks=5,
        embedding_max_chunk_length=1_000,
        chunk_prefix="passage: ",
        query_prefix="query: ",
        hub_files=(*SENTENCE_TRANSFORMER_FILES, "sentencepiece.bpe.model"),
        mirror_id="Xenova/multilingual-e5-small",
    ),
}

# Default model when none specified or the requested one is unsupported
DEFAULT_MODEL = "sentence-transformers/all-MiniLM-L6-v2"

# Written into a model directory after its download finished
DOWNLOAD_MARKER = ".download_complete"


def is_supported_model(model_id: str | None) -> bool:
    """Check whether a model ID is in the registry (case-sensitive)."""
    return bool(model_id) and model_id in MODEL_REGISTRY


def resolve_model(model_id: str | None) -> ModelDescriptor:
    """Resolve a requested model ID to its descriptor.

    Never raises: unset or unsupported IDs resolve to the default model.

    Args:
        model_id: Requested Hugging Face model ID, or None

    Returns:
        Descriptor for the requested model, or for DEFAULT_MODEL
    """
    if is_supported_model(model_id):
        return MODEL_REGISTRY[model_id]

    if model_id:
        logger.warning(
            "Embedding model %s is not supported. Using default model %s.",
            model_id,
            DEFAULT_MODEL,
        )
    return MODEL_REGISTRY[DEFAULT_MODEL]


def list_supported_models() -> list[dict[str, str]]:
    """List all supported models with their display info.

    Returns:
        List of dictionaries with id, name, description, language, size
        and reference_url keys, in registry order
    """
    return [descriptor.to_api_info() for descriptor in MODEL_REGISTRY.values()]


def model_cache_path(descriptor: ModelDescriptor, cache_dir: Path) -> Path:
    """Directory holding a model's files inside the cache.

    The identifier's path segments become nested directories, e.g.
    <cache_dir>/intfloat/multilingual-e5-small.
    """
    return cache_dir.joinpath(*descriptor.identifier.split("/"))


def mirror_cache_path(descriptor: ModelDescriptor, cache_dir: Path) -> Path:
    """Directory holding a model's fallback mirror copy inside the cache.

    The mirror serves a different file layout than the Hub, so its copy is
    kept apart, e.g. <cache_dir>/mirror/Xenova/all-MiniLM-L6-v2.
    """
    return cache_dir.joinpath("mirror", *descriptor.mirror_source.split("/"))


def is_model_downloaded(model_dir: Path) -> bool:
    """Check if a model directory holds a complete download.

    The completion marker is only written once every file of a download has
    landed, so an interrupted Hub or mirror fetch is retried on the next run.
    """
    return (model_dir / DOWNLOAD_MARKER).is_file()


def mark_model_downloaded(model_dir: Path) -> None:
    """Record that every file of a model's download is present."""
    model_dir.mkdir(parents=True, exist_ok=True)
    (model_dir / DOWNLOAD_MARKER).touch()


def has_cached_copy(descriptor: ModelDescriptor, cache_dir: Path) -> bool:
    """Check if a complete Hub or mirror copy of a model is in the cache."""
    return is_model_downloaded(model_cache_path(descriptor, cache_dir)) or (
        is_model_downloaded(mirror_cache_path(descriptor, cache_dir))
    )
