"""Factory functions wiring configuration to concrete adapters.

Keeps the CLI and library callers free from direct adapter construction. Heavy
dependencies (torch, sentence-transformers) are only imported once a model is
actually acquired.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from native_embedder.adapters.config.toml_config_provider import TomlConfigProvider
from native_embedder.adapters.local_models.acquisition import ModelAcquisitionClient
from native_embedder.adapters.local_models.registry import has_cached_copy, resolve_model
from native_embedder.core.embedding.native_embedder import NativeEmbedder
from native_embedder.core.storage import models_dir, resolve_storage_dir

if TYPE_CHECKING:
    from native_embedder.domain.config import EmbedderConfig


def load_config(config_path: Path | None = None) -> EmbedderConfig:
    """Load configuration from config files and the environment."""
    return TomlConfigProvider().load(config_path)


def create_acquisition_client(config: EmbedderConfig) -> ModelAcquisitionClient:
    """Create the model acquisition client described by config."""
    return ModelAcquisitionClient(
        fallback_host=config.download.fallback_host,
        device=config.model.device,
        encode_batch_size=config.model.encode_batch_size,
        timeout=config.download.timeout,
    )


def create_native_embedder(config: EmbedderConfig | None = None) -> NativeEmbedder:
    """Create an embedding session for the configured model.

    Args:
        config: Configuration to use. Loaded from files and the environment
            when None.

    Returns:
        NativeEmbedder for the resolved model. Unsupported model names
        resolve to the default model.
    """
    if config is None:
        config = load_config()

    descriptor = resolve_model(config.model.name)
    storage_dir = resolve_storage_dir(config)

    return NativeEmbedder(
        model=descriptor,
        storage_dir=storage_dir,
        acquirer=create_acquisition_client(config),
        model_downloaded=has_cached_copy(descriptor, models_dir(storage_dir)),
    )
