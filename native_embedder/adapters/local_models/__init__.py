"""Local embedding model adapters.

Provides the model registry, model acquisition with mirror fallback and the
sentence-transformers inference pipeline.
"""

from native_embedder.adapters.local_models.registry import (
    DEFAULT_MODEL,
    MODEL_REGISTRY,
    has_cached_copy,
    is_model_downloaded,
    is_supported_model,
    list_supported_models,
    mirror_cache_path,
    model_cache_path,
    resolve_model,
)

__all__ = [
    "DEFAULT_MODEL",
    "MODEL_REGISTRY",
    "has_cached_copy",
    "is_model_downloaded",
    "is_supported_model",
    "list_supported_models",
    "mirror_cache_path",
    "model_cache_path",
    "resolve_model",
]
