"""Pytest configuration and shared fixtures."""

import hashlib
from collections.abc import Callable, Sequence
from pathlib import Path
from unittest.mock import Mock, patch

import numpy as np
import pytest

from native_embedder.adapters.local_models.registry import MODEL_REGISTRY
from native_embedder.core.embedding.native_embedder import NativeEmbedder
from native_embedder.domain.models import ModelCard, ModelDescriptor

FAKE_DIM = 8


def fake_vector(text: str, dim: int = FAKE_DIM) -> list[float]:
    """Deterministic pseudo-embedding derived from the text's SHA-256."""
    digest = hashlib.sha256(text.encode("utf-8")).digest()
    return [byte / 255 for byte in digest[:dim]]


class FakePipeline:
    """Stand-in for a loaded model.

    Returns deterministic vectors as a numpy array, like sentence-transformers.
    Calls listed in empty_calls (1-based) return an empty array instead.
    """

    def __init__(self, dim: int = FAKE_DIM, empty_calls: Sequence[int] = ()) -> None:
        self.dim = dim
        self.empty_calls = set(empty_calls)
        self.calls: list[dict] = []
        self.loaded = False

    def load(self) -> None:
        self.loaded = True

    def __call__(self, batch, pooling="mean", normalize=True):
        self.calls.append({"batch": list(batch), "pooling": pooling, "normalize": normalize})
        if len(self.calls) in self.empty_calls:
            return np.empty((0, self.dim))
        return np.array([fake_vector(text, self.dim) for text in batch])


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """Keep tests independent of the user's config file and environment.

    Points the global config at a nonexistent file and clears the
    environment overrides.
    """
    monkeypatch.delenv("SELECTED_MODEL", raising=False)
    monkeypatch.delenv("STORAGE_DIRECTORY", raising=False)
    nonexistent_global = tmp_path / "nonexistent_global" / "config.toml"
    with patch(
        "native_embedder.adapters.config.toml_config_provider.get_global_config_path",
        return_value=nonexistent_global,
    ):
        yield nonexistent_global


@pytest.fixture
def storage_dir(tmp_path: Path) -> Path:
    """Empty storage directory for a test."""
    path = tmp_path / "storage"
    path.mkdir()
    return path


@pytest.fixture
def fake_pipeline() -> FakePipeline:
    """Fake inference capability with 8-dimensional output."""
    return FakePipeline()


@pytest.fixture
def fake_acquirer(fake_pipeline: FakePipeline) -> Mock:
    """Acquirer mock that always hands out fake_pipeline."""
    acquirer = Mock()
    acquirer.acquire.return_value = fake_pipeline
    return acquirer


@pytest.fixture
def descriptor_factory() -> Callable[..., ModelDescriptor]:
    """Factory fixture for model descriptors with custom limits and prefixes.

    Example:
        def test_batches(descriptor_factory):
            descriptor = descriptor_factory(max_concurrent_chunks=2)
    """

    def _create(
        identifier: str = "test-org/test-model",
        max_concurrent_chunks: int = 25,
        embedding_max_chunk_length: int = 1000,
        chunk_prefix: str = "",
        query_prefix: str = "",
        mirror_id: str = "",
        mirror_files: tuple[str, ...] = ("model.safetensors", "config.json"),
    ) -> ModelDescriptor:
        return ModelDescriptor(
            identifier=identifier,
            card=ModelCard(
                name=identifier.split("/")[-1],
                description="Test model",
                language="English",
                size="1MB",
                reference_url=f"https://huggingface.co/{identifier}",
            ),
            max_concurrent_chunks=max_concurrent_chunks,
            embedding_max_chunk_length=embedding_max_chunk_length,
            chunk_prefix=chunk_prefix,
            query_prefix=query_prefix,
            mirror_id=mirror_id,
            mirror_files=mirror_files,
        )

    return _create


@pytest.fixture
def embedder_factory(
    storage_dir: Path, fake_acquirer: Mock
) -> Callable[..., NativeEmbedder]:
    """Factory fixture for NativeEmbedder sessions backed by fake_acquirer.

    Accepts a descriptor or a registry model ID.
    """

    def _create(
        model: ModelDescriptor | str = "sentence-transformers/all-MiniLM-L6-v2",
        model_downloaded: bool = True,
    ) -> NativeEmbedder:
        descriptor = MODEL_REGISTRY[model] if isinstance(model, str) else model
        return NativeEmbedder(
            model=descriptor,
            storage_dir=storage_dir,
            acquirer=fake_acquirer,
            model_downloaded=model_downloaded,
        )

    return _create


@pytest.fixture
def vector_for() -> Callable[[str], list[float]]:
    """The deterministic vector FakePipeline produces for a text."""
    return fake_vector
