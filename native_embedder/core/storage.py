"""Storage directory layout.

Everything the embedder writes lives under one storage directory:

    <storage>/models/<model id path>   cached Hub checkpoints
    <storage>/models/mirror/<mirror id path>   cached fallback mirror copies
    <storage>/tmp/<uuid>.tmp           per-call embedding scratch files
"""

from pathlib import Path

from native_embedder.domain.config import EmbedderConfig

# Used when no storage directory is configured
DEFAULT_STORAGE_DIR = Path(__file__).resolve().parents[1] / "storage"


def resolve_storage_dir(config: EmbedderConfig) -> Path:
    """Resolve the configured storage directory to an absolute path."""
    if config.storage.directory:
        return Path(config.storage.directory).expanduser().resolve()
    return DEFAULT_STORAGE_DIR


def models_dir(storage_dir: Path) -> Path:
    """Model cache root."""
    return storage_dir / "models"


def tmp_dir(storage_dir: Path) -> Path:
    """Scratch file directory."""
    return storage_dir / "tmp"
