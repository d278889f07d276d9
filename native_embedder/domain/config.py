"""Config domain models for the native embedder.

Configuration is merged from built-in defaults, TOML config files and the
environment. This module defines the domain models that represent validated
configuration state.
"""

from dataclasses import dataclass, field, replace
from typing import Any

# Hosts a copy of the supported models for clients that cannot reach the
# Hugging Face Hub. Not guaranteed to stay online.
DEFAULT_FALLBACK_HOST = "https://cdn.anythingllm.com/support/models/"


@dataclass(frozen=True)
class ModelConfig:
    """Configuration for model selection and inference.

    Attributes:
        name: Model identifier. Empty or unsupported values select the default model.
        device: Device to run on ('cpu', 'cuda', 'mps', or None for auto)
        encode_batch_size: Batch size handed to the model's encode call. Reduced
                           automatically on out-of-memory errors.

    Raises:
        ValueError: If encode_batch_size is not positive.
    """

    name: str = ""
    device: str | None = None
    encode_batch_size: int = 32

    def __post_init__(self) -> None:
        """Validate model config after initialization."""
        if self.encode_batch_size <= 0:
            raise ValueError(
                f"encode_batch_size must be positive, got {self.encode_batch_size}"
            )


@dataclass(frozen=True)
class StorageConfig:
    """Configuration for on-disk storage.

    Attributes:
        directory: Base path for the model cache and scratch files. None means
                   a storage/ directory next to the installed package.
    """

    directory: str | None = None


@dataclass(frozen=True)
class DownloadConfig:
    """Configuration for model downloads.

    Attributes:
        fallback_host: Mirror used when the Hugging Face Hub download fails.
                       Files are fetched from <fallback_host><model id>/<file>.
        timeout: Network timeout in seconds for mirror downloads

    Raises:
        ValueError: If fallback_host is not an http(s) URL or timeout is not positive.
    """

    fallback_host: str = DEFAULT_FALLBACK_HOST
    timeout: float = 60.0

    def __post_init__(self) -> None:
        """Validate download config after initialization."""
        if not self.fallback_host.startswith(("http://", "https://")):
            raise ValueError(
                f"fallback_host must be an http(s) URL, got {self.fallback_host!r}"
            )
        if self.timeout <= 0:
            raise ValueError(f"timeout must be positive, got {self.timeout}")


@dataclass(frozen=True)
class EmbedderConfig:
    """Complete native embedder configuration.

    Attributes:
        model: Model selection and inference configuration
        storage: Storage location configuration
        download: Download configuration
    """

    model: ModelConfig = field(default_factory=ModelConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    download: DownloadConfig = field(default_factory=DownloadConfig)

    @staticmethod
    def default() -> "EmbedderConfig":
        """Create a config with all default values."""
        return EmbedderConfig(
            model=ModelConfig(),
            storage=StorageConfig(),
            download=DownloadConfig(),
        )

    @staticmethod
    def from_partial(base: "EmbedderConfig", data: dict[str, Any]) -> "EmbedderConfig":
        """Overlay partial config data onto an existing config.

        Only keys present in data are replaced; each section is rebuilt through
        its dataclass so validation runs on the merged values.

        Args:
            base: Config supplying values for keys missing from data
            data: Raw config dictionary (e.g., parsed TOML)

        Returns:
            New EmbedderConfig with data applied

        Raises:
            ValueError: If a section is not a table or a merged value is invalid
            TypeError: If data contains an unknown key
        """
        sections = {}
        for section in ("model", "storage", "download"):
            section_data = data.get(section, {})
            if not isinstance(section_data, dict):
                raise ValueError(f"[{section}] must be a table, got {section_data!r}")
            sections[section] = replace(getattr(base, section), **section_data)

        return EmbedderConfig(**sections)
