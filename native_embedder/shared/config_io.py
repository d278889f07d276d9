"""Configuration I/O utilities for reading and writing TOML config files.

This module handles serialization/deserialization of EmbedderConfig to/from
TOML format.
"""

import os
import platform
import tomllib  # Built-in Python 3.11+
from pathlib import Path
from typing import Any

import tomli_w

from native_embedder.domain.config import EmbedderConfig

APP_NAME = "native-embedder"


def get_global_config_path() -> Path:
    """Get the path to the global config file.

    The location is platform-dependent:
    - Linux/macOS: $XDG_CONFIG_HOME/native-embedder/config.toml or
      ~/.config/native-embedder/config.toml
    - Windows: %APPDATA%/native-embedder/config.toml

    Returns:
        Path to the global config file (may not exist)
    """
    if platform.system() == "Windows":
        appdata = os.environ.get("APPDATA", "")
        if appdata:
            return Path(appdata) / APP_NAME / "config.toml"
        return Path.home() / ".config" / APP_NAME / "config.toml"

    xdg_config = os.environ.get("XDG_CONFIG_HOME", "")
    if xdg_config:
        return Path(xdg_config) / APP_NAME / "config.toml"
    return Path.home() / ".config" / APP_NAME / "config.toml"


def load_config_data(path: Path) -> dict[str, Any]:
    """Load raw TOML data from a config file.

    Args:
        path: Path to config.toml file

    Returns:
        Dictionary with parsed TOML data

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If config file is malformed
    """
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    try:
        with path.open("rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ValueError(f"Invalid TOML in config file: {e}") from e


def config_to_data(config: EmbedderConfig) -> dict[str, Any]:
    """Convert an EmbedderConfig to a TOML-serializable dictionary.

    TOML has no null, so unset optional values are left out.
    """
    model: dict[str, Any] = {
        "name": config.model.name,
        "encode_batch_size": config.model.encode_batch_size,
    }
    if config.model.device is not None:
        model["device"] = config.model.device

    storage: dict[str, Any] = {}
    if config.storage.directory is not None:
        storage["directory"] = config.storage.directory

    return {
        "model": model,
        "storage": storage,
        "download": {
            "fallback_host": config.download.fallback_host,
            "timeout": config.download.timeout,
        },
    }


def dump_config(config: EmbedderConfig) -> str:
    """Render a configuration as TOML text.

    Args:
        config: EmbedderConfig to render

    Returns:
        TOML document that loads back to the same configuration
    """
    return tomli_w.dumps(config_to_data(config))


def create_default_config_file(path: Path, model: str = "") -> None:
    """Create a default config.toml file with comments.

    Args:
        path: Destination path for config.toml
        model: Model identifier to preselect (empty selects the default model)
    """
    # Template string to preserve comments and formatting
    template = f"""\
# native-embedder configuration
# Created by: native-embedder config init

[model]
# Hugging Face model ID. Unsupported or empty values use the default model.
# Options: sentence-transformers/all-MiniLM-L6-v2 (default, ~23MB),
#          nomic-ai/nomic-embed-text-v1 (~139MB),
#          intfloat/multilingual-e5-small (~487MB)
# Overridden by the SELECTED_MODEL environment variable.
name = "{model}"

# Batch size for the model's encode call (halved automatically on OOM)
encode_batch_size = 32

# Device to run on: "cpu", "cuda", "mps". Leave unset for auto-detection.
# device = "cpu"

[storage]
# Base directory for cached models and scratch files.
# Overridden by the STORAGE_DIRECTORY environment variable.
# directory = "~/.local/share/native-embedder"

[download]
# Mirror used when the Hugging Face Hub download fails
fallback_host = "https://cdn.anythingllm.com/support/models/"

# Network timeout for mirror downloads (seconds)
timeout = 60.0
"""

    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        f.write(template)
