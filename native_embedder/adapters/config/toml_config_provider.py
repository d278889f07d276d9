"""TOML-based configuration provider with environment overrides.

Config loading priority (highest to lowest):
1. Environment: SELECTED_MODEL, STORAGE_DIRECTORY
2. Explicit config file (e.g., --config on the command line)
3. Global: ~/.config/native-embedder/config.toml (user defaults)
4. Built-in defaults
"""

import logging
import os
from collections.abc import Mapping
from pathlib import Path

from native_embedder.domain.config import EmbedderConfig
from native_embedder.shared.config_io import get_global_config_path, load_config_data

logger = logging.getLogger(__name__)

# Environment variable -> (section, key)
ENV_OVERRIDES: dict[str, tuple[str, str]] = {
    "SELECTED_MODEL": ("model", "name"),
    "STORAGE_DIRECTORY": ("storage", "directory"),
}


class TomlConfigProvider:
    """Configuration provider that loads from TOML files and the environment.

    Each layer is applied with EmbedderConfig.from_partial so validation runs
    at every merge step. Missing or invalid files are skipped with a warning.

    Args:
        environ: Environment to read overrides from (default: os.environ).
    """

    def __init__(self, environ: Mapping[str, str] | None = None) -> None:
        self._environ = os.environ if environ is None else environ

    def load(self, config_path: Path | None = None) -> EmbedderConfig:
        """Load configuration.

        Args:
            config_path: Optional explicit config file layered over the global one.

        Returns:
            EmbedderConfig with merged values, or defaults
        """
        config = EmbedderConfig.default()

        for label, path in (("global", get_global_config_path()), ("explicit", config_path)):
            if path is None:
                continue
            if not path.exists():
                if label == "explicit":
                    logger.warning("Config file %s does not exist. Ignoring it.", path)
                continue
            try:
                config = EmbedderConfig.from_partial(config, load_config_data(path))
                logger.debug("Loaded %s config from %s", label, path)
            except (ValueError, TypeError) as e:
                logger.warning(
                    "Failed to apply %s config at %s: %s. Ignoring it.", label, path, e
                )

        env_data: dict[str, dict[str, str]] = {}
        for variable, (section, key) in ENV_OVERRIDES.items():
            value = self._environ.get(variable)
            if value:
                env_data.setdefault(section, {})[key] = value

        if env_data:
            config = EmbedderConfig.from_partial(config, env_data)
            logger.debug("Applied environment overrides: %s", ", ".join(sorted(env_data)))

        return config
