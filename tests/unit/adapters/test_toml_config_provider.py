"""Unit tests for TomlConfigProvider adapter."""

import logging
from pathlib import Path

import pytest

from native_embedder.adapters.config.toml_config_provider import TomlConfigProvider
from native_embedder.domain.config import DEFAULT_FALLBACK_HOST, EmbedderConfig


@pytest.fixture
def provider() -> TomlConfigProvider:
    """Create a TomlConfigProvider with an empty environment."""
    return TomlConfigProvider(environ={})


@pytest.fixture
def global_config(isolated_environment: Path) -> Path:
    """Path of the (patched) global config file, parent created."""
    isolated_environment.parent.mkdir(parents=True, exist_ok=True)
    return isolated_environment


class TestDefaults:
    """Tests for loading without any config source."""

    def test_no_files_returns_defaults(self, provider: TomlConfigProvider) -> None:
        """Test defaults are returned when nothing is configured."""
        assert provider.load() == EmbedderConfig.default()

    def test_missing_explicit_file_warns(
        self, provider: TomlConfigProvider, tmp_path: Path, caplog
    ) -> None:
        """Test a missing --config file is ignored with a warning."""
        config = provider.load(tmp_path / "missing.toml")

        assert config == EmbedderConfig.default()
        assert "does not exist" in caplog.text


class TestLayering:
    """Tests for merging global, explicit and environment layers."""

    def test_global_config_applied(
        self, provider: TomlConfigProvider, global_config: Path
    ) -> None:
        """Test values from the global config are loaded."""
        global_config.write_text(
            '[model]\nname = "nomic-ai/nomic-embed-text-v1"\nencode_batch_size = 8\n'
        )

        config = provider.load()

        assert config.model.name == "nomic-ai/nomic-embed-text-v1"
        assert config.model.encode_batch_size == 8
        assert config.download.fallback_host == DEFAULT_FALLBACK_HOST

    def test_explicit_overrides_global_per_key(
        self, provider: TomlConfigProvider, global_config: Path, tmp_path: Path
    ) -> None:
        """Test the explicit file wins only for the keys it sets."""
        global_config.write_text('[model]\nname = "a"\nencode_batch_size = 8\n')
        explicit = tmp_path / "explicit.toml"
        explicit.write_text('[model]\nname = "b"\n')

        config = provider.load(explicit)

        assert config.model.name == "b"
        assert config.model.encode_batch_size == 8

    def test_environment_overrides_files(
        self, global_config: Path, tmp_path: Path
    ) -> None:
        """Test SELECTED_MODEL and STORAGE_DIRECTORY win over config files."""
        global_config.write_text(
            '[model]\nname = "a"\n[storage]\ndirectory = "/from/file"\n'
        )
        provider = TomlConfigProvider(
            environ={
                "SELECTED_MODEL": "intfloat/multilingual-e5-small",
                "STORAGE_DIRECTORY": str(tmp_path / "env-storage"),
            }
        )

        config = provider.load()

        assert config.model.name == "intfloat/multilingual-e5-small"
        assert config.storage.directory == str(tmp_path / "env-storage")

    def test_empty_environment_value_ignored(self, global_config: Path) -> None:
        """Test an empty environment variable does not clear a file value."""
        global_config.write_text('[model]\nname = "a"\n')

        config = TomlConfigProvider(environ={"SELECTED_MODEL": ""}).load()

        assert config.model.name == "a"

    def test_reads_os_environ_by_default(self, monkeypatch) -> None:
        """Test the process environment is used when none is given."""
        monkeypatch.setenv("SELECTED_MODEL", "nomic-ai/nomic-embed-text-v1")

        assert TomlConfigProvider().load().model.name == "nomic-ai/nomic-embed-text-v1"


class TestInvalidFiles:
    """Tests for skipping broken config files."""

    def test_invalid_toml_is_ignored(
        self, provider: TomlConfigProvider, global_config: Path, caplog
    ) -> None:
        """Test malformed TOML falls back to the lower layers."""
        global_config.write_text("[model\nname = ")

        with caplog.at_level(logging.WARNING):
            config = provider.load()

        assert config == EmbedderConfig.default()
        assert "Failed to apply global config" in caplog.text

    def test_invalid_value_is_ignored(
        self, provider: TomlConfigProvider, global_config: Path, tmp_path: Path, caplog
    ) -> None:
        """Test a file failing validation does not discard earlier layers."""
        global_config.write_text('[model]\nname = "a"\n')
        explicit = tmp_path / "explicit.toml"
        explicit.write_text("[model]\nencode_batch_size = 0\n")

        config = provider.load(explicit)

        assert config.model.name == "a"
        assert config.model.encode_batch_size == 32
        assert "Failed to apply explicit config" in caplog.text

    def test_unknown_key_is_ignored(
        self, provider: TomlConfigProvider, global_config: Path, caplog
    ) -> None:
        """Test an unknown key rejects the whole file with a warning."""
        global_config.write_text('[model]\nnmae = "typo"\n')

        config = provider.load()

        assert config == EmbedderConfig.default()
        assert "Failed to apply global config" in caplog.text
