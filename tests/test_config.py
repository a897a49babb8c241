"""Tests for configuration loading."""
from pathlib import Path

import pytest
import yaml

from nosh.config import ConfigLoader, default_config_path, default_data_dir
from nosh.ingestion.usda_client import DEFAULT_API_KEY, DEFAULT_SEARCH_URL


class TestDefaults:
    """Tests for XDG default locations."""

    def test_data_dir_from_xdg(self):
        assert default_data_dir({"XDG_DATA_HOME": "/xdg/data"}) == str(Path("/xdg/data/nosh"))

    def test_data_dir_fallback(self):
        assert default_data_dir({}) == str(Path.home() / ".local" / "share" / "nosh")

    def test_config_path_from_xdg(self):
        assert default_config_path({"XDG_CONFIG_HOME": "/xdg/config"}) == Path(
            "/xdg/config/nosh/config.yaml"
        )


class TestConfigLoader:
    """Tests for ConfigLoader."""

    def test_defaults_without_file(self, tmp_path):
        config = ConfigLoader(
            str(tmp_path / "missing.yaml"), environ={"XDG_DATA_HOME": str(tmp_path)}
        ).load()

        assert config.data_dir == str(tmp_path / "nosh")
        assert config.search_url == DEFAULT_SEARCH_URL
        assert config.api_key == DEFAULT_API_KEY
        assert config.editor == "vi"
        assert config.log_level == "WARNING"

    def test_yaml_values(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(yaml.safe_dump({
            "data_dir": str(tmp_path / "data"),
            "editor": "nano",
            "log_level": "info",
        }))

        config = ConfigLoader(str(path), environ={}).load()

        assert config.data_dir == str(tmp_path / "data")
        assert config.editor == "nano"
        assert config.log_level == "INFO"

    def test_environment_overrides_file(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("editor: nano\napi_key: from-file\n")
        environ = {
            "EDITOR": "code --wait",
            "USDA_API_KEY": "from-env",
            "NOSH_SEARCH_URL": "http://localhost:8080/search",
            "NOSH_DATA_DIR": str(tmp_path / "env-data"),
        }

        config = ConfigLoader(str(path), environ=environ).load()

        assert config.editor == "code --wait"
        assert config.api_key == "from-env"
        assert config.search_url == "http://localhost:8080/search"
        assert config.data_dir == str(tmp_path / "env-data")

    def test_empty_environment_value_ignored(self, tmp_path):
        config = ConfigLoader(str(tmp_path / "none.yaml"), environ={"EDITOR": ""}).load()

        assert config.editor == "vi"

    def test_default_path_from_environment(self, tmp_path):
        (tmp_path / "nosh").mkdir()
        (tmp_path / "nosh" / "config.yaml").write_text("editor: ed\n")

        config = ConfigLoader(environ={"XDG_CONFIG_HOME": str(tmp_path)}).load()

        assert config.editor == "ed"

    def test_empty_file(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("")

        assert ConfigLoader(str(path), environ={}).load().editor == "vi"

    def test_non_mapping_rejected(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("- a\n- b\n")

        with pytest.raises(ValueError):
            ConfigLoader(str(path), environ={}).load()

    def test_unknown_setting_rejected(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("colour: blue\n")

        with pytest.raises(ValueError) as exc_info:
            ConfigLoader(str(path), environ={}).load()

        assert "colour" in str(exc_info.value)

    def test_invalid_yaml_rejected(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("editor: [unterminated\n")

        with pytest.raises(ValueError) as exc_info:
            ConfigLoader(str(path), environ={}).load()

        assert "not valid YAML" in str(exc_info.value)
