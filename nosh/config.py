"""Configuration loading from YAML and the environment."""
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from nosh import APP_NAME
from nosh.ingestion.usda_client import DEFAULT_API_KEY, DEFAULT_SEARCH_URL

# Environment variable -> config field
ENV_OVERRIDES = {
    "NOSH_DATA_DIR": "data_dir",
    "NOSH_SEARCH_URL": "search_url",
    "USDA_API_KEY": "api_key",
    "EDITOR": "editor",
    "NOSH_LOG_LEVEL": "log_level",
}


def default_data_dir(environ: Mapping[str, str]) -> str:
    """Return $XDG_DATA_HOME/nosh, falling back to ~/.local/share/nosh."""
    base = environ.get("XDG_DATA_HOME") or str(Path.home() / ".local" / "share")
    return str(Path(base) / APP_NAME)


def default_config_path(environ: Mapping[str, str]) -> Path:
    """Return $XDG_CONFIG_HOME/nosh/config.yaml, falling back to ~/.config."""
    base = environ.get("XDG_CONFIG_HOME") or str(Path.home() / ".config")
    return Path(base) / APP_NAME / "config.yaml"


@dataclass
class NoshConfig:
    """Runtime settings for the nosh command line."""

    data_dir: str
    search_url: str = DEFAULT_SEARCH_URL
    api_key: str = DEFAULT_API_KEY
    editor: str = "vi"
    log_level: str = "WARNING"


class ConfigLoader:
    """Loader for nosh configuration.

    Values come from, in increasing priority: built-in defaults, the YAML
    config file, then environment variables.
    """

    def __init__(
        self,
        yaml_path: Optional[str] = None,
        environ: Optional[Mapping[str, str]] = None,
    ):
        """Initialize config loader.

        Args:
            yaml_path: Path to YAML config file (defaults to the XDG config location)
            environ: Environment mapping (defaults to os.environ)
        """
        self.environ = os.environ if environ is None else environ
        self.yaml_path = Path(yaml_path) if yaml_path else default_config_path(self.environ)

    def load(self) -> NoshConfig:
        """Load configuration.

        A missing config file is not an error.

        Raises:
            ValueError: If the config file is not valid YAML, is not a mapping
                or names unknown settings
        """
        values: Dict[str, Any] = {"data_dir": default_data_dir(self.environ)}
        values.update(self._load_file())

        for env_var, field_name in ENV_OVERRIDES.items():
            value = self.environ.get(env_var)
            if value:
                values[field_name] = value

        values["data_dir"] = str(Path(values["data_dir"]).expanduser())
        if "log_level" in values:
            values["log_level"] = values["log_level"].upper()
        return NoshConfig(**values)

    def _load_file(self) -> Dict[str, Any]:
        if not self.yaml_path.exists():
            return {}

        with open(self.yaml_path, "r") as f:
            try:
                data = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ValueError(f"Config file {self.yaml_path} is not valid YAML: {e}") from e

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ValueError(f"Config file {self.yaml_path} must contain a mapping")

        known = {f.name for f in fields(NoshConfig)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(
                f"Unknown settings in {self.yaml_path}: {', '.join(unknown)}"
            )
        return {key: str(value) for key, value in data.items()}
