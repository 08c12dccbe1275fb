"""Configuration file loading."""

import json
from pathlib import Path

from pydantic import ValidationError

from cicd_provisioner.config.models import ProvisionerConfig
from cicd_provisioner.config.paths import config_file_path
from cicd_provisioner.config.settings import build_config


class ConfigError(RuntimeError):
    """Configuration related errors."""


def load_config(path: Path | None = None) -> ProvisionerConfig:
    """Load provisioner configuration.

    An explicit path must exist. Without one, the user config file is read
    when present and defaults are used otherwise. Environment variables are
    layered on top in both cases.

    Args:
        path: Optional path to a JSON configuration file.

    Returns:
        The loaded configuration object.
    """
    if path is not None and not path.exists():
        raise ConfigError(f"Configuration file not found: {path}")

    source = path or config_file_path()
    data: dict = {}
    if source.exists():
        try:
            data = json.loads(source.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise ConfigError(f"Invalid configuration file: {exc}") from exc

        if not isinstance(data, dict):
            raise ConfigError("Configuration file must contain a JSON object.")

    try:
        return build_config(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration values: {exc}") from exc
