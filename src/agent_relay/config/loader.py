"""Configuration loader for agent-relay.

This module loads YAML and JSON configuration files with environment
variable expansion support.
"""

import json
import os
import re
from pathlib import Path
from typing import Any

import yaml

from .schemas import RelayConfig, validate_relay_config

# ${VAR_NAME} or ${VAR_NAME:-default}
ENV_VAR_PATTERN = re.compile(r"\$\{([^}:]+)(?::-([^}]*))?\}")

DEFAULT_CONFIG_NAME = "relay.yaml"


def _expand_env_vars(value: Any) -> Any:
    """Recursively expand environment variables in a value.

    Args:
        value: The value to expand (can be str, dict, list)

    Returns:
        The value with environment variables expanded
    """
    if isinstance(value, str):
        def replace_env_var(match: re.Match[str]) -> str:
            default = match.group(2) if match.group(2) is not None else ""
            return os.environ.get(match.group(1), default)

        return ENV_VAR_PATTERN.sub(replace_env_var, value)

    if isinstance(value, dict):
        return {k: _expand_env_vars(v) for k, v in value.items()}

    if isinstance(value, list):
        return [_expand_env_vars(item) for item in value]

    return value


def get_default_config_dir() -> Path:
    """Get the default configuration directory path.

    Returns ~/.agent-relay/, creating it if it doesn't exist.

    Returns:
        Path to the default configuration directory
    """
    config_dir = Path.home() / ".agent-relay"
    config_dir.mkdir(parents=True, exist_ok=True)
    return config_dir


def load_yaml_file(file_path: str | Path) -> dict[str, Any]:
    """Load a YAML file and return its contents as a dictionary.

    Args:
        file_path: Path to the YAML file

    Returns:
        Dictionary containing the YAML contents

    Raises:
        FileNotFoundError: If the file doesn't exist
        yaml.YAMLError: If the file is not valid YAML
    """
    path = Path(file_path)
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {file_path}")

    with open(path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def load_config_file(
    file_path: str | Path,
    config_type: str = "auto",
    expand_env: bool = True,
) -> dict[str, Any]:
    """Load a configuration file (YAML or JSON).

    Args:
        file_path: Path to the configuration file
        config_type: Type of config ("yaml", "json", or "auto" to detect from extension)
        expand_env: Whether to expand environment variables

    Returns:
        Dictionary containing the configuration

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the file type is unsupported
    """
    path = Path(file_path)

    if config_type == "auto":
        suffix = path.suffix.lower()
        if suffix in [".yaml", ".yml"]:
            config_type = "yaml"
        elif suffix == ".json":
            config_type = "json"
        else:
            raise ValueError(f"Cannot detect config type from extension: {suffix}")

    if config_type == "yaml":
        config = load_yaml_file(path)
    elif config_type == "json":
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {file_path}")
        with open(path, "r", encoding="utf-8") as f:
            config = json.load(f)
    else:
        raise ValueError(f"Unsupported config type: {config_type}")

    if expand_env:
        config = _expand_env_vars(config)

    return config


def resolve_config_path(file_path: str | Path | None = None) -> Path:
    """Resolve the configuration file to load.

    Args:
        file_path: Explicit path; ~/.agent-relay/relay.yaml when omitted

    Returns:
        Path to the configuration file
    """
    if file_path is None:
        return get_default_config_dir() / DEFAULT_CONFIG_NAME
    return Path(file_path).expanduser()


def load_relay_config(file_path: str | Path | None = None) -> RelayConfig:
    """Load and validate a relay configuration file.

    Args:
        file_path: Path to the configuration file

    Returns:
        Validated RelayConfig object

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValidationError: If the configuration is invalid
    """
    config_data = load_config_file(resolve_config_path(file_path))
    return validate_relay_config(config_data)
