"""Configuration management for agent-relay."""

from .loader import (
    get_default_config_dir,
    load_config_file,
    load_relay_config,
    load_yaml_file,
    resolve_config_path,
)
from .schemas import (
    AgentConfig,
    EngineConfig,
    LLMEndpointConfig,
    ProviderConfig,
    RelayConfig,
    SupervisorConfig,
    ToolConfig,
    validate_relay_config,
)

__all__ = [
    # Loader
    "load_relay_config",
    "load_config_file",
    "load_yaml_file",
    "get_default_config_dir",
    "resolve_config_path",
    # Schemas
    "RelayConfig",
    "AgentConfig",
    "ProviderConfig",
    "LLMEndpointConfig",
    "EngineConfig",
    "ToolConfig",
    "SupervisorConfig",
    "validate_relay_config",
]
