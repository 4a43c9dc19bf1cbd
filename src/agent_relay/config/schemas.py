"""Configuration schemas for agent-relay.

This module defines Pydantic models for validating configuration data.
"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class ProviderConfig(BaseModel):
    """Per-agent model settings forwarded on every model request.

    Keys in ``extra`` are passed through to the provider untouched.
    """

    model: str = Field(..., min_length=1, description="Model identifier")
    temperature: float | None = Field(default=None, ge=0, le=2, description="Sampling temperature")
    max_tokens: int | None = Field(default=None, ge=1, description="Maximum tokens to generate")
    top_p: float | None = Field(default=None, gt=0, le=1, description="Nucleus sampling mass")
    extra: dict[str, Any] = Field(default_factory=dict, description="Opaque provider parameters")


class LLMEndpointConfig(BaseModel):
    """Configuration for the OpenAI-compatible endpoint shared by all agents."""

    endpoint: str = Field(..., description="API base URL")
    api_key_env: str = Field(default="OPENAI_API_KEY", description="Environment variable name containing API key")
    api_type: Literal["openai", "deepseek", "glm", "ollama", "custom"] = Field(
        default="openai", description="API type"
    )
    timeout: float = Field(default=60.0, gt=0, description="Request timeout in seconds")
    max_attempts: int = Field(default=3, ge=1, description="Attempts per model call, including the first")


class ToolConfig(BaseModel):
    """An external tool exposed to an agent in OpenAI function format."""

    name: str = Field(..., pattern=r"^[a-zA-Z0-9_-]{1,64}$", description="Function name")
    description: str = Field(..., description="What the tool does")
    parameters: dict[str, Any] = Field(
        default_factory=lambda: {"type": "object", "properties": {}},
        description="JSON Schema for the arguments",
    )


class SupervisorConfig(BaseModel):
    """Inputs for a generated supervisor prompt."""

    language: str | None = Field(default=None, description="Response language (default pt-BR)")
    tone: str | None = Field(default=None, description="Response tone (default concise)")
    additional_instructions: str | None = Field(default=None, description="Appended verbatim")


class AgentConfig(BaseModel):
    """Configuration for one agent and, recursively, its children."""

    identifier: str = Field(..., min_length=1, description="Stable unique identifier")
    name: str = Field(..., min_length=1, description="Name other agents route to")
    goal: str = Field(..., min_length=1, description="What the agent is responsible for")
    prompt: str | None = Field(default=None, description="System prompt template")
    supervisor: SupervisorConfig | None = Field(default=None, description="Generate the prompt as a supervisor")
    provider: ProviderConfig | None = Field(default=None, description="Overrides the default provider")
    supports_interim_messages: bool = Field(default=False, description="Expose interim 'response' arguments")
    enable_finalize_tool: bool = Field(default=False, description="Expose finalize_request")
    tools: list[ToolConfig] = Field(default_factory=list, description="External tools")
    context: dict[str, Any] = Field(default_factory=dict, description="Extra prompt template variables")
    children: list["AgentConfig"] = Field(default_factory=list, description="Sub-agents, in routing order")

    @model_validator(mode="after")
    def validate_prompt_source(self) -> "AgentConfig":
        """Require either an explicit prompt or a supervisor section."""
        if not (self.prompt and self.prompt.strip()) and self.supervisor is None:
            raise ValueError(f"Agent '{self.identifier}' needs a prompt or a supervisor section")
        return self


class EngineConfig(BaseModel):
    """Orchestration engine tuning."""

    max_workers: int = Field(default=8, ge=1, description="Concurrent units of work")
    memory_idle_ttl_seconds: float | None = Field(
        default=None, gt=0, description="Evict sessions idle longer than this (None keeps everything)"
    )


class RelayConfig(BaseModel):
    """Top-level configuration file."""

    model_config = ConfigDict(populate_by_name=True)

    llm: LLMEndpointConfig = Field(..., description="Model endpoint")
    provider: ProviderConfig = Field(..., description="Default provider settings for agents")
    engine: EngineConfig = Field(default_factory=EngineConfig, description="Engine settings")
    root: AgentConfig = Field(..., alias="agent", description="Root of the agent tree")

    @field_validator("root")
    @classmethod
    def validate_unique_identifiers(cls, v: AgentConfig) -> AgentConfig:
        """Reject trees that reuse an identifier."""
        seen: set[str] = set()
        pending = [v]
        while pending:
            node = pending.pop()
            if node.identifier in seen:
                raise ValueError(f"Duplicate agent identifier: {node.identifier}")
            seen.add(node.identifier)
            pending.extend(node.children)
        return v


def validate_relay_config(data: dict[str, Any]) -> RelayConfig:
    """Validate relay configuration data.

    Args:
        data: Raw configuration dictionary

    Returns:
        Validated RelayConfig object

    Raises:
        ValidationError: If the configuration is invalid
    """
    return RelayConfig(**data)
