"""Agent entity for agent-relay.

An agent is a system prompt plus a set of tools bound to one model
provider. Parent/child relationships are not stored on the agent; they
live in the agent graph, which also derives the routing tools.
"""

from typing import Any

from pydantic import BaseModel, Field, field_validator

from ..config.schemas import ProviderConfig
from .tool import ToolDefinition


class Agent(BaseModel):
    """Represents one node of the agent tree.

    Attributes:
        identifier: Stable unique identifier, used as the memory key
        name: Name other agents use when routing to this one
        goal: Short statement of responsibility, shown to the parent
        prompt: System prompt template
        provider: Model settings for this agent's requests
        supports_interim_messages: Whether routing tools accept a user-facing "response"
        tool_choice: Tool choice forwarded to the provider
        tools: Explicitly registered external tools
        enable_finalize_tool: Whether finalize_request is advertised
        context: Extra variables for the prompt template
    """

    identifier: str = Field(..., description="Stable unique identifier")
    name: str = Field(..., description="Routing name")
    goal: str = Field(..., description="Agent's responsibility")
    prompt: str = Field(..., description="System prompt template")
    provider: ProviderConfig = Field(..., description="Model settings")
    supports_interim_messages: bool = Field(default=False, description="Interim user-facing messages")
    tool_choice: str = Field(default="auto", description="Provider tool choice")
    tools: list[ToolDefinition] = Field(default_factory=list, description="External tools")
    enable_finalize_tool: bool = Field(default=False, description="Advertise finalize_request")
    context: dict[str, Any] = Field(default_factory=dict, description="Prompt template variables")

    @field_validator("identifier", "name", "goal", "prompt")
    @classmethod
    def validate_not_blank(cls, v: str, info) -> str:
        """Reject blank identity and prompt fields."""
        if not v or not v.strip():
            raise ValueError(f"{info.field_name} must not be blank")
        return v

    def has_tool(self, tool_name: str) -> bool:
        """Check if a tool with this name was registered explicitly.

        Args:
            tool_name: Name of the tool to check

        Returns:
            True if the agent registered the tool
        """
        return any(tool.name == tool_name for tool in self.tools)
