"""Tool entities for agent-relay.

This module defines tool definitions advertised to the model and the
result shape of external tool executions.
"""

import json
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class ToolDefinition(BaseModel):
    """A function the model may call.

    Attributes:
        name: Function name
        description: What the function does, shown to the model
        parameters: JSON Schema for the arguments
    """

    name: str = Field(..., min_length=1, description="Function name")
    description: str = Field(default="", description="Tool description")
    parameters: dict[str, Any] = Field(
        default_factory=lambda: {"type": "object", "properties": {}, "required": []},
        description="JSON Schema for arguments",
    )

    def to_llm_format(self) -> dict[str, Any]:
        """Export in OpenAI function calling format.

        Returns:
            {"type": "function", "function": {"name", "description", "parameters"}}
        """
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.parameters,
            },
        }


class ToolExecutionStatus(str, Enum):
    """Outcome of an external tool execution."""

    SUCCESS = "SUCCESS"
    ERROR = "ERROR"


class ToolExecutionResult(BaseModel):
    """Result of an external tool execution.

    Failures are reported through ``status`` rather than raised, so the
    calling agent can reflect on them.
    """

    details: Any = Field(default=None, description="Tool output or error description")
    status: ToolExecutionStatus = Field(default=ToolExecutionStatus.SUCCESS)

    @classmethod
    def success(cls, details: Any) -> "ToolExecutionResult":
        return cls(details=details, status=ToolExecutionStatus.SUCCESS)

    @classmethod
    def error(cls, details: Any) -> "ToolExecutionResult":
        return cls(details=details, status=ToolExecutionStatus.ERROR)

    @property
    def is_success(self) -> bool:
        return self.status == ToolExecutionStatus.SUCCESS

    def details_json(self) -> str:
        """Serialize ``details`` as JSON, falling back to ``str`` for odd types."""
        return json.dumps(self.details, ensure_ascii=False, default=str)
