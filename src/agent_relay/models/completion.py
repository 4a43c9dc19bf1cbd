"""Model request and response shapes for agent-relay.

These are provider-neutral; the OpenAI client converts to and from its
wire format.
"""

from typing import Any, Optional

from pydantic import BaseModel, Field


class Message(BaseModel):
    """A chat message sent to the model.

    Attributes:
        role: Message role ("system", "user", "assistant")
        content: Message content
    """

    role: str = Field(..., description="Message role")
    content: str = Field(..., description="Message content")

    @classmethod
    def system(cls, content: str) -> "Message":
        return cls(role="system", content=content)

    @classmethod
    def user(cls, content: str) -> "Message":
        return cls(role="user", content=content)


class ModelRequest(BaseModel):
    """Everything needed for one chat completion call."""

    model: str = Field(..., description="Model identifier")
    messages: list[Message] = Field(default_factory=list, description="Ordered conversation")
    tools: list[dict[str, Any]] = Field(default_factory=list, description="Tools in OpenAI function format")
    tool_choice: str = Field(default="auto", description="Tool choice")
    temperature: Optional[float] = Field(None, description="Sampling temperature")
    max_tokens: Optional[int] = Field(None, description="Maximum tokens to generate")
    top_p: Optional[float] = Field(None, description="Nucleus sampling mass")
    extra: dict[str, Any] = Field(default_factory=dict, description="Provider pass-through parameters")

    def to_params(self) -> dict[str, Any]:
        """Build keyword arguments for ``chat.completions.create``.

        Unset sampling options are omitted; ``tool_choice`` is only sent
        along with tools.

        Returns:
            Parameter dictionary
        """
        params: dict[str, Any] = {
            "model": self.model,
            "messages": [message.model_dump() for message in self.messages],
        }
        if self.temperature is not None:
            params["temperature"] = self.temperature
        if self.max_tokens is not None:
            params["max_tokens"] = self.max_tokens
        if self.top_p is not None:
            params["top_p"] = self.top_p
        if self.tools:
            params["tools"] = self.tools
            params["tool_choice"] = self.tool_choice
        params.update(self.extra)
        return params


class ToolCall(BaseModel):
    """A tool invocation requested by the model.

    Attributes:
        id: Provider call ID
        name: Function name
        arguments: Raw JSON arguments string, as sent by the model
    """

    id: str = Field(..., description="Call ID")
    name: str = Field(..., description="Function name")
    arguments: str = Field(default="{}", description="Raw JSON arguments")


class Choice(BaseModel):
    """One completion choice."""

    text: Optional[str] = Field(None, description="Assistant text")
    tool_calls: list[ToolCall] = Field(default_factory=list, description="Requested tool calls")
    finish_reason: Optional[str] = Field(None, description="Why generation stopped")

    @property
    def has_text(self) -> bool:
        return bool(self.text and self.text.strip())

    @property
    def has_tool_calls(self) -> bool:
        return len(self.tool_calls) > 0


class ModelResponse(BaseModel):
    """A chat completion result."""

    id: Optional[str] = Field(None, description="Provider response ID")
    choices: list[Choice] = Field(default_factory=list, description="Completion choices")
