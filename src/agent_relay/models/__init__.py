"""Data models for agent-relay."""

from .agent import Agent
from .completion import Choice, Message, ModelRequest, ModelResponse, ToolCall
from .events import AgentRequest, Answer, ToolRequest
from .memory import RecordEvent, Status
from .routing import FinalizeMapper, RecordEventMapper, RouteMapper, RouteParentMapper
from .tool import ToolDefinition, ToolExecutionResult, ToolExecutionStatus

__all__ = [
    # Core entities
    "Agent",
    "Status",
    "RecordEvent",
    # Tools
    "ToolDefinition",
    "ToolExecutionResult",
    "ToolExecutionStatus",
    # Routing payloads
    "RouteMapper",
    "RouteParentMapper",
    "RecordEventMapper",
    "FinalizeMapper",
    # Model I/O
    "Message",
    "ModelRequest",
    "ModelResponse",
    "Choice",
    "ToolCall",
    # Units of work
    "AgentRequest",
    "ToolRequest",
    "Answer",
]
