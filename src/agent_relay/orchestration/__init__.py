"""Orchestration: routing tool calls between agents and driving the model loop."""

from .dispatcher import OrchestrationDispatcher
from .engine import OrchestrationEngine, StepErrorListener, StepFailure
from .router import DelegationQueue, ToolKind, ToolRouter, classify_tool, parse_payload
from .sink import AnswerListener, AnswerSink

__all__ = [
    "OrchestrationEngine",
    "StepFailure",
    "StepErrorListener",
    "OrchestrationDispatcher",
    "ToolRouter",
    "ToolKind",
    "DelegationQueue",
    "classify_tool",
    "parse_payload",
    "AnswerSink",
    "AnswerListener",
]
