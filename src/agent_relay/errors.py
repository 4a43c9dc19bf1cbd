"""Exceptions raised by agent-relay.

Orchestration errors abort the current step only. Memory is written after
payloads are parsed and targets resolved, so a failed step leaves the
timelines unchanged.
"""


class OrchestrationError(Exception):
    """Base class for errors that abort an orchestration step."""

    pass


class GraphError(OrchestrationError):
    """Invalid agent graph change (cycle, second parent, frozen graph)."""

    pass


class ResolutionError(OrchestrationError):
    """A routing target could not be resolved."""

    pass


class NoParentError(ResolutionError):
    """An agent without a parent tried to hand control upwards."""

    def __init__(self, agent_id: str) -> None:
        super().__init__(f"Agent '{agent_id}' has no parent")
        self.agent_id = agent_id


class PayloadParseError(OrchestrationError):
    """Tool-call arguments did not match the expected payload."""

    def __init__(self, tool_name: str, reason: str) -> None:
        super().__init__(f"Invalid arguments for '{tool_name}': {reason}")
        self.tool_name = tool_name
        self.reason = reason


class ModelCallError(OrchestrationError):
    """The model provider call failed."""

    pass
