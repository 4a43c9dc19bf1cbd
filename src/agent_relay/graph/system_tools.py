"""Orchestration tools advertised to agents.

These tools are not executed by a tool backend; the tool router turns
calls to them into handoffs between agents.
"""

from ..models import Agent, ToolDefinition

ROUTE_TO_AGENT = "route_to_agent"
ROUTE_TO_PARENT = "route_to_parent"
RECORD_EVENT = "record_event"
FINALIZE_REQUEST = "finalize_request"
SELF_REFLECTION = "self_reflection"

SYSTEM_TOOL_NAMES = frozenset({ROUTE_TO_AGENT, ROUTE_TO_PARENT, RECORD_EVENT, FINALIZE_REQUEST, SELF_REFLECTION})


def _string_property(description: str) -> dict[str, str]:
    return {"type": "string", "description": description}


def _object_schema(properties: dict[str, dict[str, str]], required: list[str]) -> dict:
    return {"type": "object", "properties": properties, "required": required}


def route_to_agent_tool(agent: Agent) -> ToolDefinition:
    """Build the delegate-down tool for an agent with children.

    Args:
        agent: Agent that will own the tool

    Returns:
        The ``route_to_agent`` definition
    """
    properties = {
        "agent": _string_property(
            "This field specifies exactly which agent is responsible for handling the requested operation.\n"
            "The value must match one of the available agents provided to the routing agent."
        ),
        "objective": _string_property(
            "This field defines what the agent is expected to accomplish, without prescribing how the task "
            "should be performed. The objective must be clear, concise, and scoped to a single responsibility."
        ),
        "input": _string_property(
            "This field contains the user-provided data or contextual information that the target agent "
            "will process in order to fulfill the objective."
        ),
    }
    required = ["agent", "objective", "input"]
    if agent.supports_interim_messages:
        properties["response"] = _string_property(
            "Generates an intermediate response during agent routing, informing the user that the system is "
            "processing the request and preparing an action based on the user's input."
        )
        required.append("response")

    return ToolDefinition(
        name=ROUTE_TO_AGENT,
        description=(
            "Select, from the available options, the agent that best fulfills the user's request. "
            "One of the provided agents (parameters) must be chosen to execute the task."
        ),
        parameters=_object_schema(properties, required),
    )


def route_to_parent_tool(agent: Agent) -> ToolDefinition:
    """Build the return-up tool for an agent with a parent."""
    properties = {
        "summary": _string_property(
            "A concise summary of what has already been executed by this agent. "
            "Include completed steps and relevant outcomes, without technical details."
        ),
    }
    required = ["summary"]
    if agent.supports_interim_messages:
        properties["response"] = _string_property(
            "An optional intermediate message informing the user that execution "
            "is being handed back to the parent agent for continuation."
        )
        required.append("response")

    return ToolDefinition(
        name=ROUTE_TO_PARENT,
        description=(
            "Returns control to the parent agent by summarizing what has been done "
            "and what remains to be completed."
        ),
        parameters=_object_schema(properties, required),
    )


def record_event_tool() -> ToolDefinition:
    """Build the status tool every agent carries."""
    properties = {
        "status": {
            "type": "string",
            "enum": ["WAIT_USER_INPUT", "FINISHED"],
            "description": (
                "WAIT_USER_INPUT when the agent asks the user for additional information in order to "
                "continue the process. FINISHED when the agent determines that it has completed the "
                "requested task."
            ),
        },
        "content": _string_property(
            "For WAIT_USER_INPUT, the question(s) that will be presented to the user. "
            "For FINISHED, a summary of what was performed."
        ),
    }
    return ToolDefinition(
        name=RECORD_EVENT,
        description=(
            "Indicates the current execution state of the session. Possible values are WAIT_USER_INPUT "
            "and FINISHED. This state is used by the orchestrator to determine the next execution step."
        ),
        parameters=_object_schema(properties, ["status", "content"]),
    )


def finalize_request_tool() -> ToolDefinition:
    """Build the optional closing tool."""
    properties = {
        "summary": _string_property(
            "A final user-facing message that summarizes what was completed and confirms closure. "
            "Generate it in the same language the user is using."
        ),
    }
    return ToolDefinition(
        name=FINALIZE_REQUEST,
        description=(
            "Use this function to close the current request when no further actions, inputs, "
            "or delegations are required."
        ),
        parameters=_object_schema(properties, ["summary"]),
    )
