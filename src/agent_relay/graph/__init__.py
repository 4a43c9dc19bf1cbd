"""Agent tree construction and tool catalog derivation."""

from .agent_graph import AgentGraph
from .builder import AgentGraphBuilder, agent_from_config, build_agent_graph
from .supervisor import SupervisorSpec, build_supervisor_prompt
from .system_tools import (
    FINALIZE_REQUEST,
    RECORD_EVENT,
    ROUTE_TO_AGENT,
    ROUTE_TO_PARENT,
    SELF_REFLECTION,
    SYSTEM_TOOL_NAMES,
)

__all__ = [
    "AgentGraph",
    "AgentGraphBuilder",
    "agent_from_config",
    "build_agent_graph",
    "SupervisorSpec",
    "build_supervisor_prompt",
    # Tool names
    "ROUTE_TO_AGENT",
    "ROUTE_TO_PARENT",
    "RECORD_EVENT",
    "FINALIZE_REQUEST",
    "SELF_REFLECTION",
    "SYSTEM_TOOL_NAMES",
]
