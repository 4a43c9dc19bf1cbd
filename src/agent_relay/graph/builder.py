"""Explicit construction of agent graphs.

Graphs are assembled through ``AgentGraphBuilder`` (or straight from a
``RelayConfig``) and frozen once, so tool catalogs are computed a single
time from the final tree shape.
"""

from typing import Optional

from ..config.schemas import AgentConfig, ProviderConfig, RelayConfig
from ..models import Agent, ToolDefinition
from .agent_graph import AgentGraph, AgentRef
from .supervisor import SupervisorSpec, build_supervisor_prompt


class AgentGraphBuilder:
    """Fluent builder for ``AgentGraph``.

    Example:
        graph = (
            AgentGraphBuilder()
            .add(supervisor)
            .add(billing, parent=supervisor)
            .build()
        )
    """

    def __init__(self) -> None:
        self._graph = AgentGraph()

    def add(self, agent: Agent, parent: Optional[AgentRef] = None) -> "AgentGraphBuilder":
        """Add an agent, optionally under an already added parent."""
        self._graph.add_agent(agent)
        if parent is not None:
            self._graph.attach_child(parent, agent)
        return self

    def link(self, parent: AgentRef, child: AgentRef) -> "AgentGraphBuilder":
        """Attach two agents that were already added."""
        self._graph.attach_child(parent, child)
        return self

    def build(self) -> AgentGraph:
        """Freeze and return the graph."""
        return self._graph.freeze()


def agent_from_config(config: AgentConfig, default_provider: ProviderConfig) -> Agent:
    """Create an ``Agent`` from its configuration section.

    Args:
        config: Agent configuration
        default_provider: Provider used when the section has none

    Returns:
        Agent instance
    """
    prompt = config.prompt
    if config.supervisor is not None and not (prompt and prompt.strip()):
        spec = SupervisorSpec(
            goal=config.goal,
            language=config.supervisor.language,
            tone=config.supervisor.tone,
            additional_instructions=config.supervisor.additional_instructions,
        )
        prompt = build_supervisor_prompt(spec, child_count=len(config.children))

    return Agent(
        identifier=config.identifier,
        name=config.name,
        goal=config.goal,
        prompt=prompt,
        provider=config.provider or default_provider,
        supports_interim_messages=config.supports_interim_messages,
        enable_finalize_tool=config.enable_finalize_tool,
        tools=[ToolDefinition(**tool.model_dump()) for tool in config.tools],
        context=dict(config.context),
    )


def build_agent_graph(config: RelayConfig) -> AgentGraph:
    """Build and freeze the agent tree described by a configuration.

    Args:
        config: Validated relay configuration

    Returns:
        Frozen agent graph
    """
    builder = AgentGraphBuilder()
    pending: list[tuple[AgentConfig, Optional[str]]] = [(config.root, None)]
    while pending:
        agent_config, parent_id = pending.pop(0)
        builder.add(agent_from_config(agent_config, config.provider), parent=parent_id)
        pending.extend((child, agent_config.identifier) for child in agent_config.children)
    return builder.build()
