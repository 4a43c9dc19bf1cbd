"""Agent graph for agent-relay.

The graph is a rooted tree of agents stored in a networkx DiGraph with
edges pointing from parent to child. Tool catalogs are derived from the
tree shape: agents with children get ``route_to_agent``, agents with a
parent get ``route_to_parent`` and every agent gets ``record_event``.
"""

from typing import Iterator, Union

import networkx as nx

from ..errors import GraphError, ResolutionError
from ..models import Agent, ToolDefinition
from ..utils import get_logger
from .system_tools import (
    SYSTEM_TOOL_NAMES,
    finalize_request_tool,
    record_event_tool,
    route_to_agent_tool,
    route_to_parent_tool,
)

logger = get_logger(__name__)

AgentRef = Union[Agent, str]


def _identifier(ref: AgentRef) -> str:
    return ref.identifier if isinstance(ref, Agent) else ref


class AgentGraph:
    """Parent/child relationships between agents.

    Mutating methods are only allowed until ``freeze()`` is called. A
    frozen graph caches every agent's tool catalog.

    Attributes:
        graph: Directed graph, parent -> child, agents stored under the "agent" node attribute
    """

    def __init__(self) -> None:
        self.graph: nx.DiGraph = nx.DiGraph()
        self._frozen = False
        self._catalogs: dict[str, list[ToolDefinition]] = {}

    # -- construction -------------------------------------------------

    def add_agent(self, agent: Agent) -> None:
        """Add an agent with no relationships.

        Args:
            agent: Agent to add

        Raises:
            GraphError: If the graph is frozen or the identifier is taken
        """
        self._ensure_mutable()
        if agent.identifier in self.graph:
            raise GraphError(f"Agent '{agent.identifier}' is already in the graph")
        self.graph.add_node(agent.identifier, agent=agent)

    def attach_child(self, parent: AgentRef, child: AgentRef) -> None:
        """Make ``child`` a child of ``parent``.

        Attaching an existing child again is a no-op.

        Args:
            parent: Parent agent or identifier
            child: Child agent or identifier

        Raises:
            GraphError: If the graph is frozen, the child already has another
                parent, or the edge would create a cycle
        """
        self._ensure_mutable()
        parent_id = self._require(parent)
        child_id = self._require(child)

        if self.graph.has_edge(parent_id, child_id):
            return

        current_parent = self._parent_id(child_id)
        if current_parent is not None:
            raise GraphError(
                f"Agent '{child_id}' already has parent '{current_parent}', cannot attach to '{parent_id}'"
            )

        if parent_id == child_id or nx.has_path(self.graph, child_id, parent_id):
            raise GraphError(f"Attaching '{child_id}' under '{parent_id}' would create a cycle")

        self.graph.add_edge(parent_id, child_id)
        logger.debug(f"Attached agent '{child_id}' under '{parent_id}'")

    def set_parent(self, agent: AgentRef, parent: AgentRef) -> None:
        """Make ``parent`` the parent of ``agent``. Same rules as ``attach_child``."""
        self.attach_child(parent, agent)

    def freeze(self) -> "AgentGraph":
        """Validate the graph and make it immutable.

        Returns:
            Self, for chaining

        Raises:
            GraphError: If the graph is empty or not a tree
        """
        if self._frozen:
            return self
        if len(self.graph) == 0:
            raise GraphError("Agent graph is empty")
        if not nx.is_directed_acyclic_graph(self.graph):
            cycles = list(nx.simple_cycles(self.graph))
            raise GraphError(f"Agent graph contains cycles: {cycles}")

        self._catalogs = {identifier: self._build_catalog(identifier) for identifier in self.graph.nodes}
        self._frozen = True
        logger.info(f"Agent graph frozen with {len(self.graph)} agents and roots {[a.identifier for a in self.roots()]}")
        return self

    @property
    def is_frozen(self) -> bool:
        return self._frozen

    # -- queries ------------------------------------------------------

    def get(self, identifier: str) -> Agent:
        """Get an agent by identifier.

        Raises:
            ResolutionError: If no agent has this identifier
        """
        if identifier not in self.graph:
            raise ResolutionError(f"Unknown agent '{identifier}'")
        return self.graph.nodes[identifier]["agent"]

    def agents(self) -> list[Agent]:
        """All agents in insertion order."""
        return [data["agent"] for _, data in self.graph.nodes(data=True)]

    def parent_of(self, agent: AgentRef) -> Agent | None:
        """Get the parent of an agent, or None for a root."""
        parent_id = self._parent_id(self._require(agent))
        return self.get(parent_id) if parent_id is not None else None

    def children_of(self, agent: AgentRef) -> list[Agent]:
        """Get the children of an agent in attachment order."""
        return [self.get(child_id) for child_id in self.graph.successors(self._require(agent))]

    def roots(self) -> list[Agent]:
        """Agents without a parent."""
        return [self.get(node) for node in self.graph.nodes if self.graph.in_degree(node) == 0]

    @property
    def root(self) -> Agent:
        """The single root agent.

        Raises:
            GraphError: If the graph has zero or several roots
        """
        roots = self.roots()
        if len(roots) != 1:
            raise GraphError(f"Expected exactly one root agent, found {len(roots)}")
        return roots[0]

    def walk(self, agent: AgentRef | None = None) -> Iterator[tuple[int, Agent]]:
        """Depth-first traversal yielding ``(depth, agent)`` pairs.

        Args:
            agent: Start of the traversal; every root when omitted
        """
        starts = [self.get(_identifier(agent))] if agent is not None else self.roots()
        for start in starts:
            stack = [(0, start)]
            while stack:
                depth, current = stack.pop()
                yield depth, current
                for child in reversed(self.children_of(current)):
                    stack.append((depth + 1, child))

    def tools(self, agent: AgentRef) -> list[ToolDefinition]:
        """Get the tool catalog advertised to an agent.

        Order: explicitly registered tools, ``route_to_agent`` (with
        children), ``route_to_parent`` (with a parent), ``record_event``,
        then ``finalize_request`` when enabled.

        Args:
            agent: Agent or identifier

        Returns:
            Ordered list of tool definitions
        """
        identifier = self._require(agent)
        if self._frozen:
            return list(self._catalogs[identifier])
        return self._build_catalog(identifier)

    def resolve_by_name_or_id(self, agent: AgentRef, name: str) -> Agent:
        """Find a child of ``agent`` by name, then by identifier.

        Args:
            agent: Acting agent
            name: Name or identifier given by the model

        Returns:
            The matching child

        Raises:
            ResolutionError: If no child matches
        """
        children = self.children_of(agent)
        wanted = name.strip()
        for child in children:
            if child.name == wanted:
                return child
        for child in children:
            if child.identifier == wanted:
                return child
        raise ResolutionError(
            f"Agent '{_identifier(agent)}' has no child named '{name}'; "
            f"available: {[child.name for child in children]}"
        )

    def __contains__(self, agent: object) -> bool:
        if isinstance(agent, (Agent, str)):
            return _identifier(agent) in self.graph
        return False

    def __len__(self) -> int:
        return len(self.graph)

    # -- internals ----------------------------------------------------

    def _ensure_mutable(self) -> None:
        if self._frozen:
            raise GraphError("Agent graph is frozen")

    def _require(self, agent: AgentRef) -> str:
        identifier = _identifier(agent)
        if identifier not in self.graph:
            raise ResolutionError(f"Unknown agent '{identifier}'")
        return identifier

    def _parent_id(self, identifier: str) -> str | None:
        predecessors = list(self.graph.predecessors(identifier))
        return predecessors[0] if predecessors else None

    def _build_catalog(self, identifier: str) -> list[ToolDefinition]:
        agent = self.get(identifier)
        catalog = list(agent.tools)
        if self.graph.out_degree(identifier) > 0:
            catalog.append(route_to_agent_tool(agent))
        if self._parent_id(identifier) is not None:
            catalog.append(route_to_parent_tool(agent))
        catalog.append(record_event_tool())
        if agent.enable_finalize_tool:
            catalog.append(finalize_request_tool())

        names = [tool.name for tool in catalog]
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            logger.warning(f"Agent '{identifier}' advertises duplicate tool names {duplicates}; first match wins")
        shadowed = sorted(tool.name for tool in agent.tools if tool.name in SYSTEM_TOOL_NAMES)
        if shadowed:
            logger.warning(f"Agent '{identifier}' registers tools named like orchestration tools: {shadowed}")
        return catalog
