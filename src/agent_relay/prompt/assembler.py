"""Context assembly for model calls.

A model call for an agent carries, in order: the rendered system prompt,
an optional handoff message, an optional episodic summary and the user
message of the turn.
"""

from typing import Any, Optional, Sequence

from ..graph import AgentGraph
from ..memory import EpisodicMemoryStore
from ..models import Agent, AgentRequest, Message, ModelRequest, RecordEvent
from ..utils import get_logger
from .renderer import JinjaTemplateRenderer, TemplateRenderer
from .templates import EPISODIC_MEMORY, STATUS_USAGE

logger = get_logger(__name__)


class ContextAssembler:
    """Builds the message list and model request for an agent."""

    def __init__(
        self,
        graph: AgentGraph,
        memory: EpisodicMemoryStore,
        renderer: Optional[TemplateRenderer] = None,
    ) -> None:
        """Initialize the assembler.

        Args:
            graph: Agent graph, used for child listings and tool catalogs
            memory: Episodic memory store
            renderer: Template renderer (Jinja sandbox by default)
        """
        self.graph = graph
        self.memory = memory
        self.renderer = renderer or JinjaTemplateRenderer()

    def render(self, template: str, **variables: Any) -> str:
        """Render a template with keyword variables."""
        return self.renderer.render(template, variables).strip()

    def agent_variables(self, agent: Agent) -> dict[str, Any]:
        """Variables available to an agent's prompt template.

        ``agent.context`` entries override the built-in ones.
        """
        children = self.graph.children_of(agent) if agent in self.graph else []
        variables: dict[str, Any] = {
            "identifier": agent.identifier,
            "name": agent.name,
            "goal": agent.goal,
            "agents": [
                {"identifier": child.identifier, "name": child.name, "goal": child.goal}
                for child in children
            ],
        }
        variables.update(agent.context)
        return variables

    def system_prompt(self, agent: Agent) -> str:
        """Render an agent's system prompt."""
        return self.renderer.render(agent.prompt, self.agent_variables(agent))

    def episodic_summary(self, timeline: Sequence[RecordEvent]) -> Optional[str]:
        """Render a timeline for the model.

        The most recent record is shown on its own, followed by the full
        numbered history.

        Args:
            timeline: Records, oldest first

        Returns:
            Rendered summary, or None for an empty timeline
        """
        if not timeline:
            return None
        return self.render(
            EPISODIC_MEMORY,
            status_usage=STATUS_USAGE,
            current=timeline[-1],
            records=list(timeline),
        )

    def episodic_context_for(self, session_id: str, agent: Agent) -> Optional[str]:
        """Render the episodic summary of an agent's timeline in a session."""
        return self.episodic_summary(self.memory.timeline(session_id, agent.identifier))

    def build_messages(
        self,
        agent: Agent,
        handoff_context: Optional[str] = None,
        episodic_context: Optional[str] = None,
        user_message: Optional[str] = None,
        session_id: Optional[str] = None,
    ) -> list[Message]:
        """Assemble the ordered message list for a model call.

        When ``episodic_context`` is omitted and ``session_id`` is given, a
        summary is rendered from the agent's timeline; an empty timeline
        adds no episodic message.

        Args:
            agent: Agent being called
            handoff_context: Handoff system message
            episodic_context: Pre-rendered episodic summary
            user_message: User message of the turn
            session_id: Session used to read the agent's timeline

        Returns:
            [system prompt, handoff?, episodic?, user?]
        """
        messages = [Message.system(self.system_prompt(agent))]

        if handoff_context:
            messages.append(Message.system(handoff_context))

        if episodic_context is None and session_id is not None:
            episodic_context = self.episodic_context_for(session_id, agent)
        if episodic_context:
            messages.append(Message.system(episodic_context))

        if user_message:
            messages.append(Message.user(user_message))

        return messages

    def build_request(self, request: AgentRequest) -> ModelRequest:
        """Build the model request for a unit of work.

        Args:
            request: Pending agent request

        Returns:
            Model request with the agent's provider settings and tool catalog
        """
        agent = request.agent
        provider = agent.provider
        messages = self.build_messages(
            agent,
            handoff_context=request.handoff_context,
            episodic_context=request.episodic_context,
            user_message=request.user_message,
            session_id=request.session_id,
        )
        tools = [tool.to_llm_format() for tool in self.graph.tools(agent)]
        logger.debug(
            f"Assembled {len(messages)} messages and {len(tools)} tools for agent '{agent.identifier}'"
        )
        return ModelRequest(
            model=provider.model,
            messages=messages,
            tools=tools,
            tool_choice=agent.tool_choice,
            temperature=provider.temperature,
            max_tokens=provider.max_tokens,
            top_p=provider.top_p,
            extra=dict(provider.extra),
        )
