"""Tool-call routing.

Every tool call is classified once into a ``ToolKind``. Orchestration
kinds move control between agents and write the episodic memory of both
sides; anything else is an external tool executed through the
``ToolListener``.

Memory is only written after the payload is parsed and the target agent
resolved, so a failed routing step leaves every timeline unchanged.
"""

import threading
from collections import deque
from enum import Enum
from typing import Awaitable, Callable, Optional, TypeVar, Union

from pydantic import BaseModel, ValidationError

from ..errors import NoParentError, PayloadParseError
from ..graph import (
    FINALIZE_REQUEST,
    RECORD_EVENT,
    ROUTE_TO_AGENT,
    ROUTE_TO_PARENT,
    SELF_REFLECTION,
    AgentGraph,
)
from ..memory import EpisodicMemoryStore
from ..models import (
    Agent,
    AgentRequest,
    FinalizeMapper,
    RecordEvent,
    RecordEventMapper,
    RouteMapper,
    RouteParentMapper,
    Status,
    ToolCall,
    ToolExecutionResult,
    ToolRequest,
)
from ..prompt import ContextAssembler
from ..prompt import templates
from ..tools import ToolListener
from ..utils import get_logger
from .sink import AnswerSink

logger = get_logger(__name__)

PayloadT = TypeVar("PayloadT", bound=BaseModel)


class ToolKind(str, Enum):
    """What a tool call does to the control flow."""

    DELEGATE_DOWN = "DELEGATE_DOWN"
    RETURN_UP = "RETURN_UP"
    SELF_REFLECT = "SELF_REFLECT"
    FINALIZE = "FINALIZE"
    EXTERNAL = "EXTERNAL"


_TOOL_KINDS: dict[str, ToolKind] = {
    ROUTE_TO_AGENT: ToolKind.DELEGATE_DOWN,
    ROUTE_TO_PARENT: ToolKind.RETURN_UP,
    SELF_REFLECTION: ToolKind.SELF_REFLECT,
    RECORD_EVENT: ToolKind.FINALIZE,
    FINALIZE_REQUEST: ToolKind.FINALIZE,
}

# Statuses an agent may record through record_event / finalize_request.
FINALIZE_STATUSES = frozenset({Status.WAIT_USER_INPUT, Status.FINISHED, Status.FINISHED_TOOL_EXECUTION})


def classify_tool(name: str) -> ToolKind:
    """Classify a tool name. Unknown names are external tools."""
    return _TOOL_KINDS.get(name, ToolKind.EXTERNAL)


def parse_payload(model: type[PayloadT], tool_call: ToolCall) -> PayloadT:
    """Parse a tool call's JSON arguments into a payload model.

    Raises:
        PayloadParseError: If the arguments are not valid JSON or miss fields
    """
    try:
        return model.model_validate_json(tool_call.arguments or "{}")
    except ValidationError as e:
        raise PayloadParseError(tool_call.name, str(e)) from e


class DelegationQueue:
    """FIFO of postponed ``route_to_agent`` calls per (session, agent).

    When a model response asks for several delegations at once, only the
    first runs; the rest wait here until a child of the delegating agent
    returns control or finishes. Whatever is still queued when the
    delegating agent answers the user is discarded.
    """

    def __init__(self) -> None:
        self._queues: dict[tuple[str, str], deque[ToolRequest]] = {}
        self._lock = threading.Lock()

    def push(self, request: ToolRequest) -> None:
        key = (request.session_id, request.agent.identifier)
        with self._lock:
            self._queues.setdefault(key, deque()).append(request)

    def push_front(self, request: ToolRequest) -> None:
        key = (request.session_id, request.agent.identifier)
        with self._lock:
            self._queues.setdefault(key, deque()).appendleft(request)

    def pop(self, session_id: str, agent_id: str) -> Optional[ToolRequest]:
        """Take the oldest queued delegation, or None."""
        with self._lock:
            queue = self._queues.get((session_id, agent_id))
            if not queue:
                return None
            request = queue.popleft()
            if not queue:
                del self._queues[(session_id, agent_id)]
            return request

    def pending(self, session_id: str, agent_id: str) -> int:
        with self._lock:
            return len(self._queues.get((session_id, agent_id), ()))

    def discard(self, session_id: str, agent_id: str) -> int:
        """Drop the queued delegations of one agent in a session.

        Returns:
            Number of dropped delegations
        """
        with self._lock:
            return len(self._queues.pop((session_id, agent_id), ()))

    def discard_session(self, session_id: str) -> int:
        """Drop every queued delegation of a session.

        Returns:
            Number of dropped delegations
        """
        with self._lock:
            keys = [key for key in self._queues if key[0] == session_id]
            return sum(len(self._queues.pop(key)) for key in keys)


class ToolRouter:
    """Executes the transition requested by a tool call."""

    def __init__(
        self,
        graph: AgentGraph,
        memory: EpisodicMemoryStore,
        assembler: ContextAssembler,
        sink: AnswerSink,
        tool_listener: Optional[ToolListener] = None,
        queue: Optional[DelegationQueue] = None,
    ) -> None:
        """Initialize the router.

        Args:
            graph: Agent graph
            memory: Episodic memory store
            assembler: Used to render handoff messages and episodic summaries
            sink: Answer sink for interim and final text
            tool_listener: Executor for external tools
            queue: Delegation queue (a fresh one by default)
        """
        self.graph = graph
        self.memory = memory
        self.assembler = assembler
        self.sink = sink
        self.tool_listener = tool_listener
        self.queue = queue or DelegationQueue()
        self._handlers: dict[ToolKind, Callable[[ToolRequest], Awaitable[list[AgentRequest]]]] = {
            ToolKind.DELEGATE_DOWN: self.delegate_down,
            ToolKind.RETURN_UP: self.return_up,
            ToolKind.SELF_REFLECT: self.self_reflect,
            ToolKind.FINALIZE: self.finalize,
            ToolKind.EXTERNAL: self.execute_external,
        }

    async def route(self, request: ToolRequest) -> list[AgentRequest]:
        """Route a tool call.

        Args:
            request: Tool call and the agent that made it

        Returns:
            Units of work to run next (empty when the turn ends)

        Raises:
            PayloadParseError: If the arguments do not match the tool
            ResolutionError: If a routing target does not exist
        """
        kind = classify_tool(request.tool_call.name)
        logger.info(
            f"[TOOL] {request.agent.identifier} -> {request.tool_call.name} ({kind.value})",
            extra={"context": {"session_id": request.session_id, "agent": request.agent.identifier}},
        )
        return await self._handlers[kind](request)

    # -- delegate down ------------------------------------------------

    async def delegate_down(self, request: ToolRequest) -> list[AgentRequest]:
        """Hand execution to a child of the acting agent."""
        payload, target = self._resolve_delegation(request)
        return self._commit_delegation(request, payload, target)

    def _resolve_delegation(self, request: ToolRequest) -> tuple[RouteMapper, Agent]:
        payload = parse_payload(RouteMapper, request.tool_call)
        agent = request.agent
        if agent.supports_interim_messages and payload.response:
            self.sink.deliver(request.session_id, agent, request.user_message, payload.response, interim=True)
        target = self.graph.resolve_by_name_or_id(agent, payload.agent)
        return payload, target

    def _commit_delegation(self, request: ToolRequest, payload: RouteMapper, target: Agent) -> list[AgentRequest]:
        session_id = request.session_id
        self._record(
            session_id,
            request.agent,
            Status.WAIT_AGENT_EXECUTION,
            templates.DELEGATOR_WAITING.format(name=target.name, objective=payload.objective),
        )
        self._record(
            session_id,
            target,
            Status.AGENT_EXECUTION,
            templates.TARGET_INVOKED.format(objective=payload.objective),
        )
        handoff = self.assembler.render(
            templates.AGENT_REQUEST_HANDOFF, objective=payload.objective, input=payload.input
        )
        logger.debug(f"Delegating from '{request.agent.identifier}' to '{target.identifier}'")
        return [
            AgentRequest(
                session_id=session_id,
                agent=target,
                handoff_context=handoff,
                user_message=request.user_message,
            )
        ]

    # -- return up ----------------------------------------------------

    async def return_up(self, request: ToolRequest) -> list[AgentRequest]:
        """Hand execution back to the parent, or run the parent's next queued delegation."""
        payload = parse_payload(RouteParentMapper, request.tool_call)
        agent = request.agent
        parent = self.graph.parent_of(agent)
        if parent is None:
            raise NoParentError(agent.identifier)

        if agent.supports_interim_messages and payload.response:
            self.sink.deliver(request.session_id, agent, request.user_message, payload.response, interim=True)

        queued = self._pop_queued(request.session_id, parent)
        self._record_child_summary(request.session_id, parent, payload.summary)
        if queued is not None:
            return self._commit_delegation(*queued)

        handoff = self.assembler.render(templates.PARENT_SELF_REFLECTION_HANDOFF, summary=payload.summary.strip())
        return [
            AgentRequest(
                session_id=request.session_id,
                agent=parent,
                handoff_context=handoff,
                episodic_context=self.assembler.episodic_context_for(request.session_id, parent),
                user_message=request.user_message,
            )
        ]

    def _record_child_summary(self, session_id: str, parent: Agent, summary: str) -> None:
        self._record(
            session_id,
            parent,
            Status.FINISHED_AGENT_EXECUTION,
            templates.CHILD_FINISHED.format(summary=summary.strip()),
        )

    def _pop_queued(self, session_id: str, parent: Agent) -> Optional[tuple[ToolRequest, RouteMapper, Agent]]:
        """Take and resolve the parent's next queued delegation.

        An unresolvable delegation is put back in front of the queue and
        the error is raised before anything is recorded.
        """
        queued = self.queue.pop(session_id, parent.identifier)
        if queued is None:
            return None
        try:
            payload, target = self._resolve_delegation(queued)
        except Exception:
            self.queue.push_front(queued)
            raise
        logger.info(
            f"Draining queued delegation of '{parent.identifier}' to '{target.identifier}'",
            extra={"context": {"session_id": session_id, "agent": parent.identifier}},
        )
        return queued, payload, target

    # -- self reflection ----------------------------------------------

    async def self_reflect(self, request: ToolRequest) -> list[AgentRequest]:
        """Re-prompt the acting agent with its own history. Writes nothing."""
        agent = request.agent
        return [
            AgentRequest(
                session_id=request.session_id,
                agent=agent,
                handoff_context=self.assembler.render(templates.SELF_REFLECTION_HANDOFF),
                episodic_context=self.assembler.episodic_context_for(request.session_id, agent),
                user_message=request.user_message,
            )
        ]

    # -- finalize -----------------------------------------------------

    async def finalize(self, request: ToolRequest) -> list[AgentRequest]:
        """Record a status reported by the agent and act on it."""
        tool_call = request.tool_call
        if tool_call.name == FINALIZE_REQUEST:
            payload = parse_payload(FinalizeMapper, tool_call).as_record_event()
        else:
            payload = parse_payload(RecordEventMapper, tool_call)

        if payload.status not in FINALIZE_STATUSES:
            raise PayloadParseError(tool_call.name, f"status {payload.status.value} cannot be recorded by an agent")

        session_id = request.session_id
        agent = request.agent
        parent = self.graph.parent_of(agent)
        queued = None
        if payload.status == Status.FINISHED and parent is not None:
            queued = self._pop_queued(session_id, parent)
        self._record(session_id, agent, payload.status, payload.content)

        if payload.status == Status.WAIT_USER_INPUT:
            self.answer_user(request, payload.content)
            return []

        if payload.status == Status.FINISHED:
            if parent is None:
                self.answer_user(request, payload.content)
                return []
            if queued is not None:
                self._record_child_summary(session_id, parent, payload.content)
                return self._commit_delegation(*queued)
            handoff = self.assembler.render(
                templates.CHILD_FINISHED_HANDOFF, child_name=agent.name, content=payload.content
            )
            return [
                AgentRequest(
                    session_id=session_id,
                    agent=parent,
                    handoff_context=handoff,
                    episodic_context=self.assembler.episodic_context_for(session_id, parent),
                    user_message=request.user_message,
                )
            ]

        # FINISHED_TOOL_EXECUTION: the content becomes the next handoff
        return [
            AgentRequest(
                session_id=session_id,
                agent=parent or agent,
                handoff_context=payload.content,
                user_message=request.user_message,
            )
        ]

    # -- external tools -----------------------------------------------

    async def execute_external(self, request: ToolRequest) -> list[AgentRequest]:
        """Run an external tool, record its result and let the agent reflect on it."""
        tool_call = request.tool_call
        agent = request.agent
        session_id = request.session_id
        self._record(session_id, agent, Status.WAIT_TOOL_EXECUTION, templates.TOOL_WAITING.format(name=tool_call.name))

        result = await self._call_tool(request)

        self._record(
            session_id,
            agent,
            Status.FINISHED_TOOL_EXECUTION,
            templates.TOOL_FINISHED.format(
                name=tool_call.name, status=result.status.value, details=result.details_json()
            ),
        )
        return await self.self_reflect(request)

    async def _call_tool(self, request: ToolRequest) -> ToolExecutionResult:
        tool_call = request.tool_call
        if self.tool_listener is None:
            logger.warning(f"No tool listener configured, cannot execute '{tool_call.name}'")
            return ToolExecutionResult.error(f"No executor is available for tool '{tool_call.name}'")
        try:
            return await self.tool_listener.on_tool_call_requested(
                request.session_id, request.agent, request.user_message, tool_call
            )
        except Exception as e:
            logger.error(f"Tool '{tool_call.name}' raised: {e}", exc_info=True)
            return ToolExecutionResult.error(f"{type(e).__name__}: {e}")

    # -- helpers ------------------------------------------------------

    def answer_user(self, request: Union[AgentRequest, ToolRequest], text: str) -> None:
        """Deliver a final answer and drop the agent's pending delegations."""
        dropped = self.queue.discard(request.session_id, request.agent.identifier)
        if dropped:
            logger.warning(
                f"Dropped {dropped} queued delegation(s) of '{request.agent.identifier}' after it answered the user",
                extra={"context": {"session_id": request.session_id, "agent": request.agent.identifier}},
            )
        self.sink.deliver(request.session_id, request.agent, request.user_message, text)

    def _record(self, session_id: str, agent: Agent, status: Status, content: str) -> None:
        self.memory.append(session_id, agent.identifier, RecordEvent(content=content, status=status))
