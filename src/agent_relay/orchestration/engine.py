"""Orchestration engine.

The engine runs the assemble -> model call -> dispatch cycle. Every
cycle is a unit of work on the task dispatcher; the units returned by a
dispatch are submitted as new units rather than awaited in place.
"""

from typing import Callable, Optional

from pydantic import BaseModel, ConfigDict

from ..client import ModelClient, OpenAIModelClient
from ..config.schemas import RelayConfig
from ..execution import TaskDispatcher
from ..graph import AgentGraph, build_agent_graph
from ..memory import EpisodicMemoryStore, InMemoryEpisodicStore
from ..models import Agent, AgentRequest, Answer, RecordEvent, Status
from ..prompt import ContextAssembler, TemplateRenderer
from ..prompt import templates
from ..tools import ToolListener
from ..utils import generate_request_id, get_logger
from .dispatcher import OrchestrationDispatcher
from .router import DelegationQueue, ToolRouter
from .sink import AnswerListener, AnswerSink

logger = get_logger(__name__)


class StepFailure(BaseModel):
    """A unit of work that aborted.

    Attributes:
        session_id: Session of the failed step
        agent_id: Agent whose step failed
        error: The exception that aborted the step
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    session_id: str
    agent_id: str
    error: Exception


StepErrorListener = Callable[[StepFailure], None]


class _AnswerCollector:
    def __init__(self, session_id: str) -> None:
        self.session_id = session_id
        self.answers: list[Answer] = []

    def on_answer(self, answer: Answer) -> None:
        if answer.session_id == self.session_id:
            self.answers.append(answer)


class OrchestrationEngine:
    """Entry point for user messages.

    Example:
        engine = OrchestrationEngine(graph, model_client, tool_listener=tools)
        answers = await engine.converse("session-1", "I want to cancel my order")
    """

    def __init__(
        self,
        graph: AgentGraph,
        model_client: ModelClient,
        memory: Optional[EpisodicMemoryStore] = None,
        renderer: Optional[TemplateRenderer] = None,
        tool_listener: Optional[ToolListener] = None,
        answer_listeners: Optional[list[AnswerListener]] = None,
        tasks: Optional[TaskDispatcher] = None,
        max_workers: int = 8,
        memory_idle_ttl_seconds: Optional[float] = None,
    ) -> None:
        """Initialize the engine.

        Args:
            graph: Agent graph; frozen here if it is not already
            model_client: Language model client
            memory: Episodic memory store (in-memory by default)
            renderer: Template renderer (Jinja sandbox by default)
            tool_listener: Executor for external tools
            answer_listeners: Receivers of user-facing text
            tasks: Task dispatcher (one with ``max_workers`` slots by default)
            max_workers: Concurrent units of work when ``tasks`` is omitted
            memory_idle_ttl_seconds: Idle time after which ``evict_idle_sessions`` drops a session
        """
        self.graph = graph.freeze()
        self.model_client = model_client
        self.memory = memory or InMemoryEpisodicStore()
        self.sink = AnswerSink(answer_listeners)
        self.assembler = ContextAssembler(self.graph, self.memory, renderer)
        self.router = ToolRouter(
            self.graph, self.memory, self.assembler, self.sink, tool_listener=tool_listener, queue=DelegationQueue()
        )
        self.dispatcher = OrchestrationDispatcher(self.router, self.memory, self.sink)
        self.tasks = tasks or TaskDispatcher(max_workers=max_workers)
        self.memory_idle_ttl_seconds = memory_idle_ttl_seconds
        self._error_listeners: list[StepErrorListener] = []
        self._active_agents: dict[str, str] = {}
        self.sink.add_listener(self)

    @classmethod
    def from_config(
        cls,
        config: RelayConfig,
        model_client: Optional[ModelClient] = None,
        tool_listener: Optional[ToolListener] = None,
        answer_listeners: Optional[list[AnswerListener]] = None,
        memory: Optional[EpisodicMemoryStore] = None,
    ) -> "OrchestrationEngine":
        """Create an engine from a relay configuration.

        Args:
            config: Validated configuration
            model_client: Model client (an OpenAI client for ``config.llm`` by default)
            tool_listener: Executor for external tools
            answer_listeners: Receivers of user-facing text
            memory: Episodic memory store

        Returns:
            OrchestrationEngine instance
        """
        return cls(
            graph=build_agent_graph(config),
            model_client=model_client or OpenAIModelClient(config.llm),
            memory=memory,
            tool_listener=tool_listener,
            answer_listeners=answer_listeners,
            max_workers=config.engine.max_workers,
            memory_idle_ttl_seconds=config.engine.memory_idle_ttl_seconds,
        )

    # -- listeners ----------------------------------------------------

    def add_answer_listener(self, listener: AnswerListener) -> None:
        self.sink.add_listener(listener)

    def remove_answer_listener(self, listener: AnswerListener) -> None:
        self.sink.remove_listener(listener)

    def add_error_listener(self, listener: StepErrorListener) -> None:
        self._error_listeners.append(listener)

    def on_answer(self, answer: Answer) -> None:
        """Track which agent the next user message of a session should go to."""
        if answer.interim:
            return
        latest = self.memory.latest(answer.session_id, answer.agent_id)
        if latest is not None and latest.status == Status.FINISHED:
            self._active_agents.pop(answer.session_id, None)
        else:
            self._active_agents[answer.session_id] = answer.agent_id

    # -- user input ---------------------------------------------------

    def active_agent(self, session_id: str) -> Agent:
        """Agent that receives the next user message of a session.

        This is the agent that last asked the user something, or the root
        agent when none is waiting.
        """
        agent_id = self._active_agents.get(session_id)
        return self.graph.get(agent_id) if agent_id else self.graph.root

    async def handle_user_message(self, session_id: str, message: str, agent_id: Optional[str] = None) -> None:
        """Record a user message and schedule the agent that handles it.

        Returns once the first step is scheduled; use ``join`` (or
        ``converse``) to wait for the turn to finish.

        Args:
            session_id: Session key
            message: User message
            agent_id: Agent to address; ``active_agent(session_id)`` when omitted
        """
        if not message or not message.strip():
            raise ValueError("message must not be blank")

        agent = self.graph.get(agent_id) if agent_id else self.active_agent(session_id)
        new_session = not self.memory.timeline(session_id, agent.identifier)
        self.memory.append(
            session_id,
            agent.identifier,
            RecordEvent(content=templates.USER_INPUT.format(content=message), status=Status.USER_INPUT_REQUEST),
        )

        if new_session:
            # The only record so far is the message itself, which the model already sees.
            request = AgentRequest(
                session_id=session_id,
                agent=agent,
                handoff_context=templates.NEW_SESSION_HANDOFF,
                episodic_context="",
                user_message=message,
            )
        else:
            request = AgentRequest(session_id=session_id, agent=agent, user_message=message)

        logger.info(
            f"[USER] message for '{agent.identifier}' (new_session={new_session})",
            extra={"context": {"session_id": session_id, "agent": agent.identifier}},
        )
        self.submit(request)

    async def converse(self, session_id: str, message: str, agent_id: Optional[str] = None) -> list[Answer]:
        """Handle a user message and wait for the turn to settle.

        Args:
            session_id: Session key
            message: User message
            agent_id: Agent to address

        Returns:
            Answers delivered to the session during the turn, in order
        """
        collector = _AnswerCollector(session_id)
        self.add_answer_listener(collector)
        try:
            await self.handle_user_message(session_id, message, agent_id)
            await self.join()
        finally:
            self.remove_answer_listener(collector)
        return collector.answers

    # -- execution ----------------------------------------------------

    def submit(self, request: AgentRequest) -> None:
        """Schedule one assemble -> call -> dispatch step."""
        name = f"{request.session_id}/{request.agent.identifier}"
        self.tasks.submit(lambda: self.step(request), name=name)

    async def step(self, request: AgentRequest) -> list[AgentRequest]:
        """Run one step and schedule its follow-up steps.

        Failures are reported to error listeners and end the step; nothing
        is delivered to the user for a failed step.

        Args:
            request: Unit of work

        Returns:
            The follow-up units that were scheduled
        """
        session_id = request.session_id
        agent_id = request.agent.identifier
        request_id = generate_request_id()
        context = {"session_id": session_id, "agent": agent_id, "request_id": request_id}

        try:
            model_request = self.assembler.build_request(request)
            response = await self.model_client.complete(request_id, model_request)
            next_requests = await self.dispatcher.dispatch(request, response)
        except Exception as e:
            logger.error(f"[STEP] failed for '{agent_id}': {e}", exc_info=True, extra={"context": context})
            self._report(StepFailure(session_id=session_id, agent_id=agent_id, error=e))
            return []

        logger.debug(f"[STEP] '{agent_id}' scheduled {len(next_requests)} follow-up step(s)", extra={"context": context})
        for next_request in next_requests:
            self.submit(next_request)
        return next_requests

    async def join(self) -> None:
        """Wait until every scheduled step has finished."""
        await self.tasks.join()

    async def shutdown(self) -> None:
        """Cancel scheduled steps."""
        await self.tasks.shutdown()

    # -- lifecycle ----------------------------------------------------

    def end_session(self, session_id: str) -> None:
        """Forget everything about a session."""
        self.memory.evict_session(session_id)
        self.router.queue.discard_session(session_id)
        self._active_agents.pop(session_id, None)

    def evict_idle_sessions(self, max_idle_seconds: Optional[float] = None) -> list[str]:
        """Evict sessions idle longer than the given or configured TTL.

        Returns:
            Evicted session IDs; empty when no TTL is configured
        """
        ttl = max_idle_seconds if max_idle_seconds is not None else self.memory_idle_ttl_seconds
        if ttl is None:
            return []
        evicted = self.memory.evict_idle(ttl)
        for session_id in evicted:
            self.router.queue.discard_session(session_id)
            self._active_agents.pop(session_id, None)
        return evicted

    def _report(self, failure: StepFailure) -> None:
        for listener in self._error_listeners:
            try:
                listener(failure)
            except Exception as e:
                logger.error(f"Step error listener failed: {e}")
