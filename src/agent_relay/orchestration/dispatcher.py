"""Interpretation of model responses.

Only the first choice of a model response is acted on. It either asks
the user something (plain text), requests tool calls, or is empty. Tool
calls go to the tool router; only the first one runs immediately.
"""

from ..memory import EpisodicMemoryStore
from ..models import AgentRequest, Choice, ModelResponse, RecordEvent, Status, ToolCall, ToolRequest
from ..prompt import templates
from ..utils import get_logger
from .router import ToolKind, ToolRouter, classify_tool
from .sink import AnswerSink

logger = get_logger(__name__)

# Records that mean the agent has already exchanged messages with the user.
_USER_CONTACT = frozenset({Status.USER_INPUT_REQUEST, Status.WAIT_USER_INPUT})


class OrchestrationDispatcher:
    """Turns a model response into memory writes, answers and follow-up work."""

    def __init__(self, router: ToolRouter, memory: EpisodicMemoryStore, sink: AnswerSink) -> None:
        self.router = router
        self.memory = memory
        self.sink = sink

    async def dispatch(self, request: AgentRequest, response: ModelResponse) -> list[AgentRequest]:
        """Handle a model response.

        Args:
            request: The unit of work that produced the response
            response: Model response

        Returns:
            Units of work to run next

        Raises:
            OrchestrationError: If routing a tool call fails
        """
        if not response.choices:
            logger.warning(f"Model returned no choices for agent '{request.agent.identifier}'")
            return []

        choice, *ignored = response.choices
        if ignored:
            logger.warning(
                f"Model returned {len(response.choices)} choices for agent '{request.agent.identifier}'; "
                "only the first is used",
                extra={"context": {"session_id": request.session_id, "agent": request.agent.identifier}},
            )
        return await self._dispatch_choice(request, choice)

    async def _dispatch_choice(self, request: AgentRequest, choice: Choice) -> list[AgentRequest]:
        agent = request.agent
        session_id = request.session_id

        if choice.has_tool_calls:
            first, *extra = choice.tool_calls
            if choice.has_text:
                self.sink.deliver(session_id, agent, request.user_message, choice.text or "", interim=True)

            next_requests = await self.router.route(self._tool_request(request, first))

            delegating = classify_tool(first.name) == ToolKind.DELEGATE_DOWN
            for tool_call in extra:
                if delegating and classify_tool(tool_call.name) == ToolKind.DELEGATE_DOWN:
                    self.router.queue.push(self._tool_request(request, tool_call))
                    logger.info(f"Queued extra delegation from '{agent.identifier}' ({tool_call.id})")
                else:
                    logger.warning(
                        f"Ignoring extra tool call '{tool_call.name}' from '{agent.identifier}'; "
                        "only the first call of a response is executed"
                    )
            return next_requests

        if choice.has_text:
            text = choice.text or ""
            first_contact = not self._has_user_contact(session_id, agent.identifier)
            status = Status.USER_INPUT_REQUEST if first_contact else Status.WAIT_USER_INPUT
            self.memory.append(
                session_id,
                agent.identifier,
                RecordEvent(content=templates.ASKED_USER.format(content=text.strip()), status=status),
            )
            self.router.answer_user(request, text)
            return []

        logger.warning(
            f"Model choice for agent '{agent.identifier}' has neither text nor tool calls "
            f"(finish_reason={choice.finish_reason}); nothing to do",
            extra={"context": {"session_id": session_id, "agent": agent.identifier}},
        )
        return []

    def _has_user_contact(self, session_id: str, agent_id: str) -> bool:
        return any(record.status in _USER_CONTACT for record in self.memory.timeline(session_id, agent_id))

    @staticmethod
    def _tool_request(request: AgentRequest, tool_call: ToolCall) -> ToolRequest:
        return ToolRequest(
            session_id=request.session_id,
            agent=request.agent,
            user_message=request.user_message,
            tool_call=tool_call,
        )
