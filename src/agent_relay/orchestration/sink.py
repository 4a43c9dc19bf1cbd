"""Delivery of user-facing text."""

from typing import Optional, Protocol

from ..models import Agent, Answer
from ..utils import get_logger

logger = get_logger(__name__)


class AnswerListener(Protocol):
    """Receives every answer produced by the engine."""

    def on_answer(self, answer: Answer) -> None:
        ...


class AnswerSink:
    """Fans answers out to registered listeners in registration order.

    A listener that raises is logged and skipped; the remaining listeners
    still receive the answer.
    """

    def __init__(self, listeners: Optional[list[AnswerListener]] = None) -> None:
        self._listeners: list[AnswerListener] = list(listeners or [])

    def add_listener(self, listener: AnswerListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: AnswerListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def deliver(
        self,
        session_id: str,
        agent: Agent,
        user_message: Optional[str],
        text: str,
        interim: bool = False,
    ) -> Answer:
        """Publish text to every listener.

        Args:
            session_id: Session key
            agent: Agent that produced the text
            user_message: User message of the turn
            text: Text to deliver
            interim: Whether the turn continues after this message

        Returns:
            The delivered answer
        """
        answer = Answer(
            session_id=session_id,
            agent_id=agent.identifier,
            agent_name=agent.name,
            user_message=user_message,
            text=text,
            interim=interim,
        )
        kind = "interim" if interim else "final"
        logger.info(
            f"[ANSWER] {kind} answer from '{agent.identifier}' ({len(text)} chars)",
            extra={"context": {"session_id": session_id, "agent": agent.identifier}},
        )
        for listener in list(self._listeners):
            try:
                listener.on_answer(answer)
            except Exception as e:
                logger.error(f"Answer listener {type(listener).__name__} failed: {e}", exc_info=True)
        return answer
