"""Units of work and deliveries exchanged by the orchestration engine."""

from typing import Optional

from pydantic import BaseModel, Field

from .agent import Agent
from .completion import ToolCall


class AgentRequest(BaseModel):
    """One pending model call for an agent.

    Attributes:
        session_id: Conversation key
        agent: Agent to run
        handoff_context: System message describing why the agent is running
        episodic_context: Pre-rendered episodic summary; rendered from memory when None
        user_message: Original user message of the turn
    """

    session_id: str = Field(..., min_length=1, description="Session key")
    agent: Agent = Field(..., description="Agent to run")
    handoff_context: Optional[str] = Field(None, description="Handoff system message")
    episodic_context: Optional[str] = Field(None, description="Episodic summary")
    user_message: Optional[str] = Field(None, description="User message of the turn")


class ToolRequest(BaseModel):
    """A tool call made by an agent, awaiting routing."""

    session_id: str = Field(..., min_length=1, description="Session key")
    agent: Agent = Field(..., description="Agent that made the call")
    user_message: Optional[str] = Field(None, description="User message of the turn")
    tool_call: ToolCall = Field(..., description="Tool call to route")


class Answer(BaseModel):
    """Text delivered to the user.

    Attributes:
        session_id: Conversation key
        agent_id: Identifier of the agent that produced the text
        agent_name: Name of that agent
        user_message: User message of the turn
        text: The text to show
        interim: True for progress messages that do not end the turn
    """

    session_id: str
    agent_id: str
    agent_name: str
    user_message: Optional[str] = None
    text: str
    interim: bool = False
