"""Episodic memory entities for agent-relay."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class Status(str, Enum):
    """Execution status attached to every record in an agent's timeline."""

    USER_INPUT_REQUEST = "USER_INPUT_REQUEST"
    WAIT_USER_INPUT = "WAIT_USER_INPUT"
    AGENT_EXECUTION = "AGENT_EXECUTION"
    WAIT_AGENT_EXECUTION = "WAIT_AGENT_EXECUTION"
    FINISHED_AGENT_EXECUTION = "FINISHED_AGENT_EXECUTION"
    WAIT_TOOL_EXECUTION = "WAIT_TOOL_EXECUTION"
    FINISHED_TOOL_EXECUTION = "FINISHED_TOOL_EXECUTION"
    FINISHED = "FINISHED"


class RecordEvent(BaseModel):
    """One immutable entry of an agent's episodic timeline.

    Attributes:
        content: Free text describing what happened
        status: Execution status at the time of the record
        created_at: When the record was created
    """

    model_config = ConfigDict(frozen=True)

    content: str = Field(..., description="What happened")
    status: Status = Field(..., description="Execution status")
    created_at: datetime = Field(default_factory=datetime.now, description="Record timestamp")
