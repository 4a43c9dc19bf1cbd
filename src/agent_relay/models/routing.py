"""Payloads of the orchestration tools.

Each model mirrors the JSON arguments the model sends when it calls one
of the system tools.
"""

from typing import Optional

from pydantic import BaseModel, Field

from .memory import Status


class RouteMapper(BaseModel):
    """Arguments of ``route_to_agent``."""

    agent: str = Field(..., min_length=1, description="Name or identifier of a child agent")
    objective: str = Field(..., min_length=1, description="What the child must accomplish")
    input: Optional[str] = Field(None, description="Data the child needs")
    response: Optional[str] = Field(None, description="Interim message for the user")


class RouteParentMapper(BaseModel):
    """Arguments of ``route_to_parent``."""

    summary: str = Field(..., description="What this agent did")
    response: Optional[str] = Field(None, description="Interim message for the user")


class RecordEventMapper(BaseModel):
    """Arguments of ``record_event``."""

    status: Status = Field(..., description="WAIT_USER_INPUT or FINISHED")
    content: str = Field(..., description="Question for the user or summary of the work")


class FinalizeMapper(BaseModel):
    """Arguments of ``finalize_request``."""

    summary: str = Field(..., min_length=1, description="Final user-facing message")

    def as_record_event(self) -> RecordEventMapper:
        """Finalizing is recording FINISHED with the summary as content."""
        return RecordEventMapper(status=Status.FINISHED, content=self.summary)
