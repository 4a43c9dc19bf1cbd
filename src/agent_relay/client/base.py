"""Model client contract."""

from typing import Protocol

from ..models import ModelRequest, ModelResponse


class ModelClient(Protocol):
    """Calls a language model.

    Implementations raise on failure; retrying is their own concern.
    """

    async def complete(self, request_id: str, request: ModelRequest) -> ModelResponse:
        ...
