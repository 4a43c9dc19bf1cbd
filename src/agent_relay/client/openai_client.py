"""OpenAI-compatible model client.

Works with OpenAI, DeepSeek, GLM, Ollama and other endpoints that speak
the chat completions API.
"""

import os
from typing import Any, Optional

from openai import AsyncOpenAI

from ..config.schemas import LLMEndpointConfig
from ..errors import ModelCallError
from ..models import Choice, ModelRequest, ModelResponse, ToolCall
from ..utils import async_retry_with_exponential_backoff, generate_tool_call_id, get_logger, is_retryable_error

logger = get_logger(__name__)


class OpenAIModelClient:
    """``ModelClient`` backed by ``openai.AsyncOpenAI``.

    Transient failures are retried with exponential backoff; the final
    failure is raised as ``ModelCallError``.
    """

    def __init__(self, config: LLMEndpointConfig, client: Optional[AsyncOpenAI] = None) -> None:
        """Initialize the client.

        Args:
            config: Endpoint configuration
            client: Pre-built AsyncOpenAI client (built from ``config`` when omitted)
        """
        self.config = config

        if client is None:
            api_key = os.environ.get(config.api_key_env, "")
            if not api_key and config.api_type not in ["ollama", "custom"]:
                logger.warning(f"API key not found for {config.api_key_env}")
            client = AsyncOpenAI(
                base_url=config.endpoint,
                api_key=api_key if api_key else "not-needed",
                timeout=config.timeout,
                max_retries=0,
            )
        self.client = client

        self._create = async_retry_with_exponential_backoff(
            max_attempts=config.max_attempts,
            retryable=is_retryable_error,
        )(self._create_once)

    async def complete(self, request_id: str, request: ModelRequest) -> ModelResponse:
        """Run a chat completion.

        Args:
            request_id: Identifier used in logs
            request: Model request

        Returns:
            Provider-neutral response

        Raises:
            ModelCallError: If the call fails after all retries
        """
        logger.debug(f"[MODEL] {request_id} model={request.model} messages={len(request.messages)}")
        try:
            raw = await self._create(request.to_params())
        except Exception as e:
            raise ModelCallError(f"Model call {request_id} failed: {e}") from e
        return self.to_model_response(raw)

    async def _create_once(self, params: dict[str, Any]) -> Any:
        return await self.client.chat.completions.create(**params)

    @staticmethod
    def to_model_response(raw: Any) -> ModelResponse:
        """Convert an OpenAI ``ChatCompletion`` to a ``ModelResponse``."""
        choices = []
        for raw_choice in raw.choices or []:
            message = raw_choice.message
            tool_calls = [
                ToolCall(
                    id=tc.id or generate_tool_call_id(),
                    name=tc.function.name,
                    arguments=tc.function.arguments or "{}",
                )
                for tc in (message.tool_calls or [])
            ]
            choices.append(
                Choice(text=message.content, tool_calls=tool_calls, finish_reason=raw_choice.finish_reason)
            )
        return ModelResponse(id=getattr(raw, "id", None), choices=choices)
