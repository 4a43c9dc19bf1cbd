"""Unit tests for the OpenAI model client."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from agent_relay.client import OpenAIModelClient
from agent_relay.config import LLMEndpointConfig
from agent_relay.errors import ModelCallError
from agent_relay.models import Message, ModelRequest


def raw_completion(content=None, tool_calls=None, finish_reason="stop"):
    message = SimpleNamespace(content=content, tool_calls=tool_calls)
    return SimpleNamespace(id="chatcmpl-1", choices=[SimpleNamespace(message=message, finish_reason=finish_reason)])


def raw_tool_call(call_id, name, arguments):
    return SimpleNamespace(id=call_id, function=SimpleNamespace(name=name, arguments=arguments))


@pytest.fixture
def endpoint():
    return LLMEndpointConfig(endpoint="http://localhost:11434/v1", api_type="ollama", max_attempts=2)


@pytest.fixture
def request_():
    return ModelRequest(model="m", messages=[Message.user("hi")])


def mock_openai(create):
    client = MagicMock()
    client.chat.completions.create = create
    return client


class TestResponseConversion:
    """Tests for to_model_response."""

    def test_text(self):
        """Test converting a text completion."""
        response = OpenAIModelClient.to_model_response(raw_completion("Hello"))
        assert response.id == "chatcmpl-1"
        assert response.choices[0].text == "Hello"
        assert not response.choices[0].has_tool_calls

    def test_tool_calls(self):
        """Test converting tool calls, keeping raw arguments."""
        raw = raw_completion(
            tool_calls=[raw_tool_call("call_1", "route_to_agent", '{"agent": "billing"}'), raw_tool_call(None, "x", None)],
            finish_reason="tool_calls",
        )
        choice = OpenAIModelClient.to_model_response(raw).choices[0]
        assert [(tc.name, tc.arguments) for tc in choice.tool_calls] == [
            ("route_to_agent", '{"agent": "billing"}'),
            ("x", "{}"),
        ]
        assert choice.tool_calls[0].id == "call_1"
        assert choice.tool_calls[1].id.startswith("call_")


class TestComplete:
    """Tests for complete."""

    @pytest.mark.asyncio
    async def test_forwards_params(self, endpoint, request_):
        """Test that request params reach the SDK."""
        create = AsyncMock(return_value=raw_completion("Hi"))
        client = OpenAIModelClient(endpoint, client=mock_openai(create))

        response = await client.complete("req_1", request_)

        create.assert_awaited_once_with(model="m", messages=[{"role": "user", "content": "hi"}])
        assert response.choices[0].text == "Hi"

    @pytest.mark.asyncio
    async def test_non_retryable_error(self, endpoint, request_):
        """Test that a non-transient error fails immediately."""
        create = AsyncMock(side_effect=ValueError("bad request"))
        client = OpenAIModelClient(endpoint, client=mock_openai(create))

        with pytest.raises(ModelCallError):
            await client.complete("req_1", request_)
        assert create.await_count == 1

    @pytest.mark.asyncio
    async def test_transient_error_is_retried(self, endpoint, request_):
        """Test that a transient error is retried up to max_attempts."""
        create = AsyncMock(side_effect=[ConnectionError("connection reset"), raw_completion("Hi")])
        client = OpenAIModelClient(endpoint, client=mock_openai(create))

        with patch("agent_relay.utils.retry.asyncio.sleep", new=AsyncMock()):
            response = await client.complete("req_1", request_)

        assert create.await_count == 2
        assert response.choices[0].text == "Hi"

    @pytest.mark.asyncio
    async def test_gives_up_after_max_attempts(self, endpoint, request_):
        """Test that the last transient failure is raised as ModelCallError."""
        create = AsyncMock(side_effect=TimeoutError("timed out"))
        client = OpenAIModelClient(endpoint, client=mock_openai(create))

        with patch("agent_relay.utils.retry.asyncio.sleep", new=AsyncMock()):
            with pytest.raises(ModelCallError):
                await client.complete("req_1", request_)
        assert create.await_count == 2


class TestClientConstruction:
    """Tests for building the SDK client."""

    def test_sdk_retries_disabled(self, endpoint, monkeypatch):
        """Test that the SDK client is built from config without its own retries."""
        monkeypatch.delenv("OPENAI_API_KEY", raising=False)
        with patch("agent_relay.client.openai_client.AsyncOpenAI") as sdk:
            OpenAIModelClient(endpoint)

        sdk.assert_called_once_with(
            base_url="http://localhost:11434/v1",
            api_key="not-needed",
            timeout=60.0,
            max_retries=0,
        )
