"""Test configuration and fixtures for agent-relay tests.

This module provides shared fixtures and configuration for all tests.
"""

import asyncio
import json
from typing import Any, Callable, Optional

import pytest

from agent_relay.config.schemas import ProviderConfig
from agent_relay.graph import AgentGraph, AgentGraphBuilder
from agent_relay.memory import InMemoryEpisodicStore
from agent_relay.models import (
    Agent,
    Answer,
    Choice,
    ModelRequest,
    ModelResponse,
    ToolCall,
    ToolDefinition,
    ToolExecutionResult,
)


# ---------------------------------------------------------------------------
# Response builders
# ---------------------------------------------------------------------------


def text_response(text: str) -> ModelResponse:
    """A model response with plain text only."""
    return ModelResponse(choices=[Choice(text=text, finish_reason="stop")])


def tool_call(name: str, arguments: Any, call_id: Optional[str] = None) -> ToolCall:
    """A tool call with JSON-encoded arguments (strings are passed through)."""
    raw = arguments if isinstance(arguments, str) else json.dumps(arguments)
    return ToolCall(id=call_id or f"call_{name}", name=name, arguments=raw)


def tool_response(name: str, arguments: Any, text: Optional[str] = None) -> ModelResponse:
    """A model response with a single tool call."""
    return ModelResponse(
        choices=[Choice(text=text, tool_calls=[tool_call(name, arguments)], finish_reason="tool_calls")]
    )


def tool_calls_response(*calls: ToolCall) -> ModelResponse:
    """A model response with several tool calls."""
    return ModelResponse(choices=[Choice(tool_calls=list(calls), finish_reason="tool_calls")])


def agent_of(request: ModelRequest) -> str:
    """Identifier of the agent a request was assembled for.

    Test agents use the prompt "AGENT:<identifier>".
    """
    first = request.messages[0].content
    return first.split("AGENT:", 1)[1].split()[0]


# ---------------------------------------------------------------------------
# Test doubles
# ---------------------------------------------------------------------------


class ScriptedModelClient:
    """Model client that answers from per-agent scripts.

    Each agent identifier maps to a list of responses consumed in order.
    A callable script receives the request and returns the response.
    """

    def __init__(
        self,
        scripts: Optional[dict[str, list[ModelResponse]]] = None,
        handler: Optional[Callable[[ModelRequest], ModelResponse]] = None,
        delay: float = 0.0,
    ) -> None:
        self.scripts = {key: list(value) for key, value in (scripts or {}).items()}
        self.handler = handler
        self.delay = delay
        self.requests: list[ModelRequest] = []

    async def complete(self, request_id: str, request: ModelRequest) -> ModelResponse:
        self.requests.append(request)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.handler is not None:
            return self.handler(request)
        agent_id = agent_of(request)
        script = self.scripts.get(agent_id)
        if not script:
            raise AssertionError(f"No scripted response left for agent '{agent_id}'")
        return script.pop(0)

    def requests_for(self, agent_id: str) -> list[ModelRequest]:
        return [request for request in self.requests if agent_of(request) == agent_id]


class RecordingAnswerListener:
    """Collects delivered answers."""

    def __init__(self) -> None:
        self.answers: list[Answer] = []

    def on_answer(self, answer: Answer) -> None:
        self.answers.append(answer)

    @property
    def final(self) -> list[Answer]:
        return [answer for answer in self.answers if not answer.interim]

    @property
    def interim(self) -> list[Answer]:
        return [answer for answer in self.answers if answer.interim]


class RecordingToolListener:
    """Tool listener returning a fixed result and recording every call."""

    def __init__(self, result: Optional[ToolExecutionResult] = None, error: Optional[Exception] = None) -> None:
        self.result = result or ToolExecutionResult.success("ok")
        self.error = error
        self.calls: list[tuple[str, str, ToolCall]] = []

    async def on_tool_call_requested(self, session_id, agent, user_message, tool_call) -> ToolExecutionResult:
        self.calls.append((session_id, agent.identifier, tool_call))
        if self.error is not None:
            raise self.error
        return self.result


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def provider() -> ProviderConfig:
    """Provider settings shared by test agents."""
    return ProviderConfig(model="test-model", temperature=0.1, max_tokens=256, top_p=0.9)


@pytest.fixture
def make_agent(provider) -> Callable[..., Agent]:
    """Factory for agents whose prompt identifies them."""

    def factory(identifier: str, **overrides: Any) -> Agent:
        values: dict[str, Any] = {
            "identifier": identifier,
            "name": identifier,
            "goal": f"Handle {identifier} requests",
            "prompt": f"AGENT:{identifier} You are {{{{ name }}}}.",
            "provider": provider,
        }
        values.update(overrides)
        return Agent(**values)

    return factory


@pytest.fixture
def lookup_tool() -> ToolDefinition:
    """External tool used by the orders agent."""
    return ToolDefinition(
        name="lookup",
        description="Look up an order",
        parameters={
            "type": "object",
            "properties": {"order": {"type": "string"}},
            "required": ["order"],
        },
    )


@pytest.fixture
def support_graph(make_agent, lookup_tool) -> AgentGraph:
    """supervisor -> (billing, orders); orders owns the external 'lookup' tool."""
    supervisor = make_agent("supervisor", supports_interim_messages=True)
    billing = make_agent("billing", name="Billing")
    orders = make_agent("orders", name="Orders", tools=[lookup_tool])
    return (
        AgentGraphBuilder()
        .add(supervisor)
        .add(billing, parent=supervisor)
        .add(orders, parent=supervisor)
        .build()
    )


@pytest.fixture
def memory() -> InMemoryEpisodicStore:
    """Empty in-memory episodic store."""
    return InMemoryEpisodicStore()


@pytest.fixture
def answers() -> RecordingAnswerListener:
    """Answer recorder."""
    return RecordingAnswerListener()


@pytest.fixture
def tool_listener() -> RecordingToolListener:
    """Tool listener that always succeeds with 'ok'."""
    return RecordingToolListener()


# Test markers
def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests for individual components")
    config.addinivalue_line("markers", "integration: Integration tests spanning the whole engine")


def pytest_collection_modifyitems(config, items):
    """Mark tests by directory."""
    for item in items:
        path = str(item.fspath)
        if "/unit/" in path:
            item.add_marker(pytest.mark.unit)
        elif "/integration/" in path:
            item.add_marker(pytest.mark.integration)
