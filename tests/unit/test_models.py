"""Unit tests for data models."""

import pytest
from pydantic import ValidationError

from agent_relay.config.schemas import ProviderConfig
from agent_relay.models import (
    Agent,
    Choice,
    FinalizeMapper,
    Message,
    ModelRequest,
    RecordEvent,
    RecordEventMapper,
    RouteMapper,
    Status,
    ToolDefinition,
    ToolExecutionResult,
    ToolExecutionStatus,
)


class TestAgent:
    """Tests for Agent model."""

    def test_create_agent(self, provider):
        """Test creating an agent with defaults."""
        agent = Agent(identifier="a1", name="billing", goal="Bills", prompt="You bill.", provider=provider)
        assert agent.tool_choice == "auto"
        assert agent.supports_interim_messages is False
        assert agent.enable_finalize_tool is False
        assert agent.tools == []

    @pytest.mark.parametrize("field", ["identifier", "name", "goal", "prompt"])
    def test_blank_fields_rejected(self, provider, field):
        """Test that identity and prompt fields must not be blank."""
        values = {"identifier": "a1", "name": "n", "goal": "g", "prompt": "p", "provider": provider}
        values[field] = "   "
        with pytest.raises(ValidationError):
            Agent(**values)

    def test_has_tool(self, make_agent, lookup_tool):
        """Test checking explicitly registered tools."""
        agent = make_agent("orders", tools=[lookup_tool])
        assert agent.has_tool("lookup")
        assert not agent.has_tool("record_event")


class TestRecordEvent:
    """Tests for RecordEvent model."""

    def test_record_is_immutable(self):
        """Test that records cannot be changed after creation."""
        record = RecordEvent(content="hello", status=Status.WAIT_USER_INPUT)
        with pytest.raises(ValidationError):
            record.content = "changed"

    def test_status_values(self):
        """Test the closed set of statuses."""
        assert {status.value for status in Status} == {
            "USER_INPUT_REQUEST",
            "WAIT_USER_INPUT",
            "AGENT_EXECUTION",
            "WAIT_AGENT_EXECUTION",
            "FINISHED_AGENT_EXECUTION",
            "WAIT_TOOL_EXECUTION",
            "FINISHED_TOOL_EXECUTION",
            "FINISHED",
        }


class TestRoutingPayloads:
    """Tests for tool payload models."""

    def test_route_mapper_optional_fields(self):
        """Test that input and response are optional."""
        payload = RouteMapper.model_validate_json('{"agent": "billing", "objective": "refund"}')
        assert payload.input is None
        assert payload.response is None

    def test_record_event_mapper_rejects_unknown_status(self):
        """Test status parsing."""
        with pytest.raises(ValidationError):
            RecordEventMapper.model_validate_json('{"status": "DONE", "content": "x"}')

    def test_finalize_is_finished(self):
        """Test that finalize_request maps to a FINISHED record."""
        record = FinalizeMapper(summary="All done").as_record_event()
        assert record.status == Status.FINISHED
        assert record.content == "All done"


class TestToolModels:
    """Tests for tool definitions and results."""

    def test_to_llm_format(self, lookup_tool):
        """Test OpenAI function format export."""
        exported = lookup_tool.to_llm_format()
        assert exported["type"] == "function"
        assert exported["function"]["name"] == "lookup"
        assert exported["function"]["parameters"]["required"] == ["order"]

    def test_default_parameters(self):
        """Test that a tool without parameters still has an object schema."""
        tool = ToolDefinition(name="ping")
        assert tool.parameters["type"] == "object"

    def test_result_constructors(self):
        """Test success and error helpers."""
        ok = ToolExecutionResult.success({"a": 1})
        failed = ToolExecutionResult.error("boom")
        assert ok.is_success and ok.status == ToolExecutionStatus.SUCCESS
        assert not failed.is_success
        assert ok.details_json() == '{"a": 1}'


class TestModelRequest:
    """Tests for ModelRequest.to_params."""

    def test_unset_options_are_omitted(self):
        """Test that None sampling options and empty tools are left out."""
        request = ModelRequest(model="m", messages=[Message.user("hi")])
        params = request.to_params()
        assert params == {"model": "m", "messages": [{"role": "user", "content": "hi"}]}

    def test_tools_carry_tool_choice(self, lookup_tool):
        """Test that tool_choice is sent along with tools."""
        request = ModelRequest(
            model="m",
            messages=[],
            tools=[lookup_tool.to_llm_format()],
            temperature=0.3,
            top_p=0.5,
            max_tokens=10,
            extra={"seed": 7},
        )
        params = request.to_params()
        assert params["tool_choice"] == "auto"
        assert params["temperature"] == 0.3
        assert params["top_p"] == 0.5
        assert params["max_tokens"] == 10
        assert params["seed"] == 7


class TestChoice:
    """Tests for Choice helpers."""

    def test_blank_text_is_not_text(self):
        """Test that whitespace-only content does not count as text."""
        assert not Choice(text="  ").has_text
        assert Choice(text="Hi").has_text
        assert not Choice().has_tool_calls


class TestProviderConfig:
    """Tests for ProviderConfig validation."""

    def test_top_p_range(self):
        """Test that top_p must be in (0, 1]."""
        with pytest.raises(ValidationError):
            ProviderConfig(model="m", top_p=1.5)
