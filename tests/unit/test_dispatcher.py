"""Unit tests for the orchestration dispatcher."""

import pytest

from conftest import text_response, tool_call, tool_calls_response, tool_response
from agent_relay.models import AgentRequest, Choice, ModelResponse, RecordEvent, Status, ToolRequest
from agent_relay.orchestration import AnswerSink, OrchestrationDispatcher, ToolRouter
from agent_relay.prompt import ContextAssembler


@pytest.fixture
def dispatcher(support_graph, memory, answers, tool_listener):
    sink = AnswerSink([answers])
    router = ToolRouter(support_graph, memory, ContextAssembler(support_graph, memory), sink, tool_listener=tool_listener)
    return OrchestrationDispatcher(router, memory, sink)


@pytest.fixture
def supervisor_request(support_graph):
    return AgentRequest(session_id="s1", agent=support_graph.get("supervisor"), user_message="hello")


class TestTextChoices:
    """Tests for plain text responses."""

    @pytest.mark.asyncio
    async def test_first_contact_is_input_request(self, dispatcher, support_graph, memory, answers):
        """Test that a child asking the user for the first time records USER_INPUT_REQUEST."""
        memory.append("s1", "billing", RecordEvent(content="Invoked to: Refund", status=Status.AGENT_EXECUTION))
        request = AgentRequest(session_id="s1", agent=support_graph.get("billing"), user_message="hello")

        assert await dispatcher.dispatch(request, text_response("Which order?")) == []

        record = memory.latest("s1", "billing")
        assert record.status == Status.USER_INPUT_REQUEST
        assert record.content == "The agent then asked the user the following question: Which order?"
        assert answers.final[0].text == "Which order?"

    @pytest.mark.asyncio
    async def test_later_text_waits_for_user(self, dispatcher, supervisor_request, memory):
        """Test that text after the user has spoken records WAIT_USER_INPUT."""
        memory.append("s1", "supervisor", RecordEvent(content="The user input is: hello", status=Status.USER_INPUT_REQUEST))
        await dispatcher.dispatch(supervisor_request, text_response("Which order?"))
        assert memory.latest("s1", "supervisor").status == Status.WAIT_USER_INPUT

    @pytest.mark.asyncio
    async def test_asking_again_waits_for_user(self, dispatcher, support_graph, memory):
        """Test that only the first question of an agent is an input request."""
        request = AgentRequest(session_id="s1", agent=support_graph.get("billing"), user_message="hello")
        await dispatcher.dispatch(request, text_response("Which order?"))
        await dispatcher.dispatch(request, text_response("And the amount?"))
        assert [r.status for r in memory.timeline("s1", "billing")] == [
            Status.USER_INPUT_REQUEST,
            Status.WAIT_USER_INPUT,
        ]

    @pytest.mark.asyncio
    async def test_answer_drops_pending_delegations(self, dispatcher, supervisor_request, support_graph):
        """Test that asking the user discards delegations still queued by the agent."""
        dispatcher.router.queue.push(
            ToolRequest(
                session_id="s1",
                agent=support_graph.get("supervisor"),
                tool_call=tool_call("route_to_agent", {"agent": "orders", "objective": "Track", "input": "42"}),
            )
        )
        await dispatcher.dispatch(supervisor_request, text_response("Anything else?"))
        assert dispatcher.router.queue.pending("s1", "supervisor") == 0


class TestToolChoices:
    """Tests for tool-call responses."""

    @pytest.mark.asyncio
    async def test_tool_call_is_routed(self, dispatcher, supervisor_request, memory):
        """Test that a tool call moves control to the routed agent."""
        response = tool_response("route_to_agent", {"agent": "billing", "objective": "Refund", "input": "42"})
        next_requests = await dispatcher.dispatch(supervisor_request, response)
        assert [r.agent.identifier for r in next_requests] == ["billing"]
        assert memory.latest("s1", "supervisor").status == Status.WAIT_AGENT_EXECUTION

    @pytest.mark.asyncio
    async def test_text_with_tool_call_is_interim(self, dispatcher, supervisor_request, answers):
        """Test that text next to a tool call is published as an interim answer."""
        response = tool_response(
            "route_to_agent", {"agent": "billing", "objective": "Refund", "input": "42"}, text="Checking..."
        )
        await dispatcher.dispatch(supervisor_request, response)
        assert [(a.text, a.interim) for a in answers.answers] == [("Checking...", True)]

    @pytest.mark.asyncio
    async def test_extra_delegations_are_queued(self, dispatcher, supervisor_request, memory):
        """Test that only the first call runs and extra delegations wait."""
        response = tool_calls_response(
            tool_call("route_to_agent", {"agent": "billing", "objective": "Refund", "input": "42"}, "c1"),
            tool_call("route_to_agent", {"agent": "orders", "objective": "Track", "input": "42"}, "c2"),
        )
        next_requests = await dispatcher.dispatch(supervisor_request, response)

        assert [r.agent.identifier for r in next_requests] == ["billing"]
        assert memory.timeline("s1", "orders") == ()
        assert dispatcher.router.queue.pending("s1", "supervisor") == 1

    @pytest.mark.asyncio
    async def test_extra_non_delegation_calls_are_dropped(self, dispatcher, support_graph, tool_listener):
        """Test that extra calls other than delegations are ignored."""
        request = AgentRequest(session_id="s1", agent=support_graph.get("orders"), user_message="where?")
        response = tool_calls_response(
            tool_call("lookup", {"order": "1"}, "c1"),
            tool_call("lookup", {"order": "2"}, "c2"),
        )
        await dispatcher.dispatch(request, response)
        assert len(tool_listener.calls) == 1
        assert dispatcher.router.queue.pending("s1", "orders") == 0


    @pytest.mark.asyncio
    async def test_delegations_beside_other_calls_are_not_queued(self, dispatcher, supervisor_request, answers):
        """Test that a delegation is only queued next to a first delegation."""
        response = tool_calls_response(
            tool_call("record_event", {"status": "FINISHED", "content": "Done"}, "c1"),
            tool_call("route_to_agent", {"agent": "orders", "objective": "Cancel", "input": "42"}, "c2"),
        )
        assert await dispatcher.dispatch(supervisor_request, response) == []
        assert answers.final[0].text == "Done"
        assert dispatcher.router.queue.pending("s1", "supervisor") == 0

    @pytest.mark.asyncio
    async def test_only_first_choice_is_dispatched(self, dispatcher, supervisor_request, memory, caplog):
        """Test that later choices of a response are ignored."""
        response = ModelResponse(
            choices=[
                Choice(
                    tool_calls=[tool_call("route_to_agent", {"agent": "billing", "objective": "Refund", "input": "42"})],
                    finish_reason="tool_calls",
                ),
                Choice(
                    tool_calls=[tool_call("route_to_agent", {"agent": "orders", "objective": "Cancel", "input": "42"})],
                    finish_reason="tool_calls",
                ),
            ]
        )
        next_requests = await dispatcher.dispatch(supervisor_request, response)

        assert [r.agent.identifier for r in next_requests] == ["billing"]
        assert memory.timeline("s1", "orders") == ()
        assert dispatcher.router.queue.pending("s1", "supervisor") == 0
        assert "only the first is used" in caplog.text


class TestEmptyResponses:
    """Tests for responses with nothing to act on."""

    @pytest.mark.asyncio
    async def test_no_choices(self, dispatcher, supervisor_request, memory, answers, caplog):
        """Test that a response without choices is a logged no-op."""
        assert await dispatcher.dispatch(supervisor_request, ModelResponse(choices=[])) == []
        assert memory.sessions() == []
        assert answers.answers == []
        assert "no choices" in caplog.text

    @pytest.mark.asyncio
    async def test_empty_choice(self, dispatcher, supervisor_request, memory, answers, caplog):
        """Test that a choice without text or tool calls is a logged no-op."""
        response = ModelResponse(choices=[Choice(text="   ", finish_reason="length")])
        assert await dispatcher.dispatch(supervisor_request, response) == []
        assert memory.sessions() == []
        assert answers.answers == []
        assert "neither text nor tool calls" in caplog.text
