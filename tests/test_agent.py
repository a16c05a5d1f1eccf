"""Tests for the agent host binding and AgentBoundary.

The agent loop itself is replaced by fake runners; no model is called.
"""

import json
from types import SimpleNamespace
from typing import Any
from unittest.mock import MagicMock

import pytest
from agents import Agent, FunctionTool
from pytest_httpx import HTTPXMock

from ebrain.agent import AGENT_NAME, AgentBoundary, build_agent, build_agent_tools, build_prompt
from ebrain.errors import InvalidInput, RemoteRequestFailure
from ebrain.models import ConversationTurn
from ebrain.settings import BrainSettings
from ebrain.tools import TOOLS, Registry


def _turn(role: str, content: str) -> ConversationTurn:
    return ConversationTurn(role=role, content=content)  # type: ignore[arg-type]


class FakeRunner:
    """Records prompts and returns a canned result."""

    def __init__(self, output: Any = "done") -> None:
        self.output = output
        self.prompts: list[str] = []

    async def __call__(self, agent: Agent, prompt: str) -> Any:
        self.prompts.append(prompt)
        return SimpleNamespace(final_output=self.output)


class TestBuildPrompt:
    def test_single_turn_sent_as_is(self) -> None:
        assert build_prompt([_turn("user", "How many open issues?")]) == "How many open issues?"

    def test_history_prepended_in_order(self) -> None:
        prompt = build_prompt([_turn("user", "A"), _turn("assistant", "reply"), _turn("user", "B")])
        assert prompt == "[Conversation history]\nUser: A\n\nAssistant: reply\n\n[Current question]\nB"

    def test_error_turns_left_out(self) -> None:
        prompt = build_prompt([_turn("user", "A"), _turn("error", "Error: boom"), _turn("user", "B")])
        assert "boom" not in prompt
        assert prompt.index("A") < prompt.index("B")

    def test_only_error_history_sends_current_turn(self) -> None:
        assert build_prompt([_turn("error", "Error: boom"), _turn("user", "B")]) == "B"


class TestAgentTools:
    def test_one_function_tool_per_registry_entry(self, registry: Registry) -> None:
        tools = build_agent_tools(registry)
        assert [t.name for t in tools] == [spec.agent_name for spec in TOOLS]
        assert all(isinstance(t, FunctionTool) for t in tools)

    def test_schema_and_description_come_from_registry(self, registry: Registry) -> None:
        tool = next(t for t in build_agent_tools(registry) if t.name == "getServiceNowRecords")
        spec = registry.get("getServiceNowRecords")
        assert tool.params_json_schema == spec.input_schema()
        assert tool.description == spec.description
        assert tool.strict_json_schema is False

    @pytest.mark.asyncio
    async def test_invocation_returns_structured_value(self, httpx_mock: HTTPXMock, registry: Registry) -> None:
        httpx_mock.add_response(json={"result": [{"number": "INC0000001"}]})
        tool = next(t for t in build_agent_tools(registry) if t.name == "getServiceNowIncidents")
        result = await tool.on_invoke_tool(None, json.dumps({"limit": 1}))  # type: ignore[arg-type]
        assert result == {"result": [{"number": "INC0000001"}]}

    @pytest.mark.asyncio
    async def test_bad_json_is_invalid_input(self, registry: Registry) -> None:
        tool = next(t for t in build_agent_tools(registry) if t.name == "getServiceNowIncidents")
        with pytest.raises(InvalidInput):
            await tool.on_invoke_tool(None, "{not json")  # type: ignore[arg-type]

    def test_build_agent(self, registry: Registry) -> None:
        agent = build_agent(BrainSettings(openai_model="gpt-4o-mini"), registry)  # type: ignore[call-arg]
        assert agent.name == AGENT_NAME
        assert agent.model == "gpt-4o-mini"
        assert len(agent.tools) == len(TOOLS)


class TestAgentBoundary:
    @pytest.mark.asyncio
    async def test_returns_text(self) -> None:
        runner = FakeRunner("There are 3 open issues.")
        boundary = AgentBoundary(Agent(name="test"), run=runner)
        reply = await boundary.ask([_turn("user", "How many?")])
        assert reply.to_dict() == {"text": "There are 3 open issues."}
        assert runner.prompts == ["How many?"]

    @pytest.mark.asyncio
    async def test_history_and_current_in_one_prompt(self) -> None:
        runner = FakeRunner()
        boundary = AgentBoundary(Agent(name="test"), run=runner)
        await boundary.ask([_turn("user", "A"), _turn("user", "B")])
        assert len(runner.prompts) == 1
        prompt = runner.prompts[0]
        assert prompt != "B"
        assert prompt.index("A") < prompt.index("B")

    @pytest.mark.asyncio
    async def test_accepts_plain_dict_turns(self) -> None:
        runner = FakeRunner()
        boundary = AgentBoundary(Agent(name="test"), run=runner)
        reply = await boundary.ask([{"role": "user", "content": "hi"}])
        assert reply.ok
        assert runner.prompts == ["hi"]

    @pytest.mark.asyncio
    async def test_runner_failure_becomes_error(self) -> None:
        async def failing(agent: Agent, prompt: str) -> Any:
            raise RemoteRequestFailure("ServiceNow API returned 500: boom", status_code=500)

        boundary = AgentBoundary(Agent(name="test"), run=failing)
        reply = await boundary.ask([_turn("user", "list incidents")])
        assert reply.to_dict() == {"error": "ServiceNow API returned 500: boom"}

    @pytest.mark.asyncio
    async def test_empty_message_error_gets_fallback_text(self) -> None:
        async def failing(agent: Agent, prompt: str) -> Any:
            raise RuntimeError()

        boundary = AgentBoundary(Agent(name="test"), run=failing)
        reply = await boundary.ask([_turn("user", "x")])
        assert reply.error == "Unknown error occurred"

    @pytest.mark.asyncio
    async def test_no_turns_is_error(self) -> None:
        boundary = AgentBoundary(Agent(name="test"), run=FakeRunner())
        reply = await boundary.ask([])
        assert reply.error == "No message to send"

    @pytest.mark.asyncio
    async def test_missing_output_is_error(self) -> None:
        boundary = AgentBoundary(Agent(name="test"), run=FakeRunner(output=None))
        reply = await boundary.ask([_turn("user", "x")])
        assert reply.error == "Agent returned no output"

    def test_close_closes_clients(self) -> None:
        clients = MagicMock()
        AgentBoundary(Agent(name="test"), run=FakeRunner(), clients=clients).close()
        clients.close.assert_called_once()

    def test_close_without_clients(self) -> None:
        AgentBoundary(Agent(name="test"), run=FakeRunner()).close()

    @pytest.mark.asyncio
    async def test_remote_failure_end_to_end(self, httpx_mock: HTTPXMock, registry: Registry) -> None:
        httpx_mock.add_response(status_code=500, text="Internal Server Error")
        agent = build_agent(BrainSettings(), registry)  # type: ignore[call-arg]

        async def tool_calling_runner(agent: Agent, prompt: str) -> Any:
            tool = next(t for t in agent.tools if t.name == "getServiceNowIncidents")
            output = await tool.on_invoke_tool(None, json.dumps({"limit": 5}))  # type: ignore[union-attr]
            return SimpleNamespace(final_output=output)

        reply = await AgentBoundary(agent, run=tool_calling_runner).ask([_turn("user", "list incidents")])
        assert reply.text is None
        assert reply.error is not None
        assert "500" in reply.error
