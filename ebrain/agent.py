"""Agent host binding and the ask-the-agent boundary.

Registers the tool catalog into the OpenAI Agents SDK and turns a running
conversation into one prompt for the agent loop.
"""

import asyncio
import json
import logging
from collections.abc import Awaitable, Callable, Mapping, Sequence
from typing import Any

from agents import Agent, FunctionTool, Runner

from ebrain.errors import InvalidInput, UpstreamAgentFailure
from ebrain.models import AgentReply, ConversationTurn
from ebrain.settings import BrainSettings
from ebrain.tools import QUERY_SYNTAX_HELP, Clients, Registry, ToolSpec

logger = logging.getLogger(__name__)

AGENT_NAME = "Enterprise Brain"

INSTRUCTIONS = f"""\
You are an assistant that helps with Redmine and ServiceNow work.
Use the provided tools to fetch reports, create and update issues, and manage incidents.
For ServiceNow, getServiceNowRecords, createServiceNowRecord, updateServiceNowRecord and
deleteServiceNowRecord reach any table: incident, problem, change_request, sc_request and so on.
Answer in the language the user writes in.

{QUERY_SYNTAX_HELP}
"""

_ROLE_LABELS = {"user": "User", "assistant": "Assistant"}

RunFn = Callable[[Agent, str], Awaitable[Any]]


def _make_invoker(registry: Registry, spec: ToolSpec) -> Callable[[Any, str], Awaitable[Any]]:
    async def on_invoke_tool(ctx: Any, raw_args: str) -> Any:
        try:
            arguments = json.loads(raw_args) if raw_args else {}
        except json.JSONDecodeError as exc:
            raise InvalidInput(spec.agent_name, [], "arguments are not valid JSON") from exc
        # Providers are synchronous; keep the event loop free while they wait on the network.
        return await asyncio.to_thread(registry.invoke, spec.name, arguments)

    return on_invoke_tool


def build_agent_tools(registry: Registry) -> list[FunctionTool]:
    """Wrap every registry entry as an Agents SDK FunctionTool under its camelCase name."""
    return [
        FunctionTool(
            name=spec.agent_name,
            description=spec.description,
            params_json_schema=spec.input_schema(),
            on_invoke_tool=_make_invoker(registry, spec),
            strict_json_schema=False,
        )
        for spec in registry
    ]


def build_agent(settings: BrainSettings, registry: Registry) -> Agent:
    tools = build_agent_tools(registry)
    agent = Agent(
        name=AGENT_NAME,
        instructions=INSTRUCTIONS,
        model=settings.openai_model,
        tools=tools,
    )
    logger.info("Agent created - model %s with %d tools", settings.openai_model, len(tools))
    return agent


def _coerce_turn(turn: ConversationTurn | Mapping[str, Any]) -> ConversationTurn:
    if isinstance(turn, ConversationTurn):
        return turn
    return ConversationTurn.model_validate(turn)


def build_prompt(turns: Sequence[ConversationTurn]) -> str:
    """Fold prior turns into a preamble ahead of the current question.

    Error turns only exist for display and are left out of the history.
    """
    current = turns[-1]
    history = [t for t in turns[:-1] if t.role in _ROLE_LABELS]
    if not history:
        return current.content
    context = "\n\n".join(f"{_ROLE_LABELS[t.role]}: {t.content}" for t in history)
    return f"[Conversation history]\n{context}\n\n[Current question]\n{current.content}"


class AgentBoundary:
    """Single entry point for callers: conversation in, text or error out. Never raises."""

    def __init__(self, agent: Agent, run: RunFn | None = None, clients: Clients | None = None) -> None:
        self.agent = agent
        self._run = run or Runner.run
        self.clients = clients

    def close(self) -> None:
        if self.clients is not None:
            self.clients.close()

    async def ask(self, turns: Sequence[ConversationTurn | Mapping[str, Any]]) -> AgentReply:
        try:
            conversation = [_coerce_turn(t) for t in turns]
            if not conversation:
                raise UpstreamAgentFailure("No message to send")
            result = await self._run(self.agent, build_prompt(conversation))
            output = getattr(result, "final_output", None)
            if output is None:
                raise UpstreamAgentFailure("Agent returned no output")
            return AgentReply(text=str(output))
        except Exception as exc:
            logger.exception("Agent error")
            return AgentReply(error=str(exc) or "Unknown error occurred")
