"""MCP stdio server exposing the tool registry under snake_case names."""

import asyncio
import json
import logging
from typing import Any

from mcp.server.lowlevel import Server
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, Tool

from ebrain.tools import Registry

logger = logging.getLogger(__name__)

SERVER_NAME = "enterprise-brain"


def render_result(value: Any) -> str:
    return json.dumps(value, indent=2, ensure_ascii=False)


def list_mcp_tools(registry: Registry) -> list[Tool]:
    return [Tool(name=spec.name, description=spec.description, inputSchema=spec.input_schema()) for spec in registry]


def call_mcp_tool(registry: Registry, name: str, arguments: dict[str, Any] | None) -> list[TextContent]:
    """Run one tool and wrap its result as pretty-printed JSON text. Errors propagate to the MCP SDK."""
    result = registry.invoke(name, arguments)
    return [TextContent(type="text", text=render_result(result))]


def build_server(registry: Registry) -> Server:
    server = Server(SERVER_NAME)

    @server.list_tools()
    async def list_tools() -> list[Tool]:
        return list_mcp_tools(registry)

    @server.call_tool()
    async def call_tool(name: str, arguments: dict[str, Any]) -> list[TextContent]:
        return await asyncio.to_thread(call_mcp_tool, registry, name, arguments)

    return server


async def serve(registry: Registry) -> None:
    server = build_server(registry)
    logger.info("MCP server %s started with stdio transport (%d tools)", SERVER_NAME, len(registry))
    async with stdio_server() as (read_stream, write_stream):
        await server.run(read_stream, write_stream, server.create_initialization_options())
