"""
Server module - Tool protocol surface over stdio.

The mcp SDK owns framing and session lifecycle; this module only maps the
catalog to tool listings and tool calls to dispatches. SDK-side schema
validation is turned off so the dispatcher's validator is the single source
of argument errors.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from mcp import types
from mcp.server import Server
from mcp.server.stdio import stdio_server

from .catalog import Catalog
from .config import AppConfig
from .dispatcher import Dispatcher
from .logging_utils import setup_logging

logger = logging.getLogger(__name__)


class ToolCallFailed(Exception):
    """Raised from the call handler so the SDK reports the result as an error."""


def tool_definitions(catalog: Catalog) -> list[types.Tool]:
    """One protocol tool per catalog operation, in catalog order."""
    return [
        types.Tool(name=d.name, description=d.description, inputSchema=d.input_schema()) for d in catalog.list()
    ]


async def handle_call(dispatcher: Dispatcher, name: str, arguments: dict[str, Any] | None) -> list[types.TextContent]:
    """
    Dispatch a tool call off the event loop.

    Raises:
        ToolCallFailed: with the envelope text when the dispatch failed
    """
    envelope = await asyncio.to_thread(dispatcher.dispatch, name, arguments)
    text = envelope.render_text()
    if not envelope.success:
        logger.info(f"{name} failed: {envelope.error.value if envelope.error else 'error'}")
        raise ToolCallFailed(text)
    logger.info(f"{name} succeeded")
    return [types.TextContent(type="text", text=text)]


def create_server(dispatcher: Dispatcher, name: str = "ffmpeg-mcp") -> Server:
    """Build a protocol server bound to a dispatcher."""
    server = Server(name)

    @server.list_tools()
    async def list_tools() -> list[types.Tool]:
        return tool_definitions(dispatcher.catalog)

    @server.call_tool(validate_input=False)
    async def call_tool(name: str, arguments: dict[str, Any]) -> list[types.TextContent]:
        return await handle_call(dispatcher, name, arguments)

    return server


async def run_stdio(server: Server) -> None:
    async with stdio_server() as (read_stream, write_stream):
        await server.run(read_stream, write_stream, server.create_initialization_options())


def serve(config: AppConfig) -> None:
    """Start the stdio server and block until the client disconnects."""
    setup_logging(config.logging)
    dispatcher = Dispatcher.from_config(config)
    server = create_server(dispatcher, config.server.name)
    logger.info(f"{config.server.name} running on stdio ({len(dispatcher.catalog)} operations)")
    asyncio.run(run_stdio(server))
