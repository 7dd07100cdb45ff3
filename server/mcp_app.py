"""
MCP server wiring.

Builds the dispatcher from configuration and exposes it through the MCP
low-level server over stdio. Tool results are returned as indented JSON text;
any exception raised by the dispatcher becomes an MCP error result.
"""

import json
import logging
from typing import Any

import mcp.server.stdio
import mcp.types as types
from mcp.server import NotificationOptions, Server
from mcp.server.models import InitializationOptions

from config import ServerConfig
from gmail_tools.audit import AuditLogger
from gmail_tools.dispatcher import ToolDispatcher
from gmail_tools.rate_limiter import RateLimiter
from gmail_tools.registry import GmailTools
from gmail_tools.session import GmailSession
from server import __version__

logger = logging.getLogger(__name__)

SERVER_NAME = "secure-gmail-mcp"


def build_dispatcher(config: ServerConfig, audit: AuditLogger) -> ToolDispatcher:
    """Assemble session, tools and limiter for one server process."""
    return ToolDispatcher(
        session=GmailSession(config, audit),
        tools=GmailTools(config.downloads_dir),
        rate_limiter=RateLimiter(config.rate_limit),
        audit=audit,
    )


def to_mcp_tools(definitions: list[dict]) -> list[types.Tool]:
    return [
        types.Tool(
            name=defn["name"],
            description=defn["description"],
            inputSchema=defn["inputSchema"],
        )
        for defn in definitions
    ]


def render_result(result: Any) -> list[types.TextContent]:
    """Format a tool result as MCP text content."""
    if isinstance(result, (dict, list)):
        text = json.dumps(result, indent=2, default=str)
    else:
        text = str(result)
    return [types.TextContent(type="text", text=text)]


def create_server(dispatcher: ToolDispatcher) -> Server:
    server = Server(SERVER_NAME, version=__version__)

    @server.list_tools()
    async def handle_list_tools() -> list[types.Tool]:
        return to_mcp_tools(dispatcher.list_tools())

    # Arguments are validated by the dispatcher so that rejected calls are
    # still rate limited and audited.
    @server.call_tool(validate_input=False)
    async def handle_call_tool(name: str, arguments: dict | None) -> list[types.TextContent]:
        result = dispatcher.call_tool(name, arguments or {})
        return render_result(result)

    return server


async def run_stdio(config: ServerConfig) -> None:
    """Serve MCP over stdin/stdout until the client disconnects."""
    audit = AuditLogger(config.audit_log_path)
    server = create_server(build_dispatcher(config, audit))

    async with mcp.server.stdio.stdio_server() as (read_stream, write_stream):
        audit.info("Secure Gmail MCP Server started")
        logger.info("Secure Gmail MCP Server running on stdio")
        try:
            await server.run(
                read_stream,
                write_stream,
                InitializationOptions(
                    server_name=SERVER_NAME,
                    server_version=__version__,
                    capabilities=server.get_capabilities(
                        notification_options=NotificationOptions(),
                        experimental_capabilities={},
                    ),
                ),
            )
        finally:
            audit.info("Server shutdown initiated")
