"""MCP server wiring for mcp-terragrunt-docs.

Exposes the tool registry and the repository resource over stdio. Business
failures are returned as text content by the dispatcher, so the handlers here
never turn a tool failure into a protocol error.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

try:
    from mcp.server import Server
    from mcp.server.lowlevel.helper_types import ReadResourceContents
    from mcp.types import LoggingLevel, Resource, TextContent, Tool
except ImportError as exc:  # pragma: no cover
    raise ImportError("MCP library not installed. Install with: pip install mcp") from exc

from . import __version__
from .errors import SafeError
from .logs import LOGGER_NAME, bind_session_logging, set_session_log_level, unbind_session_logging
from .schemas import TOOL_METADATA
from .tools import dispatch_tool, initialize_runtime_from_env

logger = logging.getLogger(__name__)

SERVER_NAME = "mcp-terragrunt-docs"
REPO_RESOURCE_URI = "config://repo"
REPO_RESOURCE_NAME = "terragrunt-repo"

server = Server(SERVER_NAME, version=__version__)


def _log() -> logging.Logger:
    try:
        return initialize_runtime_from_env().log
    except SafeError:
        return logger


def _repo_url() -> str:
    try:
        return initialize_runtime_from_env().config.repo.html_url
    except SafeError:
        return "https://github.com/gruntwork-io/terragrunt"


def _client_log_level() -> str:
    try:
        return initialize_runtime_from_env().config.logging.level
    except SafeError:
        return "INFO"


async def _attach_client_logging() -> None:
    """Forward server logs to the client of the current request's session.

    The first request of a session binds it and announces the server, the way
    the stderr log does at startup.
    """
    try:
        session = server.request_context.session
    except LookupError:
        return

    log = _log()
    if bind_session_logging(log, session, level=_client_log_level()) is None:
        return
    await session.send_log_message(level="info", data=f"{SERVER_NAME} {__version__} initialized", logger=LOGGER_NAME)
    await session.send_log_message(level="info", data="MCP server connected and ready", logger=LOGGER_NAME)


def _build_tools() -> list[Tool]:
    return [
        Tool(
            name=tool_name,
            description=metadata["description"],
            inputSchema=metadata["inputSchema"],
        )
        for tool_name, metadata in TOOL_METADATA.items()
    ]


def _build_resources() -> list[Resource]:
    return [
        Resource(
            uri=REPO_RESOURCE_URI,
            name=REPO_RESOURCE_NAME,
            description="Terragrunt GitHub repository URL",
            mimeType="text/plain",
        )
    ]


@server.list_tools()
async def list_tools() -> list[Tool]:
    """List all available tools."""
    await _attach_client_logging()
    tools = _build_tools()
    _log().info("Listed %s tools", len(tools))
    return tools


@server.call_tool(validate_input=False)
async def call_tool(name: str, arguments: dict[str, Any] | None) -> list[TextContent]:
    """Execute a tool and return MCP-compliant TextContent.

    Input validation is left to the dispatcher so that invalid arguments come back
    as an "Error handling <tool>" text block like every other failure.
    """
    if not isinstance(arguments, dict):
        arguments = {}

    await _attach_client_logging()
    _log().info("Tool called: %s", name)
    return await dispatch_tool(name, arguments)


@server.set_logging_level()
async def set_logging_level(level: LoggingLevel) -> None:
    """Apply the client's requested log level to the notifications it receives."""
    await _attach_client_logging()
    set_session_log_level(_log(), level)
    _log().info("Client log level set to %s", level)


@server.list_resources()
async def list_resources() -> list[Resource]:
    """List available resources."""
    await _attach_client_logging()
    return _build_resources()


@server.read_resource()
async def read_resource(uri: Any) -> list[ReadResourceContents]:
    """Read resource content."""
    await _attach_client_logging()
    uri_s = (uri if isinstance(uri, str) else str(uri)).rstrip("/")

    if uri_s == REPO_RESOURCE_URI:
        return [ReadResourceContents(content=_repo_url(), mime_type="text/plain")]

    raise ValueError(f"Resource not found: {uri_s}")


async def run_server() -> None:
    """Run the server over stdio."""
    # Fail fast on invalid host configuration.
    try:
        runtime = initialize_runtime_from_env()
    except SafeError as exc:
        logger.error("Startup configuration error: %s", exc.message)
        raise

    from mcp.server.stdio import stdio_server

    async with stdio_server() as (read_stream, write_stream):
        runtime.log.info("MCP server %s %s connected over stdio and ready", SERVER_NAME, __version__)
        try:
            await server.run(read_stream, write_stream, server.create_initialization_options())
        finally:
            unbind_session_logging(runtime.log)


async def test_server() -> None:
    """Lightweight self-test to ensure tool/resource listing works."""
    tools = _build_tools()
    resources = _build_resources()
    print(f"{SERVER_NAME} {__version__}: {len(tools)} tools, {len(resources)} resources", file=sys.stderr)
    for tool in tools:
        print(f"  tool: {tool.name}", file=sys.stderr)
    for resource in resources:
        print(f"  resource: {resource.uri}", file=sys.stderr)
