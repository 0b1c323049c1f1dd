"""MCP Server for listing repository commits."""

import asyncio
import json
import logging
from typing import Any

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, Tool

from .builtin_extensions import default_extensions
from .commit_source import GitRepositoryManager
from .config import get_config
from .list_commits import ListCommitsTool
from .renderer import ToolResult

# Config and logging
config = get_config()
logging.basicConfig(level=getattr(logging, config.server.log_level.upper(), logging.INFO))
logger = logging.getLogger(__name__)

server = Server("scm-commit-mcp")

list_commits_tool = ListCommitsTool(
    GitRepositoryManager(config.repositories.root),
    default_extensions(),
    chunk_size=config.server.chunk_size,
)


def error_content(message: str) -> list[TextContent]:
    return [TextContent(type="text", text=json.dumps({"success": False, "error": message}, indent=2))]


def result_to_content(result: ToolResult) -> list[TextContent] | tuple[list[TextContent], dict]:
    """ToolResult -> MCP content, with structured data if there is any."""
    if result.error:
        return error_content(result.message)
    contents = [TextContent(type="text", text=text) for text in result.content]
    if result.structured_content:
        return contents, result.structured_content
    return contents


@server.list_tools()
async def list_tools() -> list[Tool]:
    """Return tool list."""
    return [
        Tool(
            name=list_commits_tool.name,
            description=list_commits_tool.description,
            inputSchema=list_commits_tool.input_schema(),
        )
    ]


@server.call_tool()
async def call_tool(name: str, arguments: dict[str, Any]):
    """Handle tool call."""
    try:
        result = await _execute_tool(name, arguments or {})
        return result_to_content(result)
    except ValueError as e:
        return error_content(str(e))
    except Exception:
        logger.exception(f"{name} failed")
        return error_content("An internal error occurred while executing the request.")


async def _execute_tool(name: str, args: dict[str, Any]) -> ToolResult:
    """Execute tool."""
    logger.info(f"tool: {name}")

    if name == list_commits_tool.name:
        composite = list_commits_tool.parse(args)
        # the query blocks on git, keep the event loop free
        return await asyncio.to_thread(list_commits_tool.execute, composite)

    return ToolResult.failure(f"Unknown tool: {name}")


async def run_server():
    """Run MCP server."""
    logger.info("server starting")
    try:
        async with stdio_server() as (read_stream, write_stream):
            logger.info("ready")
            await server.run(
                read_stream,
                write_stream,
                server.create_initialization_options(),
            )
    except Exception:
        logger.exception("server error")
        raise


def main():
    """Entry point."""
    try:
        asyncio.run(run_server())
    except KeyboardInterrupt:
        logger.info("stopped")
    except Exception:
        logger.exception("fatal")


if __name__ == "__main__":
    main()
