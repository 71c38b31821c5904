"""
MCP Tools module for Obsidian GitHub MCP Server.

Contains the tool definitions, the dispatcher that validates arguments and
renders results, and the MCP server wiring (list_tools and call_tool).
"""

from collections.abc import Awaitable, Callable
from typing import Any

import structlog
from mcp.server import Server
from mcp.types import CallToolResult, TextContent, Tool
from pydantic import BaseModel, ValidationError

from .models import GetNoteArgs, ListNotesArgs, SearchNotesArgs, SearchReport
from .search import search_notes
from .utils import ArgumentValidationError, VaultError, normalize_vault_path
from .vault import GitHubVault

logger = structlog.get_logger(__name__)

SERVER_NAME = "obsidian-github-mcp"

TOOLS = [
    Tool(
        name="search_notes",
        description="Search for notes in the Obsidian vault by content or filename",
        inputSchema={
            "type": "object",
            "properties": {
                "query": {
                    "type": "string",
                    "description": "Search query to find notes",
                    "minLength": 1
                },
                "limit": {
                    "type": "integer",
                    "description": "Maximum number of results to return",
                    "default": 10,
                    "minimum": 1
                }
            },
            "required": ["query"]
        }
    ),
    Tool(
        name="get_note",
        description="Retrieve the full content of a specific note",
        inputSchema={
            "type": "object",
            "properties": {
                "path": {
                    "type": "string",
                    "description": "Path to the specific note file (e.g., 'Projects/Roadmap.md')",
                    "minLength": 1
                }
            },
            "required": ["path"]
        }
    ),
    Tool(
        name="list_notes",
        description="List all notes in the vault or a specific folder",
        inputSchema={
            "type": "object",
            "properties": {
                "folder": {
                    "type": "string",
                    "description": "Specific folder to list notes from (optional)"
                }
            },
            "required": []
        }
    ),
]


class ToolCallError(Exception):
    """Carries an error response text through the MCP call_tool decorator."""
    pass


# ============== Rendering ==============

def render_search_report(report: SearchReport) -> str:
    output = f'Found {len(report.results)} notes matching "{report.query}":\n\n'
    for r in report.results:
        output += f"**{r.name}** ({r.path})\n"
        output += f"Score: {r.score}\n"
        output += f"Snippet: {r.snippet}\n\n"

    if report.skipped_notes:
        output += f"Skipped {len(report.skipped_notes)} notes that could not be fetched.\n"
    if report.skipped_folders:
        output += f"Skipped {len(report.skipped_folders)} folders that could not be listed: "
        output += ", ".join(report.skipped_folders) + "\n"

    return output


def render_note(path: str, content: str) -> str:
    return f"# {path}\n\n{content}"


def render_listing(folder: str, entries: list) -> str:
    """Render a folder listing: subfolders first, then Markdown notes."""
    notes = [e for e in entries if e.is_markdown]
    folders = [e for e in entries if e.is_dir]

    output = f"## Notes in {folder or 'root'}\n\n"

    if folders:
        output += "### Folders:\n"
        for f in folders:
            output += f"- 📁 {f.name}\n"
        output += "\n"

    if notes:
        output += "### Notes:\n"
        for note in notes:
            note_path = f"{folder}/{note.name}" if folder else note.name
            output += f"- 📝 {note.name} ({note_path})\n"
    else:
        output += "No notes found in this folder.\n"

    return output


# ============== Handlers ==============

def _parse_args(model: type[BaseModel], arguments: dict[str, Any] | None) -> Any:
    try:
        return model.model_validate(arguments or {})
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in err['loc']) or 'arguments'}: {err['msg']}"
            for err in e.errors()
        )
        raise ArgumentValidationError(f"Invalid arguments: {problems}") from e


async def handle_search_notes(vault: GitHubVault, arguments: dict[str, Any], search_timeout: float | None) -> str:
    args = _parse_args(SearchNotesArgs, arguments)
    report = await search_notes(vault, args.query, args.limit, timeout=search_timeout)
    return render_search_report(report)


async def handle_get_note(vault: GitHubVault, arguments: dict[str, Any], search_timeout: float | None) -> str:
    args = _parse_args(GetNoteArgs, arguments)
    content = await vault.get_file_content(args.path)
    return render_note(args.path, content)


async def handle_list_notes(vault: GitHubVault, arguments: dict[str, Any], search_timeout: float | None) -> str:
    args = _parse_args(ListNotesArgs, arguments)
    folder = normalize_vault_path(args.folder)
    entries = await vault.list_directory(folder)
    return render_listing(folder, entries)


HANDLERS: dict[str, Callable[[GitHubVault, dict[str, Any], float | None], Awaitable[str]]] = {
    "search_notes": handle_search_notes,
    "get_note": handle_get_note,
    "list_notes": handle_list_notes,
}


def _error_result(message: str) -> CallToolResult:
    return CallToolResult(content=[TextContent(type="text", text=f"Error: {message}")], isError=True)


async def dispatch_tool(
    vault: GitHubVault,
    name: str,
    arguments: dict[str, Any] | None,
    search_timeout: float | None = None,
) -> CallToolResult:
    """Run one tool invocation and wrap the outcome in a CallToolResult.

    Failures never propagate: they come back as an error-flagged result.
    """
    handler = HANDLERS.get(name)
    if handler is None:
        return _error_result(f"Unknown tool: {name}")

    try:
        text = await handler(vault, arguments or {}, search_timeout)
    except VaultError as e:
        logger.warning("tool_call_failed", tool=name, error_type=type(e).__name__, error=str(e))
        return _error_result(str(e))
    except Exception as e:
        logger.exception("tool_call_crashed", tool=name)
        return _error_result(f"{type(e).__name__}: {e}")

    return CallToolResult(content=[TextContent(type="text", text=text)], isError=False)


# ============== Server ==============

def create_server(vault: GitHubVault, search_timeout: float | None = None) -> Server:
    """Build the MCP server exposing the vault tools."""
    server = Server(SERVER_NAME)

    @server.list_tools()
    async def list_tools() -> list[Tool]:
        """List available tools."""
        return TOOLS

    @server.call_tool()
    async def call_tool(name: str, arguments: dict[str, Any]) -> list[TextContent]:
        """Handle tool calls."""
        result = await dispatch_tool(vault, name, arguments, search_timeout)
        if result.isError:
            # The decorator turns raised exceptions into isError results
            raise ToolCallError(result.content[0].text)
        return result.content

    return server
