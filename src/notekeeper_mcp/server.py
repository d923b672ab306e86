"""
MCP Server for Notekeeper.

Exposes the logged-in user's notebook as tools. Log in once with the CLI
(`notekeeper login <email>`); the server acts as that user.
"""

import asyncio
import logging

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, Tool

from notekeeper.config import setup_logging
from notekeeper.display import format_categories, format_note, format_notes, short_id
from notekeeper.models import User
from notekeeper.notebook import create_category, create_note, edit_note, list_notes, remove_note
from notekeeper.query import ALL_CATEGORIES
from notekeeper.store import LocalDataStore, open_store

logger = logging.getLogger(__name__)

TOOLS = [
    Tool(
        name="notes_add",
        description="Add a note to the notebook. Category defaults to the user's first category.",
        inputSchema={
            "type": "object",
            "properties": {
                "content": {"type": "string", "description": "Note text"},
                "title": {"type": "string", "description": "Optional title"},
                "category": {"type": "string", "description": "Category name (optional)"},
            },
            "required": ["content"],
        },
    ),
    Tool(
        name="notes_list",
        description="List notes, optionally filtered by category, newest first unless order is 'asc'.",
        inputSchema={
            "type": "object",
            "properties": {
                "category": {"type": "string", "description": "Category name (default: all)"},
                "order": {
                    "type": "string",
                    "enum": ["asc", "desc"],
                    "default": "desc",
                },
            },
        },
    ),
    Tool(
        name="notes_search",
        description="Search notes. A note matches if any query word appears in its title or content.",
        inputSchema={
            "type": "object",
            "properties": {
                "query": {"type": "string", "description": "Search words"},
                "category": {"type": "string", "description": "Restrict to a category (optional)"},
            },
            "required": ["query"],
        },
    ),
    Tool(
        name="notes_update",
        description="Edit a note. Only the given fields change; an empty title clears it.",
        inputSchema={
            "type": "object",
            "properties": {
                "note_id": {"type": "string", "description": "Note id or unique prefix"},
                "content": {"type": "string"},
                "title": {"type": "string"},
                "category": {"type": "string"},
            },
            "required": ["note_id"],
        },
    ),
    Tool(
        name="notes_delete",
        description="Delete a note.",
        inputSchema={
            "type": "object",
            "properties": {
                "note_id": {"type": "string", "description": "Note id or unique prefix"},
            },
            "required": ["note_id"],
        },
    ),
    Tool(
        name="categories_list",
        description="List the user's categories.",
        inputSchema={"type": "object", "properties": {}},
    ),
    Tool(
        name="categories_add",
        description="Add a category. Fails if one with the same name (any case) exists.",
        inputSchema={
            "type": "object",
            "properties": {
                "name": {"type": "string", "description": "Category name"},
            },
            "required": ["name"],
        },
    ),
]


def text(message: str) -> list[TextContent]:
    return [TextContent(type="text", text=message)]


class NotebookTools:
    """Tool implementations, acting as the store's current user."""

    def __init__(self, store: LocalDataStore):
        self.store = store
        self.handlers = {
            "notes_add": self.tool_add,
            "notes_list": self.tool_list,
            "notes_search": self.tool_search,
            "notes_update": self.tool_update,
            "notes_delete": self.tool_delete,
            "categories_list": self.tool_categories,
            "categories_add": self.tool_add_category,
        }

    async def call(self, name: str, arguments: dict | None) -> list[TextContent]:
        """Dispatch a tool call; failures come back as an error message."""
        handler = self.handlers.get(name)
        if handler is None:
            return text(f"Unknown tool: {name}")
        try:
            return await handler(arguments or {})
        except Exception as e:
            logger.warning(f"Tool {name} failed: {e}")
            return text(f"Error: {e}")

    async def current_user(self) -> User:
        user = await self.store.get_current_user()
        if user is None:
            raise ValueError("Not logged in. Run: notekeeper login <email>")
        return user

    async def tool_add(self, args: dict) -> list[TextContent]:
        user = await self.current_user()
        note = await create_note(
            self.store,
            user,
            args.get("content", ""),
            title=args.get("title"),
            category=args.get("category"),
        )
        return text(f"Added: {short_id(note.id)} [{note.category}]")

    async def tool_list(self, args: dict) -> list[TextContent]:
        user = await self.current_user()
        category = args.get("category") or ALL_CATEGORIES
        notes = await list_notes(self.store, user, category=category, order=args.get("order", "desc"))
        return text(format_notes(notes))

    async def tool_search(self, args: dict) -> list[TextContent]:
        query = args.get("query", "").strip()
        if not query:
            return text("Error: Empty query")

        user = await self.current_user()
        category = args.get("category") or ALL_CATEGORIES
        notes = await list_notes(self.store, user, category=category, query=query)
        if not notes:
            return text(f"No notes matching '{query}'.")
        return text(format_notes(notes, heading=f"SEARCH: {query}"))

    async def tool_update(self, args: dict) -> list[TextContent]:
        user = await self.current_user()
        note = await edit_note(
            self.store,
            user,
            args.get("note_id", ""),
            content=args.get("content"),
            title=args.get("title"),
            category=args.get("category"),
        )
        return text(format_note(note))

    async def tool_delete(self, args: dict) -> list[TextContent]:
        user = await self.current_user()
        note = await remove_note(self.store, user, args.get("note_id", ""))
        return text(f"Deleted: {short_id(note.id)}")

    async def tool_categories(self, args: dict) -> list[TextContent]:
        user = await self.current_user()
        return text(format_categories(await self.store.get_categories(user.id)))

    async def tool_add_category(self, args: dict) -> list[TextContent]:
        user = await self.current_user()
        category = await create_category(self.store, user, args.get("name", ""))
        return text(f"Added category: {category.name}")


def create_server(store: LocalDataStore) -> Server:
    """Build an MCP server bound to one store."""
    server = Server("notekeeper")
    tools = NotebookTools(store)

    @server.list_tools()
    async def list_tools() -> list[Tool]:
        """List available tools."""
        return TOOLS

    @server.call_tool()
    async def call_tool(name: str, arguments: dict) -> list[TextContent]:
        """Handle tool calls."""
        return await tools.call(name, arguments)

    return server


async def main():
    """Run the MCP server."""
    setup_logging()
    server = create_server(open_store())
    async with stdio_server() as (read_stream, write_stream):
        await server.run(read_stream, write_stream, server.create_initialization_options())


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()
