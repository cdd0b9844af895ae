"""Tool definitions and execution for the Trello semantic layer.

This module centralizes the OpenAI-style schemas and async executors of
every smart action. How the schemas reach an agent is up to the host
process; ``run_tool`` only needs the tool name, its arguments and the
process ResolverContext.
"""

from __future__ import annotations

import inspect
import logging
from typing import Any, Awaitable, Callable, Dict, List

from trello_semantic.core.context import ResolverContext
from trello_semantic.services.trello_actions import (
    add_card_smart,
    add_comment_smart,
    archive_card_smart,
    get_archived_cards,
    get_board_snapshot,
    list_boards,
    move_card_smart,
    restore_card_smart,
    search_cards,
    update_card_smart,
)
from trello_semantic.utils.logger import generate_request_id, log_error, log_info, log_warn


logger = logging.getLogger("trello_semantic.tools")

ToolExecutor = Callable[..., Awaitable[Any]]


_TOOL_EXECUTORS: Dict[str, ToolExecutor] = {}
_TOOL_SCHEMAS: Dict[str, Dict[str, Any]] = {}

_BOARD_NAME_PROP = {
    "type": "string",
    "description": "Name of the Trello board (optional if TRELLO_DEFAULT_BOARD is set).",
}


def _register_tool(name: str, schema: Dict[str, Any], executor: ToolExecutor) -> None:
    """Register a tool with its OpenAI tool schema and async executor."""

    _TOOL_EXECUTORS[name] = executor
    _TOOL_SCHEMAS[name] = schema


def _schema(name: str, description: str, properties: Dict[str, Any], required: List[str]) -> Dict[str, Any]:
    return {
        "type": "function",
        "function": {
            "name": name,
            "description": description,
            "parameters": {"type": "object", "properties": properties, "required": required},
        },
    }


def _init_default_tools() -> None:
    if _TOOL_EXECUTORS:
        # Already initialized.
        return

    _register_tool(
        "list_boards",
        _schema(
            "list_boards",
            "List the Trello boards on the account (id, name, url, closed). Use it to learn board names.",
            {
                "filter": {
                    "type": "string",
                    "enum": ["open", "closed", "starred", "all"],
                    "description": 'Which boards to list. Default: "open".',
                },
                "limit": {
                    "type": "integer",
                    "minimum": 1,
                    "maximum": 100,
                    "description": "Maximum number of boards to return (default 50).",
                },
            },
            [],
        ),
        list_boards,
    )

    _register_tool(
        "get_board_snapshot",
        _schema(
            "get_board_snapshot",
            "Get complete board state with all lists and cards in a single call.",
            {"board_name": _BOARD_NAME_PROP},
            [],
        ),
        get_board_snapshot,
    )

    _register_tool(
        "get_archived_cards",
        _schema(
            "get_archived_cards",
            "Get archived (closed) cards from a board.",
            {"board_name": _BOARD_NAME_PROP},
            [],
        ),
        get_archived_cards,
    )

    _register_tool(
        "add_card_smart",
        _schema(
            "add_card_smart",
            "Create a new card using board and list names (no ids needed).",
            {
                "board_name": _BOARD_NAME_PROP,
                "list_name": {"type": "string", "description": "Name of the list to add the card to."},
                "card_title": {"type": "string", "description": "Title of the new card."},
                "description": {"type": "string", "description": "Optional card description."},
            },
            ["list_name", "card_title"],
        ),
        add_card_smart,
    )

    _register_tool(
        "move_card_smart",
        _schema(
            "move_card_smart",
            "Move a card to a different list using card and list names.",
            {
                "board_name": _BOARD_NAME_PROP,
                "card_name": {"type": "string", "description": "Name of the card to move."},
                "target_list_name": {"type": "string", "description": "Name of the target list."},
            },
            ["card_name", "target_list_name"],
        ),
        move_card_smart,
    )

    _register_tool(
        "update_card_smart",
        _schema(
            "update_card_smart",
            "Update a card's name, description or due date using its name.",
            {
                "board_name": _BOARD_NAME_PROP,
                "card_name": {"type": "string", "description": "Name of the card to update."},
                "name": {"type": "string", "description": "New name for the card."},
                "desc": {"type": "string", "description": "New description for the card."},
                "due": {"type": "string", "description": "New due date (ISO 8601)."},
            },
            ["card_name"],
        ),
        update_card_smart,
    )

    _register_tool(
        "archive_card_smart",
        _schema(
            "archive_card_smart",
            "Archive (close) a card using its name.",
            {
                "board_name": _BOARD_NAME_PROP,
                "card_name": {"type": "string", "description": "Name of the card to archive."},
            },
            ["card_name"],
        ),
        archive_card_smart,
    )

    _register_tool(
        "restore_card_smart",
        _schema(
            "restore_card_smart",
            "Restore an archived (closed) card using its name. Searches archived cards only.",
            {
                "board_name": _BOARD_NAME_PROP,
                "card_name": {"type": "string", "description": "Name of the card to restore."},
            },
            ["card_name"],
        ),
        restore_card_smart,
    )

    _register_tool(
        "add_comment_smart",
        _schema(
            "add_comment_smart",
            "Add a comment to a card using its name.",
            {
                "board_name": _BOARD_NAME_PROP,
                "card_name": {"type": "string", "description": "Name of the card to comment on."},
                "text": {"type": "string", "description": "Comment text."},
            },
            ["card_name", "text"],
        ),
        add_comment_smart,
    )

    _register_tool(
        "search_cards",
        _schema(
            "search_cards",
            "Search cards with Trello search operators.",
            {
                "query": {
                    "type": "string",
                    "description": 'Trello search query, e.g. "is:open list:Review label:Bug".',
                },
            },
            ["query"],
        ),
        search_cards,
    )


def get_tool_schemas() -> List[Dict[str, Any]]:
    """Return OpenAI-compatible tool schemas for all registered tools."""

    _init_default_tools()
    return list(_TOOL_SCHEMAS.values())


async def run_tool(name: str, args: Dict[str, Any], context: ResolverContext) -> Any:
    """Execute a named tool with the provided arguments.

    Returns tool output or an error structure if the call fails.
    """

    _init_default_tools()

    executor = _TOOL_EXECUTORS.get(name)
    if not executor:
        logger.error("Requested unknown tool: %s", name)
        return {"success": False, "error": "UNKNOWN_TOOL", "tool": name}

    safe_args = dict(args or {})
    request_id = generate_request_id()
    log_info("tool call", tool=name, request_id=request_id, args=safe_args)

    try:
        inspect.signature(executor).bind(context, **safe_args)
    except TypeError as exc:
        log_error("invalid arguments", tool=name, request_id=request_id, detail=repr(exc))
        return {"success": False, "error": "INVALID_ARGUMENTS", "tool": name, "detail": str(exc)}

    try:
        result = await executor(context, **safe_args)
    except Exception as exc:  # noqa: BLE001
        logger.exception("Error while executing tool %s", name)
        log_error("tool failed", tool=name, request_id=request_id, detail=repr(exc))
        return {"success": False, "error": "TOOL_EXECUTION_FAILED", "tool": name}

    if isinstance(result, dict) and result.get("success") is False:
        log_warn("tool returned error", tool=name, request_id=request_id, error=result.get("error"))
    return result
