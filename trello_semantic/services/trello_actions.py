"""Semantic Trello actions exposed as agent tools.

Every action takes human-readable names, resolves them to ids, performs the
Trello call and returns the cleaned result. Results use the same envelope
throughout: ``{"success": True, "message"?, "data": ...}`` on success and
``{"success": False, "error": CODE, "message": hint}`` on failure, where
the hint lists candidate names the agent can retry with.

A 404 from Trello after the board was resolved means something cached for
that board is stale, so every board-scoped action drops the board's cache
scope before reporting the failure.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from trello_semantic.config.resolution_limits import (
    BOARD_LIST_LIMIT,
    CARD_RESOLVE_SEARCH_LIMIT,
    CARD_SEARCH_LIMIT,
    MAX_BOARD_LIST_LIMIT,
)
from trello_semantic.core.context import ResolverContext
from trello_semantic.core.errors import ResolutionError, UpstreamError
from trello_semantic.core.normalizer import normalize, to_plain
from trello_semantic.core.resolver import (
    Resolution,
    card_name_query,
    resolve_board_id,
    resolve_card_id,
    resolve_list_id,
)
from trello_semantic.core.similarity import normalize_name
from trello_semantic.models.entities import EntityKind
from trello_semantic.services.trello import (
    BOARD_LIST_FIELDS,
    SEARCH_CARD_FIELDS,
    add_comment,
    create_card,
    fetch_archived_cards,
    fetch_board_snapshot,
    fetch_boards,
    search_cards as trello_search,
    update_card,
)


logger = logging.getLogger("trello_semantic.actions")


def _missing_board() -> Dict[str, Any]:
    return {
        "success": False,
        "error": "MISSING_BOARD",
        "message": (
            "Board name is required. Either provide board_name or set the "
            "TRELLO_DEFAULT_BOARD environment variable."
        ),
    }


def _forget_board_if_gone(context: ResolverContext, board_id: str, exc: UpstreamError) -> None:
    """Drop cached ids of a board when Trello says a target no longer exists."""

    if exc.status_code == 404 and context.cache is not None:
        logger.info("Invalidating cached ids for board %s after 404", board_id)
        context.cache.invalidate_scope(board_id)


def _failure(
    action: str,
    exc: ResolutionError,
    context: ResolverContext,
    board: Optional[Resolution] = None,
) -> Dict[str, Any]:
    logger.warning("%s failed: %s %s", action, exc.code, exc.message.splitlines()[0])
    if board is not None and isinstance(exc, UpstreamError):
        _forget_board_if_gone(context, board.id, exc)
    return exc.to_result()


def _clean_card(raw: Any) -> Dict[str, Any]:
    return to_plain(normalize(raw, EntityKind.CARD))


async def _resolve_board(context: ResolverContext, board_name: Optional[str]) -> Optional[Resolution]:
    name = context.board_name_or_default(board_name)
    if not name:
        return None
    return await resolve_board_id(context, name)


_BOARD_FILTERS = ("open", "closed", "starred", "all")


async def list_boards(
    context: ResolverContext,
    filter: str = "open",
    limit: int = BOARD_LIST_LIMIT,
) -> Dict[str, Any]:
    """List the account's boards so the agent can learn their names.

    Boards outside the configured allow-list are left out.
    """

    board_filter = (filter or "open").strip().lower()
    if board_filter not in _BOARD_FILTERS:
        return {
            "success": False,
            "error": "INVALID_FILTER",
            "message": f"filter must be one of: {', '.join(_BOARD_FILTERS)}",
        }
    try:
        limit = max(1, min(int(limit), MAX_BOARD_LIST_LIMIT))
    except (TypeError, ValueError):
        return {"success": False, "error": "INVALID_LIMIT", "message": "limit must be a number between 1 and 100."}

    try:
        raw = await fetch_boards(context.credentials, board_filter=board_filter, fields=BOARD_LIST_FIELDS)
    except ResolutionError as exc:
        return _failure("list_boards", exc, context)

    boards = []
    for board in raw if isinstance(raw, list) else []:
        if not isinstance(board, dict) or not board.get("id"):
            continue
        name = board.get("name") if isinstance(board.get("name"), str) else ""
        if not context.guard.is_allowed(name):
            continue
        boards.append(
            {
                "id": str(board["id"]),
                "name": name,
                "url": board.get("url") or board.get("shortUrl") or "",
                "closed": bool(board.get("closed", False)),
            }
        )

    boards = boards[:limit]
    return {"success": True, "data": {"filter": board_filter, "count": len(boards), "boards": boards}}


async def get_board_snapshot(context: ResolverContext, board_name: Optional[str] = None) -> Dict[str, Any]:
    """Get the whole board (lists, cards, members, labels) in a single call."""

    board: Optional[Resolution] = None
    try:
        board = await _resolve_board(context, board_name)
        if board is None:
            return _missing_board()
        raw = await fetch_board_snapshot(context.credentials, board.id)
    except ResolutionError as exc:
        return _failure("get_board_snapshot", exc, context, board)

    cleaned = to_plain(normalize(raw, EntityKind.BOARD))
    return {
        "success": True,
        "data": {
            "boardName": cleaned.get("name", ""),
            "boardId": cleaned.get("id", ""),
            "boardUrl": cleaned.get("url", ""),
            "description": cleaned.get("desc", ""),
            "lists": cleaned.get("lists") or [],
        },
    }


async def get_archived_cards(context: ResolverContext, board_name: Optional[str] = None) -> Dict[str, Any]:
    board: Optional[Resolution] = None
    try:
        board = await _resolve_board(context, board_name)
        if board is None:
            return _missing_board()
        raw = await fetch_archived_cards(context.credentials, board.id)
    except ResolutionError as exc:
        return _failure("get_archived_cards", exc, context, board)

    cards = to_plain(normalize(raw if isinstance(raw, list) else [], EntityKind.CARD))
    return {"success": True, "data": {"cards": cards}}


async def add_card_smart(
    context: ResolverContext,
    list_name: str,
    card_title: str,
    board_name: Optional[str] = None,
    description: Optional[str] = None,
) -> Dict[str, Any]:
    """Create a card using board and list names."""

    board: Optional[Resolution] = None
    try:
        board = await _resolve_board(context, board_name)
        if board is None:
            return _missing_board()
        target = await resolve_list_id(context, board.id, list_name)
        raw = await create_card(context.credentials, target.id, card_title, description)
    except ResolutionError as exc:
        return _failure("add_card_smart", exc, context, board)

    return {
        "success": True,
        "message": f'Card "{card_title}" created successfully in list "{target.name or list_name}"',
        "data": {"card": _clean_card(raw)},
    }


async def move_card_smart(
    context: ResolverContext,
    card_name: str,
    target_list_name: str,
    board_name: Optional[str] = None,
) -> Dict[str, Any]:
    """Move a card to another list on the same board, by names."""

    board: Optional[Resolution] = None
    try:
        board = await _resolve_board(context, board_name)
        if board is None:
            return _missing_board()
        card = await resolve_card_id(context, board.id, card_name)
        target = await resolve_list_id(context, board.id, target_list_name)
        raw = await update_card(context.credentials, card.id, {"idList": target.id})
    except ResolutionError as exc:
        return _failure("move_card_smart", exc, context, board)

    return {
        "success": True,
        "message": f'Card "{card.name}" moved to list "{target.name or target_list_name}"',
        "data": {"card": _clean_card(raw)},
    }


async def update_card_smart(
    context: ResolverContext,
    card_name: str,
    board_name: Optional[str] = None,
    name: Optional[str] = None,
    desc: Optional[str] = None,
    due: Optional[str] = None,
) -> Dict[str, Any]:
    """Update a card's title, description or due date, addressed by name."""

    fields: Dict[str, Any] = {}
    if name:
        fields["name"] = name
    if desc:
        fields["desc"] = desc
    if due:
        fields["due"] = due
    if not fields:
        return {
            "success": False,
            "error": "MISSING_FIELDS",
            "message": "Provide at least one of name, desc or due to update the card.",
        }

    board: Optional[Resolution] = None
    try:
        board = await _resolve_board(context, board_name)
        if board is None:
            return _missing_board()
        card = await resolve_card_id(context, board.id, card_name)
        raw = await update_card(context.credentials, card.id, fields)
    except ResolutionError as exc:
        return _failure("update_card_smart", exc, context, board)

    return {
        "success": True,
        "message": f'Card "{card.name}" updated successfully',
        "data": {"card": _clean_card(raw)},
    }


async def archive_card_smart(
    context: ResolverContext,
    card_name: str,
    board_name: Optional[str] = None,
) -> Dict[str, Any]:
    board: Optional[Resolution] = None
    try:
        board = await _resolve_board(context, board_name)
        if board is None:
            return _missing_board()
        card = await resolve_card_id(context, board.id, card_name)
        raw = await update_card(context.credentials, card.id, {"closed": True})
    except ResolutionError as exc:
        return _failure("archive_card_smart", exc, context, board)

    return {
        "success": True,
        "message": f'Card "{card.name}" archived',
        "data": {"card": _clean_card(raw)},
    }


def _pick_archived(cards: List[Dict[str, Any]], card_name: str) -> Optional[Dict[str, Any]]:
    candidates = [c for c in cards if isinstance(c, dict) and c.get("id")]
    wanted = normalize_name(card_name)
    for card in candidates:
        if normalize_name(card.get("name")) == wanted:
            return card
    return candidates[0] if candidates else None


async def restore_card_smart(
    context: ResolverContext,
    card_name: str,
    board_name: Optional[str] = None,
) -> Dict[str, Any]:
    """Restore an archived card, searching archived cards only."""

    board: Optional[Resolution] = None
    try:
        board = await _resolve_board(context, board_name)
        if board is None:
            return _missing_board()
        hits = await trello_search(
            context.credentials,
            card_name_query(card_name, "is:archived"),
            limit=CARD_RESOLVE_SEARCH_LIMIT,
            board_ids=[board.id],
        )
        archived = _pick_archived(hits, card_name)
        if archived is None:
            return {
                "success": False,
                "error": "NOT_FOUND",
                "message": f'No archived card found with name "{card_name}" on board "{board.name}"',
            }
        raw = await update_card(context.credentials, str(archived["id"]), {"closed": False})
    except ResolutionError as exc:
        return _failure("restore_card_smart", exc, context, board)

    return {
        "success": True,
        "message": f'Card "{archived.get("name") or card_name}" restored successfully',
        "data": {"card": _clean_card(raw)},
    }


async def add_comment_smart(
    context: ResolverContext,
    card_name: str,
    text: str,
    board_name: Optional[str] = None,
) -> Dict[str, Any]:
    if not (text or "").strip():
        return {"success": False, "error": "MISSING_TEXT", "message": "What should the comment say?"}

    board: Optional[Resolution] = None
    try:
        board = await _resolve_board(context, board_name)
        if board is None:
            return _missing_board()
        card = await resolve_card_id(context, board.id, card_name)
        action = await add_comment(context.credentials, card.id, text.strip())
    except ResolutionError as exc:
        return _failure("add_comment_smart", exc, context, board)

    comment_id = action.get("id") if isinstance(action, dict) else None
    return {
        "success": True,
        "message": f'Comment added to card "{card.name}"',
        "data": {"cardId": card.id, "commentId": comment_id or "", "text": text.strip()},
    }


async def search_cards(context: ResolverContext, query: str) -> Dict[str, Any]:
    """Search cards with Trello operators, e.g. 'is:open list:Review label:Bug'."""

    if not (query or "").strip():
        return {"success": False, "error": "MISSING_QUERY", "message": "What should I search for?"}

    try:
        cards = await trello_search(
            context.credentials,
            query,
            limit=CARD_SEARCH_LIMIT,
            card_fields=SEARCH_CARD_FIELDS,
            with_checklists=True,
        )
    except ResolutionError as exc:
        return _failure("search_cards", exc, context)

    cleaned = to_plain(normalize(cards, EntityKind.CARD))
    return {"success": True, "data": {"query": query, "count": len(cleaned), "cards": cleaned}}
