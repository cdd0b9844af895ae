"""Trello REST API calls used by the resolver and the smart actions.

This module exposes a small set of async helpers for working with Trello via
its REST API. They return the decoded JSON as-is; cleaning is the
normalizer's job. Failures raise UpstreamError (see services.http).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from trello_semantic.config.resolution_limits import CARD_RESOLVE_SEARCH_LIMIT
from trello_semantic.services.http import request_json


_TRELLO_BASE_URL = "https://api.trello.com/1"

SNAPSHOT_CARD_FIELDS = "name,desc,due,labels,idMembers,url,closed,idChecklists,idList"
SEARCH_CARD_FIELDS = "name,desc,due,labels,idMembers,url,closed,idChecklists"
BOARD_LIST_FIELDS = "id,name,url,closed"


@dataclass(frozen=True)
class TrelloCredentials:
    api_key: str = ""
    api_token: str = ""

    def __repr__(self) -> str:
        return "TrelloCredentials(api_key=***, api_token=***)"


def _auth_params(credentials: TrelloCredentials) -> Dict[str, str]:
    """Return Trello auth query parameters."""

    params: Dict[str, str] = {}
    if credentials.api_key:
        params["key"] = credentials.api_key
    if credentials.api_token:
        params["token"] = credentials.api_token
    return params


async def fetch_boards(
    credentials: TrelloCredentials,
    board_filter: Optional[str] = None,
    fields: Optional[str] = None,
) -> Any:
    """Return boards for the authorized Trello member.

    ``board_filter`` is one of Trello's member board filters ("open",
    "closed", "starred", "all"); without it Trello returns every board.
    """

    params = _auth_params(credentials)
    if board_filter:
        params["filter"] = board_filter
    if fields:
        params["fields"] = fields
    return await request_json(
        "GET",
        f"{_TRELLO_BASE_URL}/members/me/boards",
        action="fetch boards",
        params=params,
    )


async def fetch_lists(credentials: TrelloCredentials, board_id: str) -> Any:
    """Return the lists on a board."""

    return await request_json(
        "GET",
        f"{_TRELLO_BASE_URL}/boards/{board_id}/lists",
        action="fetch lists",
        params=_auth_params(credentials),
    )


async def fetch_open_cards(credentials: TrelloCredentials, board_id: str) -> Any:
    """Return the open cards on a board, names only."""

    params = _auth_params(credentials)
    params.update({"filter": "open", "fields": "name,closed"})
    return await request_json(
        "GET",
        f"{_TRELLO_BASE_URL}/boards/{board_id}/cards",
        action="list open cards",
        params=params,
    )


async def fetch_archived_cards(credentials: TrelloCredentials, board_id: str) -> Any:
    return await request_json(
        "GET",
        f"{_TRELLO_BASE_URL}/boards/{board_id}/cards/closed",
        action="fetch archived cards",
        params=_auth_params(credentials),
    )


async def fetch_board_snapshot(credentials: TrelloCredentials, board_id: str) -> Any:
    """Fetch a board with its lists, visible cards, members, labels and checklists.

    Trello returns cards as a flat array next to the lists; the normalizer
    stitches them back under their lists.
    """

    params = _auth_params(credentials)
    params.update(
        {
            "lists": "all",
            "cards": "visible",
            "members": "all",
            "labels": "all",
            "card_fields": SNAPSHOT_CARD_FIELDS,
            "card_checklists": "all",
        }
    )
    return await request_json(
        "GET",
        f"{_TRELLO_BASE_URL}/boards/{board_id}",
        action="fetch board",
        params=params,
    )


async def search_cards(
    credentials: TrelloCredentials,
    query: str,
    limit: int = CARD_RESOLVE_SEARCH_LIMIT,
    board_ids: Optional[List[str]] = None,
    card_fields: Optional[str] = None,
    with_checklists: bool = False,
) -> List[Dict[str, Any]]:
    """Run a Trello search restricted to cards and return the card array."""

    params: Dict[str, Any] = _auth_params(credentials)
    params.update({"query": query, "modelTypes": "cards", "cards_limit": str(limit)})
    if board_ids:
        params["idBoards"] = ",".join(board_ids)
    if card_fields:
        params["card_fields"] = card_fields
    if with_checklists:
        params["card_checklists"] = "all"

    data = await request_json(
        "GET",
        f"{_TRELLO_BASE_URL}/search",
        action="search cards",
        params=params,
    )
    if not isinstance(data, dict):
        return []
    cards = data.get("cards")
    return cards if isinstance(cards, list) else []


async def create_card(
    credentials: TrelloCredentials,
    list_id: str,
    name: str,
    description: Optional[str] = None,
) -> Any:
    params = _auth_params(credentials)
    params.update({"idList": list_id, "name": name})
    if description:
        params["desc"] = description
    return await request_json(
        "POST",
        f"{_TRELLO_BASE_URL}/cards",
        action="create card",
        params=params,
    )


async def update_card(credentials: TrelloCredentials, card_id: str, fields: Dict[str, Any]) -> Any:
    """Update card fields (idList, name, desc, due, closed, ...)."""

    return await request_json(
        "PUT",
        f"{_TRELLO_BASE_URL}/cards/{card_id}",
        action="update card",
        params=_auth_params(credentials),
        json_body=fields,
    )


async def add_comment(credentials: TrelloCredentials, card_id: str, text: str) -> Any:
    params = _auth_params(credentials)
    params["text"] = text
    return await request_json(
        "POST",
        f"{_TRELLO_BASE_URL}/cards/{card_id}/actions/comments",
        action="add comment",
        params=params,
    )
