"""Reduce raw Trello payloads to compact, agent-friendly entities.

Cleaning runs top-down (board -> lists -> cards) so the member and label
lookup maps built from the board are available to every card below it.
The maps live only for one cleaning pass.

Cleaning never raises on partial or malformed input: missing arrays become
empty, missing strings become "", a missing due date becomes None. Inputs
are never mutated.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Union

from trello_semantic.models.entities import (
    CleanBoard,
    CleanCard,
    CleanEntity,
    CleanList,
    EntityKind,
)


LookupMap = Dict[str, str]


def _as_dict(raw: Any) -> Dict[str, Any]:
    return raw if isinstance(raw, dict) else {}


def _as_list(raw: Any) -> List[Any]:
    return raw if isinstance(raw, list) else []


def _text(value: Any) -> str:
    return value if isinstance(value, str) else ""


def _ident(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def _url(raw: Dict[str, Any]) -> str:
    return _text(raw.get("url")) or _text(raw.get("shortUrl"))


def build_member_map(board: Any) -> LookupMap:
    """Map member id -> full name from a board's embedded members."""

    member_map: LookupMap = {}
    for member in _as_list(_as_dict(board).get("members")):
        if not isinstance(member, dict):
            continue
        member_id = member.get("id")
        full_name = member.get("fullName")
        if member_id and isinstance(full_name, str) and full_name:
            member_map[_ident(member_id)] = full_name
    return member_map


def build_label_map(board: Any) -> LookupMap:
    """Map label id -> label name from a board's embedded labels."""

    label_map: LookupMap = {}
    for label in _as_list(_as_dict(board).get("labels")):
        if not isinstance(label, dict):
            continue
        label_id = label.get("id")
        name = label.get("name")
        if label_id and isinstance(name, str) and name:
            label_map[_ident(label_id)] = name
    return label_map


def checklist_status(checklists: Any) -> str:
    """Return "completed/total" across every check item of every checklist."""

    total = 0
    completed = 0
    for checklist in _as_list(checklists):
        items = _as_list(_as_dict(checklist).get("checkItems"))
        total += len(items)
        completed += sum(1 for item in items if _as_dict(item).get("state") == "complete")
    return f"{completed}/{total}"


def _resolve_members(card: Dict[str, Any], member_map: Optional[LookupMap]) -> List[str]:
    if not member_map:
        return []
    members: List[str] = []
    for member_id in _as_list(card.get("idMembers")):
        name = member_map.get(_ident(member_id))
        # unknown ids are dropped, never shown as placeholders
        if name:
            members.append(name)
    return members


def _resolve_labels(card: Dict[str, Any], label_map: Optional[LookupMap]) -> List[str]:
    labels: List[str] = []
    for label in _as_list(card.get("labels")):
        if isinstance(label, str):
            name = (label_map or {}).get(label)
        else:
            name = _text(_as_dict(label).get("name"))
        if name:
            labels.append(name)
    return labels


def clean_card(
    card: Any,
    member_map: Optional[LookupMap] = None,
    label_map: Optional[LookupMap] = None,
) -> CleanCard:
    raw = _as_dict(card)
    return CleanCard(
        id=_ident(raw.get("id")),
        name=_text(raw.get("name")),
        desc=_text(raw.get("desc")),
        due=_text(raw.get("due")) or None,
        labels=_resolve_labels(raw, label_map),
        members=_resolve_members(raw, member_map),
        checklist_status=checklist_status(raw.get("checklists")),
        url=_url(raw),
        closed=bool(raw.get("closed", False)),
    )


def clean_list(
    lst: Any,
    member_map: Optional[LookupMap] = None,
    label_map: Optional[LookupMap] = None,
) -> CleanList:
    raw = _as_dict(lst)
    fields: Dict[str, Any] = {
        "id": _ident(raw.get("id")),
        "name": _text(raw.get("name")),
        "closed": bool(raw.get("closed", False)),
    }
    if isinstance(raw.get("cards"), list):
        fields["cards"] = [clean_card(card, member_map, label_map) for card in raw["cards"]]
    return CleanList(**fields)


def attach_cards_to_lists(board: Any) -> Any:
    """Move a board's flat ``cards`` array under the lists they belong to.

    Trello's "expand everything" board call returns lists and cards as
    sibling arrays linked by ``idList``. Returns a new board dict whose lists
    each carry exactly their own cards; cards without a known list are
    dropped. Payloads without both arrays are returned untouched.
    """

    raw = _as_dict(board)
    cards = raw.get("cards")
    lists = raw.get("lists")
    if not isinstance(cards, list) or not isinstance(lists, list):
        return board

    cards_by_list: Dict[str, List[Any]] = {}
    for card in cards:
        list_id = _as_dict(card).get("idList")
        if not list_id:
            continue
        cards_by_list.setdefault(_ident(list_id), []).append(card)

    stitched_lists = []
    for lst in lists:
        if not isinstance(lst, dict):
            continue
        stitched = dict(lst)
        stitched["cards"] = cards_by_list.get(_ident(lst.get("id")), [])
        stitched_lists.append(stitched)

    stitched_board = {key: value for key, value in raw.items() if key != "cards"}
    stitched_board["lists"] = stitched_lists
    return stitched_board


def clean_board(board: Any) -> CleanBoard:
    raw = _as_dict(attach_cards_to_lists(board))
    member_map = build_member_map(raw)
    label_map = build_label_map(raw)

    fields: Dict[str, Any] = {
        "id": _ident(raw.get("id")),
        "name": _text(raw.get("name")),
        "desc": _text(raw.get("desc")),
        "url": _url(raw),
    }
    if isinstance(raw.get("lists"), list):
        fields["lists"] = [clean_list(lst, member_map, label_map) for lst in raw["lists"]]
    return CleanBoard(**fields)


_CLEANERS = {
    EntityKind.BOARD: clean_board,
    EntityKind.LIST: clean_list,
    EntityKind.CARD: clean_card,
}

Normalized = Union[CleanEntity, List[CleanEntity]]


def normalize(raw: Any, kind: Union[EntityKind, str]) -> Normalized:
    """Clean a payload whose kind the caller already knows.

    A JSON array is cleaned element by element.
    """

    cleaner = _CLEANERS[EntityKind(kind)]
    if isinstance(raw, list):
        return [cleaner(item) for item in raw]
    return cleaner(raw)


def _sniff_kind(raw: Dict[str, Any]) -> Optional[EntityKind]:
    if "lists" in raw or "prefs" in raw:
        return EntityKind.BOARD
    if "cards" in raw:
        return EntityKind.LIST
    if "idList" in raw or "badges" in raw:
        return EntityKind.CARD
    return None


def normalize_unknown(raw: Any) -> Any:
    """Best-effort cleaning for payloads of unknown origin.

    Heuristic: boards carry ``lists`` or ``prefs``, lists carry ``cards``,
    cards carry ``idList`` or ``badges``. Arrays are sniffed from their first
    element. Anything unrecognised is returned unchanged. Prefer
    ``normalize(raw, kind)`` whenever the kind is known.
    """

    if isinstance(raw, list):
        if not raw or not isinstance(raw[0], dict):
            return raw
        kind = _sniff_kind(raw[0])
    elif isinstance(raw, dict):
        kind = _sniff_kind(raw)
    else:
        return raw

    if kind is None:
        return raw
    return normalize(raw, kind)


def to_plain(result: Any) -> Any:
    """Convert cleaned entities (or lists of them) to JSON-ready dicts."""

    if isinstance(result, CleanEntity):
        return result.to_dict()
    if isinstance(result, list):
        return [to_plain(item) for item in result]
    return result
