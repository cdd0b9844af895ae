"""Semantic name resolution for Trello boards, lists and cards.

Turns a human-readable name into a Trello id using, in order: the access
guard (boards only), the TTL cache, a case-insensitive exact match against
the live listing, and finally fuzzy matching. Fuzzy matching refuses to
guess: a near-tie between the two best candidates or a low best score
raises an error listing the names the agent can retry with.

Cards are resolved through the search API first because boards can hold
thousands of cards; the open-card listing is only a fallback for cards the
search index has not picked up yet.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from trello_semantic.config.resolution_limits import CARD_RESOLVE_SEARCH_LIMIT
from trello_semantic.core.context import ResolverContext
from trello_semantic.core.errors import (
    AmbiguousName,
    NoConfidentMatch,
    NotFoundEmpty,
    format_candidates,
)
from trello_semantic.core.similarity import fuzzy_match, normalize_name, rank_candidates
from trello_semantic.services.trello import (
    fetch_boards,
    fetch_lists,
    fetch_open_cards,
    search_cards,
)


logger = logging.getLogger("trello_semantic.resolver")


@dataclass(frozen=True)
class Resolution:
    id: str
    exact_match: bool
    name: str = ""


def _named_items(payload: Any) -> List[Dict[str, Any]]:
    """Keep only listing entries that carry both an id and a string name."""

    if not isinstance(payload, list):
        return []
    return [
        item
        for item in payload
        if isinstance(item, dict) and item.get("id") and isinstance(item.get("name"), str)
    ]


def _find_exact(items: List[Dict[str, Any]], name: str) -> Optional[Dict[str, Any]]:
    wanted = normalize_name(name)
    for item in items:
        if normalize_name(item.get("name")) == wanted:
            return item
    return None


def _match_listing(
    context: ResolverContext,
    items: List[Dict[str, Any]],
    name: str,
    *,
    kind: str,
    plural: str,
    threshold: float,
) -> Resolution:
    """Exact match, then fuzzy match, over a non-empty listing."""

    exact = _find_exact(items, name)
    if exact is not None:
        logger.debug("%s '%s' matched exactly (%s)", kind, name, exact["id"])
        return Resolution(id=str(exact["id"]), exact_match=True, name=exact["name"])

    policy = context.policy
    names = [item["name"] for item in items]
    match = fuzzy_match(name, names, ambiguity_gap=policy.ambiguity_gap)

    if match is None:
        available = names[: policy.max_ambiguous_candidates]
        logger.info("%s '%s' is ambiguous among %d candidates", kind, name, len(names))
        raise AmbiguousName(
            f'{kind} "{name}" not found. Multiple similar matches detected.\n\n'
            f"Please use the exact name. Available {plural}:\n{format_candidates(available)}",
            candidates=available,
        )

    if match.score < threshold:
        suggestions = [m.candidate for m in rank_candidates(name, names)[: policy.max_suggested_candidates]]
        logger.info("%s '%s' best match '%s' scored %.2f, below %.2f", kind, name, match.candidate, match.score, threshold)
        raise NoConfidentMatch(
            f'{kind} "{name}" not found.\n\nDid you mean one of these?\n{format_candidates(suggestions)}',
            candidates=suggestions,
        )

    matched = next(item for item in items if item["name"] == match.candidate)
    logger.info("%s '%s' fuzzy-matched '%s' (score %.2f)", kind, name, match.candidate, match.score)
    return Resolution(id=str(matched["id"]), exact_match=False, name=matched["name"])


async def resolve_board_id(context: ResolverContext, board_name: str) -> Resolution:
    """Resolve a board name to its id."""

    context.guard.ensure_allowed(board_name)

    cache = context.cache
    if cache is not None:
        cached = cache.get_named(board_name)
        if cached:
            logger.debug("Board '%s' served from cache", board_name)
            return Resolution(id=cached[0], exact_match=True, name=cached[1])

    boards = _named_items(await fetch_boards(context.credentials))
    if not boards:
        raise NotFoundEmpty("No boards found for this account")

    resolution = _match_listing(
        context,
        boards,
        board_name,
        kind="Board",
        plural="boards",
        threshold=context.policy.match_threshold,
    )
    if cache is not None:
        cache.set(board_name, resolution.id, canonical=resolution.name)
    return resolution


async def resolve_list_id(context: ResolverContext, board_id: str, list_name: str) -> Resolution:
    """Resolve a list name to its id within one board."""

    cache = context.cache
    if cache is not None:
        cached = cache.get_named(list_name, scope=board_id)
        if cached:
            logger.debug("List '%s' on board %s served from cache", list_name, board_id)
            return Resolution(id=cached[0], exact_match=True, name=cached[1])

    lists = _named_items(await fetch_lists(context.credentials, board_id))
    if not lists:
        raise NotFoundEmpty("No lists found on this board")

    resolution = _match_listing(
        context,
        lists,
        list_name,
        kind="List",
        plural="lists",
        threshold=context.policy.match_threshold,
    )
    if cache is not None:
        cache.set(list_name, resolution.id, scope=board_id, canonical=resolution.name)
    return resolution


def card_name_query(card_name: str, *operators: str) -> str:
    """Build a Trello search query matching a card title."""

    cleaned = card_name.strip().replace('"', "")
    return " ".join([f'name:"{cleaned}"', *operators])


async def resolve_card_id(context: ResolverContext, board_id: str, card_name: str) -> Resolution:
    """Resolve a card name to its id within one board.

    Card ids are not cached: titles change far more often than board or
    list names.
    """

    results = _named_items(
        await search_cards(
            context.credentials,
            card_name_query(card_name),
            limit=CARD_RESOLVE_SEARCH_LIMIT,
            board_ids=[board_id],
        )
    )

    if not results:
        logger.info("Search found no card named '%s', falling back to open-card listing", card_name)
        return await _resolve_card_from_listing(context, board_id, card_name)

    exact = _find_exact(results, card_name)
    if exact is not None:
        return Resolution(id=str(exact["id"]), exact_match=True, name=exact["name"])

    # No exact title among the hits: Trello's relevance order decides.
    first = results[0]
    logger.info("Card '%s' resolved to top search hit '%s'", card_name, first["name"])
    return Resolution(id=str(first["id"]), exact_match=False, name=first["name"])


async def _resolve_card_from_listing(context: ResolverContext, board_id: str, card_name: str) -> Resolution:
    cards = _named_items(await fetch_open_cards(context.credentials, board_id))
    if not cards:
        raise NotFoundEmpty(f'Card "{card_name}" not found on this board (including fallback)')

    return _match_listing(
        context,
        cards,
        card_name,
        kind="Card",
        plural="cards",
        threshold=context.policy.fallback_threshold,
    )
