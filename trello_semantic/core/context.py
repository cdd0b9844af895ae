"""Runtime context passed to every resolution and smart action.

The entry point builds one ResolverContext per process and hands it to the
tool runner. Nothing in the core reads the cache, the allow-list or the
credentials from module globals, so tests can build as many isolated
contexts as they need.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from trello_semantic.config.resolution_limits import (
    AMBIGUITY_GAP,
    FALLBACK_MATCH_THRESHOLD,
    MATCH_THRESHOLD,
    MAX_AMBIGUOUS_CANDIDATES,
    MAX_SUGGESTED_CANDIDATES,
)
from trello_semantic.config.settings import TrelloSettings
from trello_semantic.core.access import AccessScopeGuard
from trello_semantic.core.cache import ResolutionCache
from trello_semantic.services.trello import TrelloCredentials


@dataclass(frozen=True)
class MatchPolicy:
    match_threshold: float = MATCH_THRESHOLD
    fallback_threshold: float = FALLBACK_MATCH_THRESHOLD
    ambiguity_gap: float = AMBIGUITY_GAP
    max_ambiguous_candidates: int = MAX_AMBIGUOUS_CANDIDATES
    max_suggested_candidates: int = MAX_SUGGESTED_CANDIDATES


@dataclass
class ResolverContext:
    credentials: TrelloCredentials
    cache: Optional[ResolutionCache] = field(default_factory=ResolutionCache)
    guard: AccessScopeGuard = field(default_factory=AccessScopeGuard)
    policy: MatchPolicy = field(default_factory=MatchPolicy)
    default_board: Optional[str] = None

    @classmethod
    def from_settings(cls, settings: TrelloSettings) -> "ResolverContext":
        return cls(
            credentials=TrelloCredentials(api_key=settings.api_key, api_token=settings.api_token),
            cache=ResolutionCache(ttl_minutes=settings.cache_ttl_minutes),
            guard=AccessScopeGuard.from_setting(settings.allowed_boards),
            policy=MatchPolicy(
                match_threshold=settings.match_threshold,
                fallback_threshold=settings.fallback_match_threshold,
                ambiguity_gap=settings.ambiguity_gap,
            ),
            default_board=settings.default_board,
        )

    def board_name_or_default(self, board_name: Optional[str]) -> str:
        """Return the requested board name, the configured default, or ''."""

        return (board_name or "").strip() or (self.default_board or "").strip()
