"""Configuration package for the Trello semantic layer."""

from trello_semantic.config.resolution_limits import (
    AMBIGUITY_GAP,
    DEFAULT_CACHE_TTL_MINUTES,
    FALLBACK_MATCH_THRESHOLD,
    MATCH_THRESHOLD,
)
from trello_semantic.config.settings import TrelloSettings, load_settings

__all__ = [
    "AMBIGUITY_GAP",
    "DEFAULT_CACHE_TTL_MINUTES",
    "FALLBACK_MATCH_THRESHOLD",
    "MATCH_THRESHOLD",
    "TrelloSettings",
    "load_settings",
]
