"""Environment-backed settings for the Trello semantic layer.

Values are read from the process environment. The entry point calls
``load_dotenv()`` before ``load_settings()`` so a local ``.env`` file works
the same way as exported variables.
"""

from __future__ import annotations

import logging
import os
from typing import List, Optional

from pydantic import BaseModel

from trello_semantic.config.resolution_limits import (
    AMBIGUITY_GAP,
    DEFAULT_CACHE_TTL_MINUTES,
    FALLBACK_MATCH_THRESHOLD,
    MATCH_THRESHOLD,
)


logger = logging.getLogger("trello_semantic.settings")


class TrelloSettings(BaseModel):
    """Runtime configuration consumed by the resolver context."""

    api_key: str = ""
    api_token: str = ""
    allowed_boards: Optional[str] = None
    default_board: Optional[str] = None
    cache_ttl_minutes: float = DEFAULT_CACHE_TTL_MINUTES
    match_threshold: float = MATCH_THRESHOLD
    fallback_match_threshold: float = FALLBACK_MATCH_THRESHOLD
    ambiguity_gap: float = AMBIGUITY_GAP

    @property
    def has_credentials(self) -> bool:
        return bool(self.api_key and self.api_token)


def parse_board_list(raw: Optional[str]) -> Optional[List[str]]:
    """Split a comma-separated board list into normalized names.

    Returns None when nothing usable is configured.
    """

    if not raw:
        return None
    parsed = [part.strip().lower() for part in raw.split(",")]
    parsed = [part for part in parsed if part]
    return parsed or None


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning("Ignoring non-numeric %s=%r, using %s", name, raw, default)
        return default


def load_settings() -> TrelloSettings:
    """Build settings from environment variables."""

    default_board = (os.getenv("TRELLO_DEFAULT_BOARD") or "").strip() or None

    return TrelloSettings(
        api_key=os.getenv("TRELLO_API_KEY", ""),
        api_token=os.getenv("TRELLO_API_TOKEN", ""),
        allowed_boards=os.getenv("TRELLO_ALLOWED_BOARDS"),
        default_board=default_board,
        cache_ttl_minutes=_float_env("TRELLO_CACHE_TTL_MINUTES", DEFAULT_CACHE_TTL_MINUTES),
        match_threshold=_float_env("TRELLO_MATCH_THRESHOLD", MATCH_THRESHOLD),
        fallback_match_threshold=_float_env("TRELLO_FALLBACK_MATCH_THRESHOLD", FALLBACK_MATCH_THRESHOLD),
        ambiguity_gap=_float_env("TRELLO_AMBIGUITY_GAP", AMBIGUITY_GAP),
    )
