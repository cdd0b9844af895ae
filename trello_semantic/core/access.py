from __future__ import annotations

from typing import Iterable, Optional

from trello_semantic.config.settings import parse_board_list
from trello_semantic.core.errors import AccessDenied
from trello_semantic.core.similarity import normalize_name


class AccessScopeGuard:
    """Restricts board resolution to an optional allow-list of names."""

    def __init__(self, allowed_boards: Optional[Iterable[str]] = None) -> None:
        names = {normalize_name(name) for name in (allowed_boards or [])}
        names.discard("")
        self._allowed = frozenset(names) if names else None

    @classmethod
    def from_setting(cls, raw: Optional[str]) -> "AccessScopeGuard":
        """Build a guard from a comma-separated TRELLO_ALLOWED_BOARDS value."""

        return cls(parse_board_list(raw))

    @property
    def restricted(self) -> bool:
        return self._allowed is not None

    def is_allowed(self, board_name: str) -> bool:
        if self._allowed is None:
            return True
        return normalize_name(board_name) in self._allowed

    def ensure_allowed(self, board_name: str) -> None:
        if not self.is_allowed(board_name):
            raise AccessDenied(f"Access Denied: The board '{board_name}' is not in the allowed list.")
