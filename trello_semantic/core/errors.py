"""Resolution error taxonomy.

Core code raises these; the smart-action layer turns them into the
``{"success": False, "error": ..., "message": ...}`` envelope returned to
the agent. Every error carries the candidate names that would let the
agent correct its request without a human in the loop.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence


class ResolutionError(Exception):
    """Base class for every failure raised while resolving a name."""

    code = "RESOLUTION_ERROR"

    def __init__(self, message: str, candidates: Optional[Sequence[str]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.candidates: List[str] = list(candidates or [])

    def to_result(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"success": False, "error": self.code, "message": self.message}
        if self.candidates:
            result["candidates"] = self.candidates
        return result


class AccessDenied(ResolutionError):
    """The requested board is not in the configured allow-list."""

    code = "ACCESS_DENIED"


class UpstreamError(ResolutionError):
    """Trello answered with a non-success status or could not be reached."""

    code = "UPSTREAM_ERROR"

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        status_text: str = "",
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.status_text = status_text

    def to_result(self) -> Dict[str, Any]:
        result = super().to_result()
        if self.status_code is not None:
            result["status"] = self.status_code
        return result


class NotFoundEmpty(ResolutionError):
    """The listing under the requested scope had no candidates at all."""

    code = "NOT_FOUND"


class AmbiguousName(ResolutionError):
    """The two best fuzzy candidates scored too close to pick one."""

    code = "AMBIGUOUS_NAME"


class NoConfidentMatch(ResolutionError):
    """The best fuzzy candidate scored below the acceptance threshold."""

    code = "NO_CONFIDENT_MATCH"


def format_candidates(names: Sequence[str]) -> str:
    return "\n".join(f"  - {name}" for name in names)
