from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence

from trello_semantic.config.resolution_limits import AMBIGUITY_GAP


@dataclass(frozen=True)
class FuzzyMatch:
    candidate: str
    score: float


def normalize_name(value: Optional[str]) -> str:
    return (value or "").strip().lower()


def levenshtein_distance(a: str, b: str) -> int:
    """Edit distance between two strings, one row at a time."""

    if a == b:
        return 0
    if not a:
        return len(b)
    if not b:
        return len(a)

    previous = list(range(len(b) + 1))
    for i, char_a in enumerate(a, start=1):
        current = [i]
        for j, char_b in enumerate(b, start=1):
            if char_a == char_b:
                current.append(previous[j - 1])
            else:
                current.append(
                    min(
                        previous[j - 1] + 1,  # substitution
                        current[j - 1] + 1,  # insertion
                        previous[j] + 1,  # deletion
                    )
                )
        previous = current
    return previous[-1]


def similarity_score(a: str, b: str) -> float:
    """Return a 0..1 similarity, 1.0 meaning identical after normalization."""

    left = normalize_name(a)
    right = normalize_name(b)
    longest = max(len(left), len(right))
    if longest == 0:
        return 1.0
    return 1.0 - (levenshtein_distance(left, right) / longest)


def rank_candidates(name: str, candidates: Sequence[str]) -> List[FuzzyMatch]:
    """Score every candidate against ``name``, best first.

    The sort is stable, so equal scores keep the upstream order.
    """

    scored = [FuzzyMatch(candidate=c, score=similarity_score(name, c)) for c in candidates]
    scored.sort(key=lambda m: m.score, reverse=True)
    return scored


def fuzzy_match(
    name: str,
    candidates: Sequence[str],
    ambiguity_gap: float = AMBIGUITY_GAP,
) -> Optional[FuzzyMatch]:
    """Pick the closest candidate, or None if there is no clear winner.

    A near-tie between the two best scores returns None rather than a guess:
    the caller should ask for a more specific name instead of acting on the
    wrong resource.
    """

    ranked = rank_candidates(name, candidates)
    if not ranked:
        return None

    best = ranked[0]
    if len(ranked) > 1 and abs(best.score - ranked[1].score) < ambiguity_gap:
        return None
    return best
