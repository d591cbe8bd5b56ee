"""
Name matching between catalog entries and IGDB search candidates.

Scoring is deliberately simple: exact match, substring containment,
then word-set overlap. When nothing clears the threshold the first
IGDB-ranked candidate is still returned, which favours recall over
precision and can produce false positives for obscure titles.
"""

from collections.abc import Sequence
from dataclasses import dataclass

from game_catalog.igdb.contracts import IGDBGame

EXACT_SCORE = 1.0
CONTAINMENT_SCORE = 0.8
DEFAULT_THRESHOLD = 0.6


@dataclass(frozen=True)
class MatchResult:
    """Selected candidate with its similarity score in [0, 1]."""

    candidate: IGDBGame
    score: float


def similarity(first: str, second: str) -> float:
    """
    Score how similar two game names are.

    Returns 1.0 for equal names, 0.8 when one contains the other, and
    otherwise the Jaccard overlap of their lowercase word sets.
    """
    a = first.lower().strip()
    b = second.lower().strip()

    if a == b:
        return EXACT_SCORE
    if a in b or b in a:
        return CONTAINMENT_SCORE

    words_a = set(a.split())
    words_b = set(b.split())
    union = words_a | words_b
    if not union:
        return 0.0
    return len(words_a & words_b) / len(union)


class MatchEngine:
    """Picks the best IGDB candidate for a catalog entry name."""

    def __init__(self, threshold: float = DEFAULT_THRESHOLD) -> None:
        self.threshold = threshold

    def best_match(self, search_name: str, candidates: Sequence[IGDBGame]) -> MatchResult | None:
        """
        Select the best candidate for ``search_name``.

        Args:
            search_name: Name from the catalog
            candidates: Search results in IGDB's ranking order

        Returns:
            MatchResult | None: None only when there are no candidates
        """
        if not candidates:
            return None

        target = search_name.lower().strip()
        for candidate in candidates:
            if candidate.name.lower().strip() == target:
                return MatchResult(candidate=candidate, score=EXACT_SCORE)

        scored = [
            MatchResult(candidate=candidate, score=similarity(search_name, candidate.name))
            for candidate in candidates
        ]
        # sorted() is stable, so ties keep IGDB's order
        ranked = sorted(scored, key=lambda result: result.score, reverse=True)

        if ranked[0].score > self.threshold:
            return ranked[0]

        return scored[0]
