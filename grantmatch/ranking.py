"""
Batch Ranker - scores a grant catalog against one profile.

Every grant is scored independently (sequentially or over a thread pool,
with identical results), then stable-sorted by overall score descending so
ties keep catalog order. Filters and re-orderings operate on the
already-scored result and never re-compute scores.

Usage:
    ranker = BatchRanker(max_workers=4)
    result = ranker.rank(profile, grants)
    shortlist = result.filter(level="high", max_amount=500_000)
    for ranked in shortlist:
        print(ranked.grant.id, ranked.score, ranked.match.label)
"""

import logging
from collections import Counter
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Iterable, Iterator, Optional, Union

from grantmatch.constants import FILTER_LEVEL_THRESHOLDS, MATCH_LABEL_THRESHOLDS, POOR_MATCH_LABEL
from grantmatch.normalizer import normalize_grant, normalize_profile
from grantmatch.schemas.inputs import Grant, OrganizationProfile
from grantmatch.schemas.results import MatchScore
from grantmatch.scorers.match_scorer import MatchScorer
from grantmatch.utils.worker_pool import WorkerPool

logger = logging.getLogger(__name__)


class SortMode(str, Enum):
    """Orderings available on a ranking result."""

    SCORE = "score"  # Overall score, highest first
    AMOUNT = "amount"  # Maximum funding amount, largest first
    DEADLINE = "deadline"  # Soonest deadline first


def _as_utc(value: datetime) -> datetime:
    return value.replace(tzinfo=timezone.utc) if value.tzinfo is None else value


@dataclass(frozen=True)
class RankedMatch:
    """A scored grant together with its position in the input catalog."""

    catalog_index: int
    grant: Grant
    match: MatchScore

    @property
    def score(self) -> int:
        return self.match.overall_score


class RankingResult:
    """Immutable, ordered view over scored grants."""

    def __init__(self, matches: Iterable[RankedMatch]):
        self._matches = tuple(matches)

    def __iter__(self) -> Iterator[RankedMatch]:
        return iter(self._matches)

    def __len__(self) -> int:
        return len(self._matches)

    def __getitem__(self, index: int) -> RankedMatch:
        return self._matches[index]

    @property
    def matches(self) -> tuple[RankedMatch, ...]:
        return self._matches

    @property
    def scores(self) -> list[MatchScore]:
        return [ranked.match for ranked in self._matches]

    @property
    def grant_ids(self) -> list[str]:
        return [ranked.grant.id for ranked in self._matches]

    def filter(
        self,
        min_score: Optional[int] = None,
        level: Optional[str] = None,
        min_amount: Optional[float] = None,
        max_amount: Optional[float] = None,
        deadline_from: Optional[datetime] = None,
        deadline_until: Optional[datetime] = None,
    ) -> "RankingResult":
        """Narrow the result, preserving relative order.

        Args:
            min_score: Keep matches scoring at least this much
            level: Named threshold: "all", "high" (>= 60) or "excellent" (>= 80)
            min_amount: Keep grants whose funding range reaches this amount
            max_amount: Keep grants whose funding range starts at or below this amount
            deadline_from: Keep grants with deadlines at or after this time
            deadline_until: Keep grants with deadlines at or before this time
        """
        threshold = min_score if min_score is not None else 0
        if level is not None:
            if level not in FILTER_LEVEL_THRESHOLDS:
                raise ValueError(f"Unknown filter level '{level}', expected one of {list(FILTER_LEVEL_THRESHOLDS)}")
            threshold = max(threshold, FILTER_LEVEL_THRESHOLDS[level])

        lower = _as_utc(deadline_from) if deadline_from is not None else None
        upper = _as_utc(deadline_until) if deadline_until is not None else None

        kept = []
        for ranked in self._matches:
            funding = ranked.grant.funding
            if ranked.score < threshold:
                continue
            if min_amount is not None and funding.amount_max < min_amount:
                continue
            if max_amount is not None and funding.amount_min > max_amount:
                continue
            if lower is not None and ranked.grant.deadline < lower:
                continue
            if upper is not None and ranked.grant.deadline > upper:
                continue
            kept.append(ranked)

        return RankingResult(kept)

    def sort_by(self, mode: Union[SortMode, str] = SortMode.SCORE) -> "RankingResult":
        """Re-order the result (stable; score ties fall back to catalog order)."""
        mode = SortMode(mode)
        if mode == SortMode.SCORE:
            key = lambda ranked: (-ranked.score, ranked.catalog_index)  # noqa: E731
        elif mode == SortMode.AMOUNT:
            key = lambda ranked: -ranked.grant.funding.amount_max  # noqa: E731
        else:
            key = lambda ranked: ranked.grant.deadline  # noqa: E731
        return RankingResult(sorted(self._matches, key=key))

    def top(self, limit: int) -> "RankingResult":
        return RankingResult(self._matches[:limit])

    def summary(self) -> dict:
        """Counts per match label, average score and the best grant."""
        labels = [label for _, label in MATCH_LABEL_THRESHOLDS] + [POOR_MATCH_LABEL]
        counts = Counter(ranked.match.label for ranked in self._matches)
        total = len(self._matches)
        best = max(self._matches, key=lambda ranked: (ranked.score, -ranked.catalog_index), default=None)
        return {
            "total": total,
            "by_label": {label: counts.get(label, 0) for label in labels},
            "average_score": round(sum(r.score for r in self._matches) / total, 1) if total else 0.0,
            "top_grant_id": best.grant.id if best else None,
        }


class BatchRanker:
    """Scores and ranks a grant catalog for one organization profile."""

    def __init__(self, scorer: Optional[MatchScorer] = None, max_workers: int = 1):
        """
        Args:
            scorer: MatchScorer to use (default: one using the process-wide config)
            max_workers: Threads to fan scoring out over; 1 scores sequentially
        """
        self.scorer = scorer or MatchScorer()
        self.max_workers = max_workers

    def rank(
        self,
        profile: OrganizationProfile,
        grants: Iterable[Grant],
        now: Optional[datetime] = None,
    ) -> RankingResult:
        """Score every grant and sort by overall score, highest first."""
        catalog = list(grants)
        now = now or datetime.now(timezone.utc)
        normalized_profile = normalize_profile(profile)

        def _score(grant: Grant) -> MatchScore:
            return self.scorer.evaluate_normalized(normalized_profile, normalize_grant(grant), now)

        if self.max_workers > 1 and len(catalog) > 1:
            pool = WorkerPool(max_workers=self.max_workers, logger=logger)
            outcomes = pool.map(_score, catalog, desc="Scoring grants")
            for success, _, result in outcomes:
                if not success:
                    raise result
            scores = [result for _, _, result in outcomes]
        else:
            scores = [_score(grant) for grant in catalog]

        ranked = [RankedMatch(catalog_index=i, grant=g, match=m) for i, (g, m) in enumerate(zip(catalog, scores))]
        ranked.sort(key=lambda r: -r.score)

        logger.info(
            f"Ranked {len(ranked)} grants"
            + (f" [top={ranked[0].grant.id} score={ranked[0].score}]" if ranked else "")
        )
        return RankingResult(ranked)


def rank_grants(
    profile: OrganizationProfile,
    grants: Iterable[Grant],
    now: Optional[datetime] = None,
    min_score: Optional[int] = None,
    max_workers: int = 1,
) -> RankingResult:
    """Convenience: rank a catalog and optionally apply a score threshold."""
    result = BatchRanker(max_workers=max_workers).rank(profile, grants, now)
    if min_score is not None:
        result = result.filter(min_score=min_score)
    return result
