"""
Match Scorer - combines the seven factor sub-scores into one MatchScore.

overall = round(0.25 eligibility + 0.20 sector + 0.15 organizational_fit
                + 0.15 historical + 0.10 competition + 0.10 deadline
                + 0.05 requirements)

Weights are integer percentages from the scoring registry, so aggregation
is done in exact integer arithmetic (halves round up). Findings from all
calculators are concatenated in declaration order, without de-duplication
or re-ranking; that ordering is part of the output contract.

Confidence (profile completeness) is reported alongside, outside the score.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from grantmatch.constants import MAX_SCORE, MIN_SCORE, WEIGHT_TOTAL
from grantmatch.normalizer import NormalizedGrant, NormalizedProfile, normalize_grant, normalize_profile
from grantmatch.schemas.enums import Factor
from grantmatch.schemas.inputs import Grant, OrganizationProfile
from grantmatch.schemas.results import FactorResult, MatchScore, ScoreBreakdown
from grantmatch.scorers.confidence import calculate_confidence
from grantmatch.scorers.factors import (
    calculate_competition,
    calculate_deadline_viability,
    calculate_eligibility,
    calculate_historical_success,
    calculate_organizational_fit,
    calculate_requirements,
    calculate_sector_relevance,
)
from grantmatch.scorers.scoring_registry import ScoringConfig, get_scoring_config

logger = logging.getLogger(__name__)


class MatchScorer:
    """Scores one organization profile against one grant.

    Stateless apart from the read-only scoring config, so a single instance
    can be shared across threads.
    """

    def __init__(self, config: Optional[ScoringConfig] = None):
        self._config = config

    @property
    def config(self) -> ScoringConfig:
        if self._config is None:
            self._config = get_scoring_config()
        return self._config

    def evaluate(
        self,
        profile: OrganizationProfile,
        grant: Grant,
        now: Optional[datetime] = None,
    ) -> MatchScore:
        """Normalize inputs and score the pair."""
        return self.evaluate_normalized(normalize_profile(profile), normalize_grant(grant), now)

    def evaluate_normalized(
        self,
        profile: NormalizedProfile,
        grant: NormalizedGrant,
        now: Optional[datetime] = None,
    ) -> MatchScore:
        """Score an already-normalized pair (batch callers normalize the profile once)."""
        now = now or datetime.now(timezone.utc)
        results = self.calculate_factors(profile, grant, now)

        breakdown = ScoreBreakdown(**{result.factor.value: result.score for result in results})
        overall = self.aggregate(breakdown)
        confidence = calculate_confidence(profile)
        findings = tuple(finding for result in results for finding in result.findings)

        logger.debug(
            f"Scored grant {grant.grant_id}: overall={overall} confidence={confidence} "
            f"breakdown={breakdown.model_dump()}"
        )

        return MatchScore(
            grant_id=grant.grant_id,
            overall_score=overall,
            breakdown=breakdown,
            confidence=confidence,
            findings=findings,
        )

    def calculate_factors(
        self,
        profile: NormalizedProfile,
        grant: NormalizedGrant,
        now: datetime,
    ) -> list[FactorResult]:
        """Run the seven calculators in declaration order."""
        config = self.config
        return [
            calculate_eligibility(profile, grant),
            calculate_sector_relevance(profile, grant, config),
            calculate_organizational_fit(profile, grant),
            calculate_historical_success(profile, grant, config),
            calculate_competition(profile, grant),
            calculate_deadline_viability(profile, grant, now),
            calculate_requirements(profile, grant),
        ]

    def aggregate(self, breakdown: ScoreBreakdown) -> int:
        """Weighted sum of the sub-scores, rounded half up and clamped to 0-100."""
        weighted = sum(self.config.weights[factor.value] * breakdown.get(factor) for factor in Factor)
        overall = (weighted + WEIGHT_TOTAL // 2) // WEIGHT_TOTAL
        return max(MIN_SCORE, min(MAX_SCORE, overall))


def score_grant(
    profile: OrganizationProfile,
    grant: Grant,
    now: Optional[datetime] = None,
    config: Optional[ScoringConfig] = None,
) -> MatchScore:
    """Convenience: score one (profile, grant) pair with a fresh scorer."""
    return MatchScorer(config=config).evaluate(profile, grant, now)
