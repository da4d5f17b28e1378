"""Deterministic scoring modules for grant matching."""

from grantmatch.scorers.confidence import calculate_confidence, missing_fields
from grantmatch.scorers.factors import (
    calculate_competition,
    calculate_deadline_viability,
    calculate_eligibility,
    calculate_historical_success,
    calculate_organizational_fit,
    calculate_requirements,
    calculate_sector_relevance,
    clamp_score,
    days_until,
    round_half_up,
)
from grantmatch.scorers.match_scorer import MatchScorer, score_grant
from grantmatch.scorers.scoring_registry import (
    ScoringConfig,
    clear_cache,
    get_scoring_config,
    load_scoring_config,
)

__all__ = [
    # Factor calculators
    "calculate_eligibility",
    "calculate_sector_relevance",
    "calculate_organizational_fit",
    "calculate_historical_success",
    "calculate_competition",
    "calculate_deadline_viability",
    "calculate_requirements",
    "clamp_score",
    "days_until",
    "round_half_up",
    # Confidence
    "calculate_confidence",
    "missing_fields",
    # Aggregation
    "MatchScorer",
    "score_grant",
    # Configuration
    "ScoringConfig",
    "clear_cache",
    "get_scoring_config",
    "load_scoring_config",
]
