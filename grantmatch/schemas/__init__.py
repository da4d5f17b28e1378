"""Pydantic data contracts for the matching engine."""

from grantmatch.schemas.enums import Difficulty, Factor, FindingKind, InnovationLevel, OrganizationType
from grantmatch.schemas.inputs import EligibilityRules, FundingRange, Grant, HistoricalStats, OrganizationProfile
from grantmatch.schemas.results import FactorResult, Finding, MatchScore, ScoreBreakdown, match_label

__all__ = [
    # Enums
    "Difficulty",
    "Factor",
    "FindingKind",
    "InnovationLevel",
    "OrganizationType",
    # Inputs
    "EligibilityRules",
    "FundingRange",
    "Grant",
    "HistoricalStats",
    "OrganizationProfile",
    # Results
    "FactorResult",
    "Finding",
    "MatchScore",
    "ScoreBreakdown",
    "match_label",
]
