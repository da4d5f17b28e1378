"""Confidence estimator - how complete the organization profile was.

Reported alongside the match score so a caller can discount low-confidence
matches. Never blended into the overall score.
"""

from grantmatch.constants import CONFIDENCE_FIELDS
from grantmatch.normalizer import NormalizedProfile
from grantmatch.scorers.factors import clamp_score


def calculate_confidence(profile: NormalizedProfile) -> int:
    """Score 0-100 from how many of the six key profile fields were supplied."""
    present = sum(1 for name in CONFIDENCE_FIELDS if name in profile.provided_fields)
    return clamp_score(100 * present / len(CONFIDENCE_FIELDS))


def missing_fields(profile: NormalizedProfile) -> list[str]:
    """Key profile fields that were absent, in declaration order."""
    return [name for name in CONFIDENCE_FIELDS if name not in profile.provided_fields]
