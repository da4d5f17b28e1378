"""
grantmatch
==========

Explainable grant-to-organization compatibility scoring. Given an
organization profile and a grant catalog, computes one 0-100 match score per
grant from seven weighted factors, with a confidence estimate and structured
reasoning, recommendations and risk factors, then ranks and filters the
catalog.
"""

from grantmatch.ranking import BatchRanker, RankedMatch, RankingResult, SortMode, rank_grants
from grantmatch.schemas import Grant, MatchScore, OrganizationProfile
from grantmatch.scorers import MatchScorer, score_grant

__all__ = [
    "BatchRanker",
    "Grant",
    "MatchScore",
    "MatchScorer",
    "OrganizationProfile",
    "RankedMatch",
    "RankingResult",
    "SortMode",
    "rank_grants",
    "score_grant",
]
