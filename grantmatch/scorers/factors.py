"""
Factor calculators - the seven independent sub-scores of a grant match.

Each calculator is a pure function of the normalized profile and grant
(plus read-only configuration or a reference time where needed) and returns a
FactorResult: a 0-100 sub-score and the ordered findings explaining it.

Calculators are defined over the full input domain, including zero revenue,
zero applicant counts and past deadlines. Degradation is expressed as lower
sub-scores and risk findings, never as raised errors.

Factors (aggregation weight):
1. Eligibility Match (25%)
2. Sector Relevance (20%)
3. Organizational Fit (15%)
4. Historical Success (15%)
5. Competition Level (10%)
6. Deadline Viability (10%)
7. Requirements Fulfillment (5%)
"""

import math
from datetime import datetime, timezone
from typing import Optional

from grantmatch.constants import (
    COMPETITION_HIGH_SCORE,
    COMPETITION_LOW_APPLICANTS,
    COMPETITION_LOW_SCORE,
    COMPETITION_MODERATE_APPLICANTS,
    COMPETITION_MODERATE_SCORE,
    DEADLINE_AMPLE_FACTOR,
    DEADLINE_AMPLE_SCORE,
    DEADLINE_CRITICAL_SCORE,
    DEADLINE_SUFFICIENT_SCORE,
    DEADLINE_TIGHT_FACTOR,
    DEADLINE_TIGHT_SCORE,
    ELIGIBILITY_GEOGRAPHY_POINTS,
    ELIGIBILITY_MAX_EMPLOYEE_POINTS,
    ELIGIBILITY_MIN_EMPLOYEE_POINTS,
    ELIGIBILITY_TYPE_POINTS,
    HISTORICAL_HIGH_RATE,
    HISTORICAL_MODERATE_RATE,
    INNOVATION_HIGH_POINTS,
    INNOVATION_MEDIUM_POINTS,
    MAX_SCORE,
    MIN_SCORE,
    SECTOR_ADJACENT_SCORE,
    SIZE_MANAGEABLE_POINTS,
    SIZE_MANAGEABLE_RATIO,
    SIZE_OVERSIZED_POINTS,
    SIZE_WELL_SUITED_POINTS,
    SIZE_WELL_SUITED_RATIO,
    TRACK_RECORD_NONE_POINTS,
    TRACK_RECORD_SOME_POINTS,
    TRACK_RECORD_STRONG_POINTS,
    TRACK_RECORD_STRONG_THRESHOLD,
)
from grantmatch.normalizer import NormalizedGrant, NormalizedProfile
from grantmatch.schemas.enums import Factor, FindingKind, InnovationLevel
from grantmatch.schemas.results import FactorResult, Finding
from grantmatch.scorers.scoring_registry import ScoringConfig, get_scoring_config

SECONDS_PER_DAY = 86_400


# =============================================================================
# Helpers
# =============================================================================


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for non-negatives."""
    return math.floor(value + 0.5)


def clamp_score(value: float) -> int:
    """Round and clamp a raw score into [0, 100]."""
    return max(MIN_SCORE, min(MAX_SCORE, round_half_up(value)))


class _Findings:
    """Ordered finding collector bound to one factor."""

    def __init__(self, factor: Factor):
        self.factor = factor
        self.items: list[Finding] = []

    def _add(self, kind: FindingKind, code: str, message: str):
        self.items.append(Finding(kind=kind, factor=self.factor, code=code, message=message))

    def reasoning(self, code: str, message: str):
        self._add(FindingKind.REASONING, code, message)

    def recommend(self, code: str, message: str):
        self._add(FindingKind.RECOMMENDATION, code, message)

    def risk(self, code: str, message: str):
        self._add(FindingKind.RISK, code, message)

    def result(self, score: float) -> FactorResult:
        return FactorResult(factor=self.factor, score=clamp_score(score), findings=tuple(self.items))


def _fmt_amount(amount: float, currency: str) -> str:
    return f"{currency} {amount:,.0f}"


def _fmt_rate(rate: float) -> str:
    return f"{rate:g}%"


# =============================================================================
# 1. Eligibility Match
# =============================================================================


def calculate_eligibility(profile: NormalizedProfile, grant: NormalizedGrant) -> FactorResult:
    """Score hard eligibility rules (0-100).

    Rubric:
    - Organization type allowed (or no type restriction declared): 40
    - Employee minimum set and met: 20
    - Employee maximum set and respected: 20
    - Neither employee bound set: 40 instead of the two above
    - Location allowed (or grant unrestricted): 20

    A grant with only one employee bound caps the size checks at 20.
    """
    findings = _Findings(Factor.ELIGIBILITY)
    score = 0

    org_type = profile.organization_type.value
    if grant.allowed_types is None:
        score += ELIGIBILITY_TYPE_POINTS
        findings.reasoning("ELIGIBILITY_TYPE_UNRESTRICTED", "Grant is open to all organization types")
    elif profile.organization_type in grant.allowed_types:
        score += ELIGIBILITY_TYPE_POINTS
        findings.reasoning("ELIGIBILITY_TYPE_MATCH", f"Organization type ({org_type}) matches eligibility criteria")
    else:
        allowed = ", ".join(t.value for t in grant.allowed_types) or "no eligible types"
        findings.risk(
            "ELIGIBILITY_TYPE_MISMATCH",
            f"Organization type mismatch ({org_type}) - grant requires: {allowed}",
        )

    employees = profile.employee_count
    if grant.min_employees is None and grant.max_employees is None:
        score += ELIGIBILITY_MIN_EMPLOYEE_POINTS + ELIGIBILITY_MAX_EMPLOYEE_POINTS

    if grant.min_employees is not None:
        if employees >= grant.min_employees:
            score += ELIGIBILITY_MIN_EMPLOYEE_POINTS
        else:
            findings.risk(
                "ELIGIBILITY_BELOW_MIN_EMPLOYEES",
                f"Minimum employee requirement not met (need {grant.min_employees}, have {employees})",
            )

    if grant.max_employees is not None:
        if employees <= grant.max_employees:
            score += ELIGIBILITY_MAX_EMPLOYEE_POINTS
        else:
            findings.risk(
                "ELIGIBILITY_ABOVE_MAX_EMPLOYEES",
                f"Maximum employee limit exceeded (limit {grant.max_employees}, have {employees})",
            )

    if grant.regions is None:
        score += ELIGIBILITY_GEOGRAPHY_POINTS
    else:
        location = profile.location
        allowed_regions = {region.casefold() for region in grant.regions}
        if location and location.casefold() in allowed_regions:
            score += ELIGIBILITY_GEOGRAPHY_POINTS
            findings.reasoning("ELIGIBILITY_GEOGRAPHY_MATCH", f"Geographic eligibility confirmed for {location}")
        else:
            findings.risk(
                "ELIGIBILITY_GEOGRAPHY_MISMATCH",
                f"Geographic restrictions may apply - check eligibility for {location or 'unknown location'} "
                f"(allowed: {', '.join(grant.regions)})",
            )

    return findings.result(score)


# =============================================================================
# 2. Sector Relevance
# =============================================================================


def calculate_sector_relevance(
    profile: NormalizedProfile,
    grant: NormalizedGrant,
    config: Optional[ScoringConfig] = None,
) -> FactorResult:
    """Score overlap between profile sectors and grant-required sectors.

    Direct overlap scores 100 x matched / grant sectors. Adjacent sectors from
    the similarity table score a flat 60. Direct overlap never scores below
    what adjacency alone would, so adding a matching sector to the profile
    cannot lower the sub-score. Letting any direct overlap replace the
    adjacency score outright would break that: a 1-of-4 direct match (25)
    would then score below the adjacent-only 60 it was added to.
    """
    config = config or get_scoring_config()
    findings = _Findings(Factor.SECTOR)

    profile_sectors = set(profile.sector_tags)
    matched = [sector for sector in grant.sectors if sector in profile_sectors]
    similar = [
        sector
        for sector in grant.sectors
        if any(config.sectors_related(own, sector) for own in profile.sector_tags)
    ]

    direct_score = round_half_up(100 * len(matched) / len(grant.sectors)) if matched else 0
    adjacent_score = SECTOR_ADJACENT_SCORE if similar else 0

    if matched:
        strength = "Strong" if len(matched) == len(grant.sectors) else "Partial"
        findings.reasoning(
            "SECTOR_DIRECT_MATCH",
            f"{strength} sector alignment: {', '.join(matched)} ({len(matched)}/{len(grant.sectors)} grant sectors)",
        )
    if adjacent_score > direct_score:
        findings.reasoning("SECTOR_ADJACENT_MATCH", f"Potential sector relevance: {', '.join(similar)}")
    if not matched and not similar:
        findings.risk("SECTOR_NO_MATCH", "Limited sector alignment - may need to demonstrate relevance")

    return findings.result(max(direct_score, adjacent_score))


# =============================================================================
# 3. Organizational Fit
# =============================================================================


def calculate_organizational_fit(profile: NormalizedProfile, grant: NormalizedGrant) -> FactorResult:
    """Score size appropriateness, track record and innovation alignment.

    Rubric (additive, clamped to 100):
    - Size: amount <= 50% revenue (40), <= 150% (25), larger (10)
    - Track record: > 5 previous grants (30), 1-5 (20), none (10)
    - Innovation (only when the grant requires it): high (30), medium (15), low (0)
    """
    findings = _Findings(Factor.ORGANIZATIONAL_FIT)
    score = 0

    amount = grant.requested_amount
    revenue = profile.annual_revenue
    if amount <= revenue * SIZE_WELL_SUITED_RATIO:
        score += SIZE_WELL_SUITED_POINTS
        findings.reasoning("FIT_SIZE_WELL_SUITED", "Grant amount well-suited to organization size")
    elif amount <= revenue * SIZE_MANAGEABLE_RATIO:
        score += SIZE_MANAGEABLE_POINTS
        findings.recommend(
            "FIT_SIZE_SIGNIFICANT",
            "Consider the significant impact this grant would have on your operations",
        )
    else:
        score += SIZE_OVERSIZED_POINTS
        findings.risk(
            "FIT_SIZE_DISPROPORTIONATE",
            f"Grant amount ({_fmt_amount(amount, grant.currency)}) may be disproportionately large "
            f"for organization size",
        )

    previous = profile.previous_grants
    if previous > TRACK_RECORD_STRONG_THRESHOLD:
        score += TRACK_RECORD_STRONG_POINTS
        findings.reasoning("FIT_TRACK_RECORD_STRONG", "Strong track record with grant applications")
    elif previous > 0:
        score += TRACK_RECORD_SOME_POINTS
        findings.reasoning("FIT_TRACK_RECORD_SOME", "Some experience with grant applications")
    else:
        score += TRACK_RECORD_NONE_POINTS
        findings.recommend(
            "FIT_TRACK_RECORD_NONE",
            "Consider getting support for your first grant application",
        )

    if grant.innovation_required:
        if profile.innovation_capability == InnovationLevel.HIGH:
            score += INNOVATION_HIGH_POINTS
            findings.reasoning(
                "FIT_INNOVATION_STRONG",
                "Strong innovation capability aligns with grant requirements",
            )
        elif profile.innovation_capability == InnovationLevel.MEDIUM:
            score += INNOVATION_MEDIUM_POINTS
            findings.recommend(
                "FIT_INNOVATION_HIGHLIGHT",
                "Highlight your innovation initiatives in the application",
            )

    return findings.result(score)


# =============================================================================
# 4. Historical Success Probability
# =============================================================================


def calculate_historical_success(
    profile: NormalizedProfile,  # noqa: ARG001 - uniform calculator signature
    grant: NormalizedGrant,
    config: Optional[ScoringConfig] = None,
) -> FactorResult:
    """Score the grant's historical success rate.

    score = min(100, rate x multiplier). The default multiplier of 2 spreads
    typical raw rates (5-40%) over the full range; it is a calibration
    policy, not a probability.
    """
    config = config or get_scoring_config()
    findings = _Findings(Factor.HISTORICAL)

    rate = grant.success_rate
    if rate > HISTORICAL_HIGH_RATE:
        findings.reasoning("HISTORICAL_HIGH", f"High historical success rate ({_fmt_rate(rate)})")
    elif rate >= HISTORICAL_MODERATE_RATE:
        findings.reasoning("HISTORICAL_MODERATE", f"Moderate success rate ({_fmt_rate(rate)})")
    else:
        findings.risk("HISTORICAL_LOW", f"Low historical success rate ({_fmt_rate(rate)})")

    return findings.result(min(MAX_SCORE, rate * config.historical_multiplier))


# =============================================================================
# 5. Competition Level
# =============================================================================


def calculate_competition(
    profile: NormalizedProfile,  # noqa: ARG001 - uniform calculator signature
    grant: NormalizedGrant,
) -> FactorResult:
    """Score expected competition from the typical applicant count."""
    findings = _Findings(Factor.COMPETITION)

    applicants = grant.typical_applicants
    if applicants < COMPETITION_LOW_APPLICANTS:
        score = COMPETITION_LOW_SCORE
        findings.reasoning(
            "COMPETITION_LOW",
            f"Lower competition expected (< {COMPETITION_LOW_APPLICANTS} typical applicants)",
        )
    elif applicants < COMPETITION_MODERATE_APPLICANTS:
        score = COMPETITION_MODERATE_SCORE
        findings.reasoning("COMPETITION_MODERATE", f"Moderate competition expected ({applicants} typical applicants)")
    else:
        score = COMPETITION_HIGH_SCORE
        findings.risk("COMPETITION_HIGH", f"High competition expected ({applicants}+ typical applicants)")

    return findings.result(score)


# =============================================================================
# 6. Deadline Viability
# =============================================================================


def days_until(deadline: datetime, now: datetime) -> int:
    """Whole days from now until the deadline, rounded up (negative when past)."""
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return math.ceil((deadline - now).total_seconds() / SECONDS_PER_DAY)


def calculate_deadline_viability(
    profile: NormalizedProfile,  # noqa: ARG001 - uniform calculator signature
    grant: NormalizedGrant,
    now: Optional[datetime] = None,
) -> FactorResult:
    """Score remaining time against the preparation time the difficulty tier needs.

    Rubric (days remaining vs required prep days):
    - >= 1.5x required: 100
    - >= required: 70
    - >= 0.7x required: 40
    - otherwise (including past deadlines): 10
    """
    findings = _Findings(Factor.DEADLINE)

    days = days_until(grant.deadline, now or datetime.now(timezone.utc))
    required = grant.difficulty.prep_days

    if days >= required * DEADLINE_AMPLE_FACTOR:
        score = DEADLINE_AMPLE_SCORE
        findings.reasoning(
            "DEADLINE_AMPLE",
            f"Ample time available for thorough preparation ({days} days, {required} recommended)",
        )
    elif days >= required:
        score = DEADLINE_SUFFICIENT_SCORE
        findings.reasoning(
            "DEADLINE_SUFFICIENT",
            f"Sufficient time for preparation with focused effort ({days} days, {required} recommended)",
        )
    elif days >= required * DEADLINE_TIGHT_FACTOR:
        score = DEADLINE_TIGHT_SCORE
        findings.recommend(
            "DEADLINE_PRIORITIZE",
            f"Tight deadline - prioritize essential requirements ({days} days, {required} recommended)",
        )
    else:
        score = DEADLINE_CRITICAL_SCORE
        findings.risk(
            "DEADLINE_TIGHT",
            f"Very tight deadline - may be challenging to complete quality application "
            f"({days} days, {required} recommended)",
        )

    return findings.result(score)


# =============================================================================
# 7. Requirements Fulfillment
# =============================================================================


def calculate_requirements(profile: NormalizedProfile, grant: NormalizedGrant) -> FactorResult:
    """Score the share of required capabilities the organization already has.

    A grant declaring no required capabilities is vacuously satisfied (100).
    """
    findings = _Findings(Factor.REQUIREMENTS)

    required = grant.required_capabilities
    if not required:
        return findings.result(MAX_SCORE)

    unmet = [name for name in required if not profile.has_capability(name)]
    met = len(required) - len(unmet)

    if unmet:
        findings.recommend("REQUIREMENTS_UNMET", f"Focus on developing: {', '.join(unmet)}")
    else:
        findings.reasoning("REQUIREMENTS_MET", "All grant requirements can be fulfilled")

    return findings.result(100 * met / len(required))
