"""
Profile/Grant normalizer.

Fills absent optional fields with neutral defaults so every downstream
calculator can assume a complete, typed record. Absence is always a valid,
lower-information input: nothing here raises. Validation of malformed input
already happened when the pydantic input models were constructed.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Optional

from grantmatch.constants import CONFIDENCE_FIELDS
from grantmatch.schemas.enums import Difficulty, InnovationLevel, OrganizationType
from grantmatch.schemas.inputs import Grant, OrganizationProfile

INNOVATION_CAPABILITY = "innovation"


@dataclass(frozen=True)
class NormalizedProfile:
    """Fully-populated organization profile."""

    organization_type: OrganizationType
    employee_count: int
    annual_revenue: float
    sector_tags: tuple[str, ...]
    location: str
    previous_grants: int
    innovation_capability: InnovationLevel
    capabilities: frozenset[str]
    provided_fields: frozenset[str]  # Confidence fields actually supplied by the caller

    def has_capability(self, name: str) -> bool:
        return name in self.capabilities


@dataclass(frozen=True)
class NormalizedGrant:
    """Fully-populated grant record."""

    grant_id: str
    amount_min: float
    amount_max: float
    currency: str
    deadline: datetime
    allowed_types: Optional[tuple[OrganizationType, ...]]  # None = unrestricted, empty = nobody
    min_employees: Optional[int]
    max_employees: Optional[int]
    regions: Optional[tuple[str, ...]]  # None = unrestricted
    sectors: tuple[str, ...]
    required_capabilities: tuple[str, ...]  # Names flagged as required, in declaration order
    innovation_required: bool
    difficulty: Difficulty
    success_rate: float
    typical_applicants: int

    @property
    def requested_amount(self) -> float:
        """Amount used for organization-size comparisons (upper bound of the range)."""
        return self.amount_max


def clean_tags(values: Optional[Iterable[str]]) -> tuple[str, ...]:
    """Lower-case, strip and de-duplicate tags, preserving first-seen order."""
    seen: dict[str, None] = {}
    for raw in values or ():
        tag = raw.strip().lower()
        if tag:
            seen.setdefault(tag, None)
    return tuple(seen)


def _provided_fields(profile: OrganizationProfile) -> frozenset[str]:
    # Zero and empty values carry no information, same as a missing field
    return frozenset(name for name in CONFIDENCE_FIELDS if getattr(profile, name))


def normalize_profile(profile: OrganizationProfile) -> NormalizedProfile:
    """Resolve a possibly-partial profile to a complete record."""
    capabilities = profile.capabilities or {}
    return NormalizedProfile(
        organization_type=profile.organization_type or OrganizationType.PRIVATE,
        employee_count=profile.employee_count or 0,
        annual_revenue=float(profile.annual_revenue or 0),
        sector_tags=clean_tags(profile.sector_tags),
        location=(profile.location or "").strip(),
        previous_grants=profile.previous_grants or 0,
        innovation_capability=profile.innovation_capability or InnovationLevel.MEDIUM,
        capabilities=frozenset(name for name, enabled in capabilities.items() if enabled),
        provided_fields=_provided_fields(profile),
    )


def normalize_grant(grant: Grant) -> NormalizedGrant:
    """Resolve a possibly-partial grant to a complete record."""
    rules = grant.eligibility
    regions = None
    if rules.regions:
        regions = tuple(region.strip() for region in rules.regions if region.strip()) or None

    allowed_types = None
    if rules.organization_types is not None:
        allowed_types = tuple(dict.fromkeys(rules.organization_types))

    required = tuple(name for name, flag in grant.required_capabilities.items() if flag)
    historical = grant.historical

    return NormalizedGrant(
        grant_id=grant.id,
        amount_min=grant.funding.amount_min,
        amount_max=grant.funding.amount_max,
        currency=grant.funding.currency,
        deadline=grant.deadline,
        allowed_types=allowed_types,
        min_employees=rules.min_employees,
        max_employees=rules.max_employees,
        regions=regions,
        sectors=clean_tags(grant.sectors),
        required_capabilities=required,
        innovation_required=grant.innovation_focus or INNOVATION_CAPABILITY in required,
        difficulty=grant.difficulty or Difficulty.MEDIUM,
        success_rate=historical.success_rate if historical else 0.0,
        typical_applicants=historical.typical_applicants if historical else 0,
    )
