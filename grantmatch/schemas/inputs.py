"""
Input models for the matching engine: OrganizationProfile and Grant.

These are the data contracts consumed from the profile store and the grant
catalog. Type-contract violations (negative counts, inverted ranges, rates
outside 0-100) fail fast with a pydantic ValidationError at construction,
before any normalization. Absent optional fields are NOT errors; the
normalizer resolves them to neutral defaults.

Both camelCase (as served by the catalog API) and snake_case keys are accepted.
"""

from datetime import datetime, timezone
from typing import Dict, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from grantmatch.schemas.enums import Difficulty, InnovationLevel, OrganizationType


class _InputModel(BaseModel):
    model_config = ConfigDict(
        extra="forbid",
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
    )


class OrganizationProfile(_InputModel):
    """Read-only snapshot of an applying organization.

    Profiles exported by the web dashboard use the short keys ``type``,
    ``employees`` and ``sectors``; those are accepted alongside the camelCase
    and snake_case field names.
    """

    name: Optional[str] = Field(None, description="Display name (not used for scoring)")
    organization_type: Optional[OrganizationType] = Field(
        None,
        validation_alias=AliasChoices("organizationType", "organization_type", "type"),
        description="Legal form of the organization",
    )
    employee_count: Optional[int] = Field(
        None,
        ge=0,
        validation_alias=AliasChoices("employeeCount", "employee_count", "employees"),
        description="Number of employees",
    )
    annual_revenue: Optional[float] = Field(None, ge=0, description="Annual revenue in grant currency")
    sector_tags: Optional[List[str]] = Field(
        None,
        validation_alias=AliasChoices("sectorTags", "sector_tags", "sectors"),
        description="Sectors the organization operates in",
    )
    location: Optional[str] = Field(None, description="Geographic location (country or region)")
    previous_grants: Optional[int] = Field(None, ge=0, description="Count of previously awarded grants")
    innovation_capability: Optional[InnovationLevel] = Field(None, description="Innovation capability level")
    capabilities: Optional[Dict[str, bool]] = Field(
        None, description="Named capability flags (e.g. businessPlan, sustainability)"
    )


class FundingRange(_InputModel):
    """Funding amount bounds offered by a grant."""

    amount_min: float = Field(0.0, ge=0, description="Minimum award amount")
    amount_max: float = Field(0.0, ge=0, description="Maximum award amount")
    currency: str = Field("EUR", description="ISO currency code")

    @model_validator(mode="after")
    def _check_bounds(self) -> "FundingRange":
        if self.amount_min > self.amount_max:
            raise ValueError(f"amount_min ({self.amount_min}) exceeds amount_max ({self.amount_max})")
        return self


class EligibilityRules(_InputModel):
    """Who may apply. Missing restrictions mean unrestricted.

    ``organization_types`` left unset opens the grant to every type; an
    explicit empty list declares that no organization type is eligible.
    """

    organization_types: Optional[List[OrganizationType]] = Field(
        None,
        validation_alias=AliasChoices("organizationTypes", "organization_types", "organizationType"),
        description="Allowed organization types (None = any, empty = none)",
    )
    min_employees: Optional[int] = Field(None, ge=0, description="Minimum employee count")
    max_employees: Optional[int] = Field(None, ge=0, description="Maximum employee count")
    regions: Optional[List[str]] = Field(None, description="Allowed geographic locations (None = any)")

    @model_validator(mode="after")
    def _check_employee_bounds(self) -> "EligibilityRules":
        if (
            self.min_employees is not None
            and self.max_employees is not None
            and self.min_employees > self.max_employees
        ):
            raise ValueError(
                f"min_employees ({self.min_employees}) exceeds max_employees ({self.max_employees})"
            )
        return self


class HistoricalStats(_InputModel):
    """Past award statistics for a grant programme."""

    success_rate: float = Field(0.0, ge=0, le=100, description="Historical success rate percentage")
    typical_applicants: int = Field(0, ge=0, description="Typical number of applicants per round")
    average_award_amount: Optional[float] = Field(None, ge=0, description="Average award amount")


class Grant(_InputModel):
    """One grant opportunity from the catalog."""

    id: str = Field(..., description="Unique grant identifier")
    title: Optional[str] = Field(None, description="Grant title (not used for scoring)")
    funding: FundingRange = Field(default_factory=FundingRange)
    deadline: datetime = Field(..., description="Application deadline; may be in the past")
    eligibility: EligibilityRules = Field(default_factory=EligibilityRules)
    sectors: List[str] = Field(default_factory=list, description="Required sector tags")
    required_capabilities: Dict[str, bool] = Field(
        default_factory=dict, description="Capability name -> required"
    )
    innovation_focus: bool = Field(False, description="Grant explicitly rewards innovation")
    difficulty: Optional[Difficulty] = Field(None, description="Application difficulty tier")
    historical: Optional[HistoricalStats] = Field(None, description="Historical award statistics")

    @field_validator("deadline")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        """Naive deadlines are interpreted as UTC."""
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value
