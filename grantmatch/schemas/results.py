"""
Result models: Finding, FactorResult, ScoreBreakdown and MatchScore.

Explanations are structured rather than free text. Every calculator returns a
FactorResult carrying its sub-score and an ordered list of Findings; each
Finding is tagged as reasoning, recommendation or risk and carries a stable
category code so callers can localize, filter or machine-process it.
"""

from typing import Tuple

from pydantic import BaseModel, ConfigDict, Field, computed_field

from grantmatch.constants import MATCH_LABEL_THRESHOLDS, POOR_MATCH_LABEL
from grantmatch.schemas.enums import Factor, FindingKind


class Finding(BaseModel):
    """A single explanation item produced by a factor calculator."""

    model_config = ConfigDict(frozen=True)

    kind: FindingKind = Field(description="reasoning, recommendation, or risk")
    factor: Factor = Field(description="Calculator that produced the finding")
    code: str = Field(description="Stable category code (e.g. 'ELIGIBILITY_TYPE_MISMATCH')")
    message: str = Field(description="English explanation text")


class FactorResult(BaseModel):
    """Sub-score and findings from one factor calculator."""

    model_config = ConfigDict(frozen=True)

    factor: Factor
    score: int = Field(ge=0, le=100)
    findings: Tuple[Finding, ...] = Field(default_factory=tuple)


class ScoreBreakdown(BaseModel):
    """The seven named sub-scores of a match."""

    model_config = ConfigDict(frozen=True)

    eligibility: int = Field(ge=0, le=100)
    sector: int = Field(ge=0, le=100)
    organizational_fit: int = Field(ge=0, le=100)
    historical: int = Field(ge=0, le=100)
    competition: int = Field(ge=0, le=100)
    deadline: int = Field(ge=0, le=100)
    requirements: int = Field(ge=0, le=100)

    def get(self, factor: Factor) -> int:
        """Return the sub-score for a factor."""
        return getattr(self, factor.value)


def match_label(score: int) -> str:
    """Map an overall score to its display label."""
    for threshold, label in MATCH_LABEL_THRESHOLDS:
        if score >= threshold:
            return label
    return POOR_MATCH_LABEL


class MatchScore(BaseModel):
    """Explainable compatibility score for one (profile, grant) pair.

    Created fresh on every scoring call and never mutated by the engine.
    The string lists are derived from the structured findings, in calculator
    declaration order.
    """

    model_config = ConfigDict(frozen=True)

    grant_id: str
    overall_score: int = Field(ge=0, le=100)
    breakdown: ScoreBreakdown
    confidence: int = Field(ge=0, le=100, description="Profile completeness 0-100 (not blended into score)")
    findings: Tuple[Finding, ...] = Field(default_factory=tuple)

    def _messages(self, kind: FindingKind) -> list[str]:
        return [f.message for f in self.findings if f.kind == kind]

    @computed_field
    @property
    def reasoning(self) -> list[str]:
        return self._messages(FindingKind.REASONING)

    @computed_field
    @property
    def recommendations(self) -> list[str]:
        return self._messages(FindingKind.RECOMMENDATION)

    @computed_field
    @property
    def risk_factors(self) -> list[str]:
        return self._messages(FindingKind.RISK)

    @computed_field
    @property
    def label(self) -> str:
        return match_label(self.overall_score)

    def findings_for(self, factor: Factor) -> list[Finding]:
        """Findings produced by one calculator."""
        return [f for f in self.findings if f.factor == factor]
