"""Enumerations shared by input, normalized and result models."""

from enum import Enum

from grantmatch.constants import DIFFICULTY_PREP_DAYS


class OrganizationType(str, Enum):
    """Legal form of the applying organization."""

    PRIVATE = "private"
    PUBLIC = "public"
    NONPROFIT = "nonprofit"
    ACADEMIC = "academic"
    GOVERNMENT = "government"


class InnovationLevel(str, Enum):
    """Self-assessed innovation capability of an organization."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Difficulty(str, Enum):
    """Application difficulty tier of a grant.

    Each tier maps to the number of preparation days a quality
    application typically needs.
    """

    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"
    EXPERT = "expert"

    @property
    def prep_days(self) -> int:
        """Return required preparation days for this tier."""
        return DIFFICULTY_PREP_DAYS[self.value]


class Factor(str, Enum):
    """The seven weighted factors, in aggregation (declaration) order."""

    ELIGIBILITY = "eligibility"
    SECTOR = "sector"
    ORGANIZATIONAL_FIT = "organizational_fit"
    HISTORICAL = "historical"
    COMPETITION = "competition"
    DEADLINE = "deadline"
    REQUIREMENTS = "requirements"

    @property
    def label(self) -> str:
        """Human-readable factor name."""
        return {
            "eligibility": "Eligibility Match",
            "sector": "Sector Relevance",
            "organizational_fit": "Organizational Fit",
            "historical": "Historical Success",
            "competition": "Competition Level",
            "deadline": "Deadline Viability",
            "requirements": "Requirements Fulfillment",
        }[self.value]


class FindingKind(str, Enum):
    """Variant tag of a Finding."""

    REASONING = "reasoning"
    RECOMMENDATION = "recommendation"
    RISK = "risk"
