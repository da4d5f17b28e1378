"""Scoring Registry - aggregation weights and the sector-similarity table.

Loaded once from YAML and cached process-wide as read-only configuration.
Weights are integer percentages that must sum to 100.

Usage:
    from grantmatch.scorers.scoring_registry import get_scoring_config

    config = get_scoring_config()
    config.weights["eligibility"] == 25
    config.sectors_related("technology", "fintech")  # True
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping, Optional

import yaml

from grantmatch.config import get_scoring_config_path
from grantmatch.constants import DEFAULT_HISTORICAL_MULTIPLIER, DEFAULT_WEIGHTS, WEIGHT_TOTAL
from grantmatch.schemas.enums import Factor

logger = logging.getLogger(__name__)

# Expected weight keys (must match Factor values)
WEIGHT_KEYS = [factor.value for factor in Factor]

DEFAULT_SECTOR_SIMILARITY = {
    "technology": ("software", "fintech", "health-tech", "ed-tech"),
    "healthcare": ("biotech", "medtech", "pharmaceuticals"),
    "agriculture": ("agritech", "food-tech", "sustainability"),
    "manufacturing": ("advanced-manufacturing", "automation", "industrial"),
    "services": ("consulting", "professional-services", "business-services"),
}


@dataclass(frozen=True)
class ScoringConfig:
    """Weights, historical multiplier and sector adjacency groups."""

    weights: Mapping[str, int] = field(default_factory=lambda: MappingProxyType(dict(DEFAULT_WEIGHTS)))
    historical_multiplier: float = DEFAULT_HISTORICAL_MULTIPLIER
    sector_similarity: Mapping[str, tuple[str, ...]] = field(
        default_factory=lambda: MappingProxyType(dict(DEFAULT_SECTOR_SIMILARITY))
    )

    def __post_init__(self):
        _validate_weights(dict(self.weights))
        if self.historical_multiplier <= 0:
            raise ValueError(f"historical_multiplier must be positive, got {self.historical_multiplier}")

    def weight(self, factor: Factor) -> float:
        """Fractional weight of a factor (percent / 100)."""
        return self.weights[factor.value] / WEIGHT_TOTAL

    @property
    def fractional_weights(self) -> dict[str, float]:
        return {key: self.weights[key] / WEIGHT_TOTAL for key in WEIGHT_KEYS}

    def sectors_related(self, first: str, second: str) -> bool:
        """True if either sector lists the other as adjacent."""
        return second in self.sector_similarity.get(first, ()) or first in self.sector_similarity.get(second, ())

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "ScoringConfig":
        """Build a config from parsed YAML, filling absent sections with defaults."""
        weights = raw.get("weights") or DEFAULT_WEIGHTS
        similarity = raw.get("sector_similarity") or DEFAULT_SECTOR_SIMILARITY
        multiplier = raw.get("historical_multiplier", DEFAULT_HISTORICAL_MULTIPLIER)
        return cls(
            weights=MappingProxyType({str(k): int(v) for k, v in weights.items()}),
            historical_multiplier=float(multiplier),
            sector_similarity=MappingProxyType(
                {
                    str(group).strip().lower(): tuple(str(s).strip().lower() for s in related or ())
                    for group, related in similarity.items()
                }
            ),
        )


def _validate_weights(weights: dict[str, int]) -> None:
    """Validate that weights contain the right keys and sum to 100."""
    missing = set(WEIGHT_KEYS) - set(weights.keys())
    if missing:
        raise ValueError(f"Scoring weights missing keys: {sorted(missing)}")
    extra = set(weights.keys()) - set(WEIGHT_KEYS)
    if extra:
        raise ValueError(f"Scoring weights have unexpected keys: {sorted(extra)}")
    negative = [key for key, value in weights.items() if value < 0]
    if negative:
        raise ValueError(f"Scoring weights must be non-negative: {sorted(negative)}")
    total = sum(weights.values())
    if total != WEIGHT_TOTAL:
        raise ValueError(f"Scoring weights sum to {total}, expected {WEIGHT_TOTAL}")


# Module-level cache
_config_cache: Optional[ScoringConfig] = None


def load_scoring_config(path: Path) -> ScoringConfig:
    """Load and validate a scoring config from a YAML file (uncached)."""
    with open(path) as f:
        raw = yaml.safe_load(f) or {}
    return ScoringConfig.from_dict(raw)


def get_scoring_config() -> ScoringConfig:
    """Get the process-wide scoring config, loading it on first use."""
    global _config_cache
    if _config_cache is not None:
        return _config_cache

    config_path = get_scoring_config_path()
    if not config_path.exists():
        logger.warning(f"Scoring config not found at {config_path}, using defaults")
        _config_cache = ScoringConfig()
        return _config_cache

    _config_cache = load_scoring_config(config_path)
    logger.info(
        f"Loaded scoring config from {config_path}: "
        f"{len(_config_cache.sector_similarity)} sector groups, "
        f"historical multiplier {_config_cache.historical_multiplier}"
    )
    return _config_cache


def clear_cache():
    """Clear the config cache (useful for testing)."""
    global _config_cache
    _config_cache = None
