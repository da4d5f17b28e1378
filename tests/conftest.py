"""Shared fixtures for grantmatch tests.

Scoring is time-dependent (deadline viability), so every test scores against
the fixed NOW below instead of the wall clock.
"""

import logging
from datetime import datetime, timedelta, timezone

import pytest

from grantmatch.schemas.inputs import Grant, OrganizationProfile
from grantmatch.scorers.scoring_registry import clear_cache
from grantmatch.utils.logger import MillisecondsFormatter

NOW = datetime(2026, 3, 2, 9, 0, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def _isolated_scoring_config(monkeypatch):
    """Every test starts from the bundled scoring config."""
    monkeypatch.delenv("GRANTMATCH_SCORING_CONFIG", raising=False)
    monkeypatch.delenv("GRANTMATCH_LOG_LEVEL", raising=False)
    clear_cache()
    yield
    clear_cache()


@pytest.fixture
def reset_logging():
    """Drop handlers installed by configure_global_logging after the test."""
    root = logging.getLogger()
    level = root.level
    yield
    for handler in list(root.handlers):
        if isinstance(handler.formatter, MillisecondsFormatter):
            root.removeHandler(handler)
    root.setLevel(level)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def make_profile():
    """Build an OrganizationProfile with a complete, strong default; override any field."""

    def _make(**overrides) -> OrganizationProfile:
        defaults = dict(
            name="Acme Robotics GmbH",
            organization_type="private",
            employee_count=12,
            annual_revenue=1_000_000,
            sector_tags=["technology"],
            location="Germany",
            previous_grants=8,
            innovation_capability="high",
        )
        defaults.update(overrides)
        return OrganizationProfile(**defaults)

    return _make


@pytest.fixture
def make_grant():
    """Build a Grant matching the default profile well; override any field."""

    def _make(**overrides) -> Grant:
        defaults = dict(
            id="EI-2026-01",
            title="Innovation Voucher",
            funding={"amount_min": 50_000, "amount_max": 250_000},
            deadline=NOW + timedelta(days=60),
            eligibility={"organization_types": ["private"]},
            sectors=["technology"],
            innovation_focus=True,
            difficulty="medium",
            historical={"success_rate": 30, "typical_applicants": 40},
        )
        defaults.update(overrides)
        return Grant(**defaults)

    return _make
