"""Tests for the seven factor calculators and the confidence estimator."""

from datetime import datetime, timedelta

import pytest

from grantmatch.normalizer import normalize_grant, normalize_profile
from grantmatch.schemas.enums import Factor, FindingKind
from grantmatch.schemas.inputs import OrganizationProfile
from grantmatch.scorers.confidence import calculate_confidence, missing_fields
from grantmatch.scorers.factors import (
    calculate_competition,
    calculate_deadline_viability,
    calculate_eligibility,
    calculate_historical_success,
    calculate_organizational_fit,
    calculate_requirements,
    calculate_sector_relevance,
    clamp_score,
    days_until,
    round_half_up,
)
from grantmatch.scorers.scoring_registry import ScoringConfig

# ─── Helpers ──────────────────────────────────────────────────────────────────


def _codes(result, kind=None) -> list[str]:
    return [f.code for f in result.findings if kind is None or f.kind == kind]


def _run(calculator, profile, grant, *args):
    return calculator(normalize_profile(profile), normalize_grant(grant), *args)


# ─── Rounding helpers ───────────────────────────────────────────────────────


class TestRounding:
    def test_half_rounds_up(self):
        assert round_half_up(32.5) == 33
        assert round_half_up(0.5) == 1

    def test_below_half_rounds_down(self):
        assert round_half_up(33.33) == 33

    def test_clamp_bounds(self):
        assert clamp_score(120) == 100
        assert clamp_score(-5) == 0
        assert clamp_score(59.6) == 60


# ─── Eligibility Match ──────────────────────────────────────────────────────


class TestEligibility:
    """Type (40) + each set employee bound (20), or 40 with no bounds + geography (20)."""

    def test_all_checks_pass(self, make_profile, make_grant):
        result = _run(calculate_eligibility, make_profile(), make_grant())
        assert result.factor == Factor.ELIGIBILITY
        assert result.score == 100
        assert "ELIGIBILITY_TYPE_MATCH" in _codes(result, FindingKind.REASONING)

    def test_type_mismatch(self, make_profile, make_grant):
        """Private org vs nonprofit-only grant → loses 40 and records a risk."""
        result = _run(
            calculate_eligibility,
            make_profile(),
            make_grant(eligibility={"organization_types": ["nonprofit", "academic"]}),
        )
        assert result.score == 60
        mismatch = [f for f in result.findings if f.code == "ELIGIBILITY_TYPE_MISMATCH"]
        assert len(mismatch) == 1
        assert mismatch[0].kind == FindingKind.RISK
        assert "nonprofit, academic" in mismatch[0].message

    def test_no_type_restriction(self, make_profile, make_grant):
        result = _run(calculate_eligibility, make_profile(), make_grant(eligibility={}))
        assert result.score == 100
        assert "ELIGIBILITY_TYPE_UNRESTRICTED" in _codes(result)

    def test_below_minimum_employees(self, make_profile, make_grant):
        """Only a minimum set and missed → no size points at all."""
        result = _run(
            calculate_eligibility,
            make_profile(employee_count=12),
            make_grant(eligibility={"organization_types": ["private"], "min_employees": 20}),
        )
        assert result.score == 60
        assert "ELIGIBILITY_BELOW_MIN_EMPLOYEES" in _codes(result, FindingKind.RISK)

    def test_above_maximum_employees(self, make_profile, make_grant):
        result = _run(
            calculate_eligibility,
            make_profile(employee_count=300),
            make_grant(eligibility={"organization_types": ["private"], "max_employees": 250}),
        )
        assert result.score == 60
        assert "ELIGIBILITY_ABOVE_MAX_EMPLOYEES" in _codes(result, FindingKind.RISK)

    def test_only_minimum_set_and_met(self, make_profile, make_grant):
        """A single bound pays its own 20; the unset side earns nothing."""
        result = _run(
            calculate_eligibility,
            make_profile(employee_count=12),
            make_grant(eligibility={"organization_types": ["private"], "min_employees": 5}),
        )
        assert result.score == 80
        assert "ELIGIBILITY_BELOW_MIN_EMPLOYEES" not in _codes(result)

    def test_only_maximum_set_and_met(self, make_profile, make_grant):
        result = _run(
            calculate_eligibility,
            make_profile(employee_count=12),
            make_grant(eligibility={"organization_types": ["private"], "max_employees": 50}),
        )
        assert result.score == 80

    def test_both_bounds_met(self, make_profile, make_grant):
        result = _run(
            calculate_eligibility,
            make_profile(employee_count=12),
            make_grant(eligibility={"organization_types": ["private"], "min_employees": 5, "max_employees": 50}),
        )
        assert result.score == 100

    def test_empty_type_list_admits_nobody(self, make_profile, make_grant):
        """An explicit empty allowed-types list is a mismatch, not an open grant."""
        result = _run(calculate_eligibility, make_profile(), make_grant(eligibility={"organization_types": []}))
        assert result.score == 60
        assert _codes(result) == ["ELIGIBILITY_TYPE_MISMATCH"]
        assert "no eligible types" in result.findings[0].message

    @pytest.mark.parametrize("employees", [0, 1, 12, 10_000])
    @pytest.mark.parametrize("location", [None, "Germany", "Atlantis"])
    def test_unrestricted_bounds_and_geography(self, make_profile, make_grant, employees, location):
        """No bounds, no regions → full 80 for size and geography whatever the profile says."""
        result = _run(
            calculate_eligibility,
            make_profile(employee_count=employees, location=location),
            make_grant(eligibility={"organization_types": ["nonprofit"]}),
        )
        assert result.score == 60
        assert _codes(result) == ["ELIGIBILITY_TYPE_MISMATCH"]

    def test_geography_match_is_case_insensitive(self, make_profile, make_grant):
        result = _run(
            calculate_eligibility,
            make_profile(location="germany"),
            make_grant(eligibility={"organization_types": ["private"], "regions": ["Germany", "Austria"]}),
        )
        assert result.score == 100
        assert "ELIGIBILITY_GEOGRAPHY_MATCH" in _codes(result)

    def test_geography_mismatch(self, make_profile, make_grant):
        result = _run(
            calculate_eligibility,
            make_profile(location="France"),
            make_grant(eligibility={"organization_types": ["private"], "regions": ["Germany"]}),
        )
        assert result.score == 80
        assert "ELIGIBILITY_GEOGRAPHY_MISMATCH" in _codes(result, FindingKind.RISK)

    def test_missing_location_fails_restricted_geography(self, make_profile, make_grant):
        result = _run(
            calculate_eligibility,
            make_profile(location=None),
            make_grant(eligibility={"organization_types": ["private"], "regions": ["Germany"]}),
        )
        assert result.score == 80
        assert "unknown location" in result.findings[-1].message


# ─── Sector Relevance ───────────────────────────────────────────────────────


class TestSectorRelevance:
    """Direct overlap ratio, with a flat 60 for adjacent sectors."""

    def test_full_overlap(self, make_profile, make_grant):
        result = _run(calculate_sector_relevance, make_profile(), make_grant())
        assert result.score == 100
        assert result.findings[0].message.startswith("Strong sector alignment")

    def test_partial_overlap(self, make_profile, make_grant):
        result = _run(
            calculate_sector_relevance,
            make_profile(sector_tags=["technology"]),
            make_grant(sectors=["technology", "healthcare"]),
        )
        assert result.score == 50
        assert result.findings[0].message.startswith("Partial sector alignment")

    def test_adjacent_sector(self, make_profile, make_grant):
        """technology lists fintech as adjacent → 60."""
        result = _run(
            calculate_sector_relevance,
            make_profile(sector_tags=["technology"]),
            make_grant(sectors=["fintech"]),
        )
        assert result.score == 60
        assert _codes(result) == ["SECTOR_ADJACENT_MATCH"]

    def test_adjacency_checked_both_ways(self, make_profile, make_grant):
        result = _run(
            calculate_sector_relevance,
            make_profile(sector_tags=["fintech"]),
            make_grant(sectors=["technology"]),
        )
        assert result.score == 60

    def test_adjacency_lifts_weak_direct_overlap(self, make_profile, make_grant):
        """1/2 direct (50) but the other sector is adjacent → 60."""
        result = _run(
            calculate_sector_relevance,
            make_profile(sector_tags=["technology"]),
            make_grant(sectors=["technology", "fintech"]),
        )
        assert result.score == 60
        assert _codes(result) == ["SECTOR_DIRECT_MATCH", "SECTOR_ADJACENT_MATCH"]

    def test_no_overlap(self, make_profile, make_grant):
        result = _run(
            calculate_sector_relevance,
            make_profile(sector_tags=["agritech"]),
            make_grant(sectors=["pharmaceuticals"]),
        )
        assert result.score == 0
        assert _codes(result, FindingKind.RISK) == ["SECTOR_NO_MATCH"]

    def test_grant_without_sectors(self, make_profile, make_grant):
        result = _run(calculate_sector_relevance, make_profile(), make_grant(sectors=[]))
        assert result.score == 0
        assert _codes(result) == ["SECTOR_NO_MATCH"]

    def test_tags_compared_case_insensitively(self, make_profile, make_grant):
        result = _run(
            calculate_sector_relevance,
            make_profile(sector_tags=[" Technology "]),
            make_grant(sectors=["TECHNOLOGY"]),
        )
        assert result.score == 100

    def test_injected_similarity_table(self, make_profile, make_grant):
        config = ScoringConfig.from_dict({"sector_similarity": {"Energy": ["Solar"]}})
        result = _run(
            calculate_sector_relevance,
            make_profile(sector_tags=["energy"]),
            make_grant(sectors=["solar"]),
            config,
        )
        assert result.score == 60

    def test_monotonic_in_overlap(self, make_profile, make_grant):
        """Adding grant sectors to the profile one by one never lowers the sub-score."""
        grant = make_grant(sectors=["technology", "fintech", "biotech", "consulting"])
        previous = -1
        tags: list[str] = []
        for tag in ["agritech", "technology", "fintech", "biotech", "consulting"]:
            tags.append(tag)
            score = _run(calculate_sector_relevance, make_profile(sector_tags=list(tags)), grant).score
            assert score >= previous
            previous = score
        assert previous == 100


# ─── Organizational Fit ─────────────────────────────────────────────────────


class TestOrganizationalFit:
    """Size (40/25/10) + track record (30/20/10) + innovation (30/15/0)."""

    def test_strong_organization(self, make_profile, make_grant):
        result = _run(calculate_organizational_fit, make_profile(), make_grant())
        assert result.score == 100
        assert _codes(result) == ["FIT_SIZE_WELL_SUITED", "FIT_TRACK_RECORD_STRONG", "FIT_INNOVATION_STRONG"]

    def test_significant_grant_size(self, make_profile, make_grant):
        """250k against 200k revenue is within 150% → 25."""
        result = _run(
            calculate_organizational_fit,
            make_profile(annual_revenue=200_000),
            make_grant(innovation_focus=False),
        )
        assert result.score == 25 + 30
        assert "FIT_SIZE_SIGNIFICANT" in _codes(result, FindingKind.RECOMMENDATION)

    def test_disproportionate_grant_size(self, make_profile, make_grant):
        result = _run(
            calculate_organizational_fit,
            make_profile(annual_revenue=100_000),
            make_grant(innovation_focus=False),
        )
        assert result.score == 10 + 30
        risk = [f for f in result.findings if f.code == "FIT_SIZE_DISPROPORTIONATE"][0]
        assert "EUR 250,000" in risk.message

    @pytest.mark.parametrize(
        "previous,points,code",
        [
            (6, 30, "FIT_TRACK_RECORD_STRONG"),
            (5, 20, "FIT_TRACK_RECORD_SOME"),
            (1, 20, "FIT_TRACK_RECORD_SOME"),
            (0, 10, "FIT_TRACK_RECORD_NONE"),
        ],
    )
    def test_track_record_tiers(self, make_profile, make_grant, previous, points, code):
        result = _run(
            calculate_organizational_fit,
            make_profile(previous_grants=previous),
            make_grant(innovation_focus=False),
        )
        assert result.score == 40 + points
        assert code in _codes(result)

    @pytest.mark.parametrize("level,points", [("high", 30), ("medium", 15), ("low", 0)])
    def test_innovation_only_counts_when_required(self, make_profile, make_grant, level, points):
        profile = make_profile(innovation_capability=level)
        with_focus = _run(calculate_organizational_fit, profile, make_grant(innovation_focus=True))
        without_focus = _run(calculate_organizational_fit, profile, make_grant(innovation_focus=False))
        assert with_focus.score == 70 + points
        assert without_focus.score == 70

    def test_missing_revenue_and_track_record(self, make_grant):
        """Zero revenue and zero previous grants are lowest tiers, not errors."""
        profile = OrganizationProfile(organization_type="private", employee_count=12)
        result = _run(calculate_organizational_fit, profile, make_grant(innovation_focus=False))
        assert result.score == 10 + 10
        assert "FIT_SIZE_DISPROPORTIONATE" in _codes(result, FindingKind.RISK)
        assert "FIT_TRACK_RECORD_NONE" in _codes(result, FindingKind.RECOMMENDATION)


# ─── Historical Success ─────────────────────────────────────────────────────


class TestHistoricalSuccess:
    """score = min(100, rate x 2)."""

    @pytest.mark.parametrize(
        "rate,expected,code",
        [
            (30, 60, "HISTORICAL_MODERATE"),
            (31, 62, "HISTORICAL_HIGH"),
            (15, 30, "HISTORICAL_MODERATE"),
            (10, 20, "HISTORICAL_LOW"),
            (12.5, 25, "HISTORICAL_LOW"),
            (75, 100, "HISTORICAL_HIGH"),
            (0, 0, "HISTORICAL_LOW"),
        ],
    )
    def test_rate_tiers(self, make_profile, make_grant, rate, expected, code):
        result = _run(
            calculate_historical_success,
            make_profile(),
            make_grant(historical={"success_rate": rate, "typical_applicants": 40}),
        )
        assert result.score == expected
        assert _codes(result) == [code]

    def test_low_rate_is_risk(self, make_profile, make_grant):
        result = _run(
            calculate_historical_success,
            make_profile(),
            make_grant(historical={"success_rate": 5, "typical_applicants": 40}),
        )
        assert result.findings[0].kind == FindingKind.RISK

    def test_missing_history_scores_zero(self, make_profile, make_grant):
        result = _run(calculate_historical_success, make_profile(), make_grant(historical=None))
        assert result.score == 0

    def test_configurable_multiplier(self, make_profile, make_grant):
        config = ScoringConfig(historical_multiplier=1.0)
        result = _run(calculate_historical_success, make_profile(), make_grant(), config)
        assert result.score == 30


# ─── Competition Level ──────────────────────────────────────────────────────


class TestCompetition:
    @pytest.mark.parametrize(
        "applicants,expected,code",
        [
            (0, 80, "COMPETITION_LOW"),
            (49, 80, "COMPETITION_LOW"),
            (50, 60, "COMPETITION_MODERATE"),
            (199, 60, "COMPETITION_MODERATE"),
            (200, 30, "COMPETITION_HIGH"),
            (5_000, 30, "COMPETITION_HIGH"),
        ],
    )
    def test_applicant_tiers(self, make_profile, make_grant, applicants, expected, code):
        result = _run(
            calculate_competition,
            make_profile(),
            make_grant(historical={"success_rate": 30, "typical_applicants": applicants}),
        )
        assert result.score == expected
        assert _codes(result) == [code]

    def test_high_competition_is_risk(self, make_profile, make_grant):
        result = _run(
            calculate_competition,
            make_profile(),
            make_grant(historical={"success_rate": 30, "typical_applicants": 400}),
        )
        assert result.findings[0].kind == FindingKind.RISK


# ─── Deadline Viability ─────────────────────────────────────────────────────


class TestDeadlineViability:
    """Days remaining vs prep days: >= 1.5x → 100, >= 1x → 70, >= 0.7x → 40, else 10."""

    @pytest.mark.parametrize(
        "days,expected,code",
        [
            (60, 100, "DEADLINE_AMPLE"),
            (45, 100, "DEADLINE_AMPLE"),
            (44, 70, "DEADLINE_SUFFICIENT"),
            (30, 70, "DEADLINE_SUFFICIENT"),
            (21, 40, "DEADLINE_PRIORITIZE"),
            (20, 10, "DEADLINE_TIGHT"),
            (-3, 10, "DEADLINE_TIGHT"),
        ],
    )
    def test_medium_difficulty_tiers(self, make_profile, make_grant, now, days, expected, code):
        grant = make_grant(deadline=now + timedelta(days=days), difficulty="medium")
        result = _run(calculate_deadline_viability, make_profile(), grant, now)
        assert result.score == expected
        assert _codes(result) == [code]

    def test_expert_grant_five_days_out(self, make_profile, make_grant, now):
        grant = make_grant(deadline=now + timedelta(days=5), difficulty="expert")
        result = _run(calculate_deadline_viability, make_profile(), grant, now)
        assert result.score == 10
        risk = result.findings[0]
        assert risk.kind == FindingKind.RISK
        assert risk.message.startswith("Very tight deadline")
        assert "(5 days, 90 recommended)" in risk.message

    def test_missing_difficulty_defaults_to_medium(self, make_profile, make_grant, now):
        grant = make_grant(deadline=now + timedelta(days=30), difficulty=None)
        result = _run(calculate_deadline_viability, make_profile(), grant, now)
        assert result.score == 70

    def test_partial_day_rounds_up(self, now):
        assert days_until(now + timedelta(days=2, hours=1), now) == 3
        assert days_until(now - timedelta(hours=12), now) == 0

    def test_naive_now_treated_as_utc(self, now):
        naive = datetime(2026, 3, 2, 9, 0)
        assert days_until(now + timedelta(days=10), naive) == 10


# ─── Requirements Fulfillment ───────────────────────────────────────────────


class TestRequirements:
    def test_no_requirements_is_vacuously_met(self, make_profile, make_grant):
        result = _run(calculate_requirements, make_profile(), make_grant(required_capabilities={}))
        assert result.score == 100
        assert result.findings == ()

    def test_only_false_flags_is_vacuously_met(self, make_profile, make_grant):
        result = _run(
            calculate_requirements,
            OrganizationProfile(),
            make_grant(required_capabilities={"businessPlan": False}),
        )
        assert result.score == 100

    def test_partially_met(self, make_profile, make_grant):
        result = _run(
            calculate_requirements,
            make_profile(capabilities={"businessPlan": True}),
            make_grant(required_capabilities={"businessPlan": True, "sustainability": True, "export": True}),
        )
        assert result.score == 33
        assert result.findings[0].kind == FindingKind.RECOMMENDATION
        assert result.findings[0].message == "Focus on developing: sustainability, export"

    def test_all_met(self, make_profile, make_grant):
        result = _run(
            calculate_requirements,
            make_profile(capabilities={"businessPlan": True, "sustainability": True}),
            make_grant(required_capabilities={"businessPlan": True, "sustainability": True}),
        )
        assert result.score == 100
        assert _codes(result) == ["REQUIREMENTS_MET"]


# ─── Confidence ─────────────────────────────────────────────────────────────


class TestConfidence:
    """Share of the six key profile fields supplied."""

    def test_complete_profile(self, make_profile):
        assert calculate_confidence(normalize_profile(make_profile())) == 100

    def test_two_of_six_fields(self):
        profile = normalize_profile(OrganizationProfile(organization_type="private", employee_count=12))
        assert calculate_confidence(profile) == 33
        assert missing_fields(profile) == ["sector_tags", "annual_revenue", "location", "previous_grants"]

    def test_empty_profile(self):
        assert calculate_confidence(normalize_profile(OrganizationProfile())) == 0

    def test_three_of_six_rounds_to_50(self):
        profile = normalize_profile(
            OrganizationProfile(organization_type="public", location="Austria", previous_grants=2)
        )
        assert calculate_confidence(profile) == 50
