"""
Global constants for the grant matching engine.

Centralizes point allocations, tier thresholds and default weights used
throughout the scorers for easier maintenance and tuning. Weights and the
historical multiplier can also be overridden from scoring_config.yaml.
"""

# Sub-score bounds
MIN_SCORE = 0
MAX_SCORE = 100

# Aggregation weights, in integer percent (must sum to WEIGHT_TOTAL)
WEIGHT_TOTAL = 100
DEFAULT_WEIGHTS = {
    "eligibility": 25,
    "sector": 20,
    "organizational_fit": 15,
    "historical": 15,
    "competition": 10,
    "deadline": 10,
    "requirements": 5,
}

# Eligibility point allocations (sum to 100 when every check passes)
ELIGIBILITY_TYPE_POINTS = 40
ELIGIBILITY_MIN_EMPLOYEE_POINTS = 20
ELIGIBILITY_MAX_EMPLOYEE_POINTS = 20
ELIGIBILITY_GEOGRAPHY_POINTS = 20

# Sector relevance
SECTOR_ADJACENT_SCORE = 60

# Organizational fit
SIZE_WELL_SUITED_RATIO = 0.5  # Grant amount <= 50% of annual revenue
SIZE_MANAGEABLE_RATIO = 1.5  # Grant amount <= 150% of annual revenue
SIZE_WELL_SUITED_POINTS = 40
SIZE_MANAGEABLE_POINTS = 25
SIZE_OVERSIZED_POINTS = 10
TRACK_RECORD_STRONG_THRESHOLD = 5  # More than this many previous grants
TRACK_RECORD_STRONG_POINTS = 30
TRACK_RECORD_SOME_POINTS = 20
TRACK_RECORD_NONE_POINTS = 10
INNOVATION_HIGH_POINTS = 30
INNOVATION_MEDIUM_POINTS = 15

# Historical success (raw success rate percentages)
DEFAULT_HISTORICAL_MULTIPLIER = 2.0
HISTORICAL_HIGH_RATE = 30
HISTORICAL_MODERATE_RATE = 15

# Competition (typical applicant counts)
COMPETITION_LOW_APPLICANTS = 50
COMPETITION_MODERATE_APPLICANTS = 200
COMPETITION_LOW_SCORE = 80
COMPETITION_MODERATE_SCORE = 60
COMPETITION_HIGH_SCORE = 30

# Deadline viability
DIFFICULTY_PREP_DAYS = {
    "easy": 14,
    "medium": 30,
    "hard": 60,
    "expert": 90,
}
DEADLINE_AMPLE_FACTOR = 1.5
DEADLINE_TIGHT_FACTOR = 0.7
DEADLINE_AMPLE_SCORE = 100
DEADLINE_SUFFICIENT_SCORE = 70
DEADLINE_TIGHT_SCORE = 40
DEADLINE_CRITICAL_SCORE = 10

# Confidence (profile completeness)
CONFIDENCE_FIELDS = (
    "organization_type",
    "employee_count",
    "sector_tags",
    "annual_revenue",
    "location",
    "previous_grants",
)

# Match labels and ranking filter levels
MATCH_LABEL_THRESHOLDS = [
    (80, "Excellent Match"),
    (60, "Good Match"),
    (40, "Possible Match"),
]
POOR_MATCH_LABEL = "Poor Match"
FILTER_LEVEL_THRESHOLDS = {
    "all": 0,
    "high": 60,
    "excellent": 80,
}
