"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_SESSION_DAYS = 7

# Filter & sort
SEARCH_MAX_LENGTH = 200
DEFAULT_SORT_BY = "created_at"
DEFAULT_SORT_ORDER = "desc"

# Pagination
PAGE_SIZE_OPTIONS = (10, 25, 50, 100)
DEFAULT_PAGE_SIZE = 25

# Health score
HEALTH_MAX_SCORE = 100
HEALTHY_THRESHOLD = 70
WARNING_THRESHOLD = 40

BUDGET_OVERRUN_WEIGHT = 200
BUDGET_OVERRUN_MAX_PENALTY = 60

OVERDUE_BASE_PENALTY = 25
OVERDUE_DAILY_PENALTY = 1
OVERDUE_MAX_PENALTY = 40

DEADLINE_WARNING_DAYS = 7
DEADLINE_NEAR_PENALTY = 10

STAGNATION_ELAPSED_RATIO = 0.7
STAGNATION_PROGRESS_FLOOR = 50
STAGNATION_PENALTY = 15
