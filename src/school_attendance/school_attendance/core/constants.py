"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_TIER_GOOD_MIN = 90
DEFAULT_TIER_AVERAGE_MIN = 75

# Statuses that count towards an attendance percentage.
ATTENDED_STATUSES = frozenset({"present", "late"})

# Academic terms as (first month, last month), inclusive.
TERMS = ((1, 4), (5, 8), (9, 12))

DAY_LABELS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")

ALREADY_MARKED_MESSAGE = "Already Marked"
