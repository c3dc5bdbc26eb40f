"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_TOKEN_EXPIRY_DAYS = 1

# Doses after which a vaccine record counts as completed, whatever the vaccine.
DOSES_FOR_COMPLETION = 2

REPORT_GRADES = ("9th", "10th", "11th", "12th")

DASHBOARD_RECENT_DAYS = 7
REPORT_RECENT_DAYS = 30
UPCOMING_DRIVES_LIMIT = 3
