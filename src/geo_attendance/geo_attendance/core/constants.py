"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from datetime import time

EARTH_RADIUS_METERS = 6_371_000.0

# Day window used to find "today's" session: [00:00:00, 23:59:59).
DAY_WINDOW_START = time(0, 0, 0)
DAY_WINDOW_END = time(23, 59, 59)

NOT_CHECKED_OUT_LABEL = "Not checked out"
UNKNOWN_DIVISION_LABEL = "Unknown"
