"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from datetime import time

DEFAULT_QR_TOKEN_TTL_MS = 30_000
QR_TOKEN_BYTES = 16

EARTH_RADIUS_METERS = 6_371_000

WORK_START_LATE_AFTER = time(9, 15)
WORK_END = time(17, 0)
MAX_DAILY_WORK_HOURS = 8

PASSWORD_MIN_LENGTH = 6
PASSWORD_RESET_MINUTES = 10

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100

UNASSIGNED_DEPARTMENT = "Unassigned"
OUTSIDE_RADIUS_NOTE = "Location is outside the allowed radius"
