"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_SESSION_DAYS = 7
MAX_LIST_LIMIT = 1000
LOGIN_MIN_RESPONSE_SECONDS = 0.2
MINUTES_PER_DAY = 24 * 60
MIN_PASSWORD_LENGTH = 8

RATE_LIMIT_WINDOW_SECONDS = 60
RATE_LIMIT_SWEEP_SECONDS = 5 * 60

# Keys the client may send but the server always controls.
SERVER_CONTROLLED_FIELDS = ("id", "createdById", "createdBy", "createdAt", "updatedAt")
