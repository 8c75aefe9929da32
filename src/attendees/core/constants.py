"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

HISTORY_PAGE_SIZE = 200
REFRESH_SECONDS = 10

DEFAULT_SEARCH_FIELDS = ("idnumber", "email", "username", "phone1", "phone2")
DEFAULT_LOCATION_NAME = "Sign In / Out Location"
DEFAULT_TIMEZONE = "UTC"
