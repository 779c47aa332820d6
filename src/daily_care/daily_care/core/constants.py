"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

RECORD_ID_PREFIX = "registro_"
LEGACY_ID_PREFIX = "local_"
RECORD_ID_DATE_FORMAT = "%Y%m%d"

DEFAULT_HISTORY_LIMIT = 30
DEFAULT_ERROR_AUTO_CLEAR_SECONDS = 3
MAX_UNREVIEWED_LIMIT = 200
