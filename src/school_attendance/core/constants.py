"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_RECENT_CLASSES_LIMIT = 5

# MySQL error code for a duplicate entry on a unique key.
MYSQL_DUPLICATE_KEY = 1062
