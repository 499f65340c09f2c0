"""
Application-level constants for catalog behavior.

These values define how names are compared and how large log lines may
grow. They are not configurable; see catalog/settings.py for values that
can be overridden via environment variables.
"""

# ============================================================================
# Name Matching
# ============================================================================

# Characters removed from both sides of a loose name comparison. The SQL side
# applies one replace() per character and normalize_name deletes exactly these.
NAME_NORMALIZE_STRIP_CHARS = (
    " ",
    "\t",
    "\n",
    "\r",
    "\v",
    "\f",
    "\xa0",  # no-break space
    "\u2007",  # figure space
    "\u2009",  # thin space
    "\u202f",  # narrow no-break space
    "\u3000",  # ideographic space
    ".",
)


# ============================================================================
# Logging
# ============================================================================

# Maximum size of a single structured log line before the message is cut
MAX_LOG_SIZE_BYTES = 100_000

# Characters of a SQL statement kept when logging slow queries
SLOW_QUERY_PREVIEW_CHARS = 500
