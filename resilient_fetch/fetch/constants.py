"""Constants for the resilient fetch layer."""

# HTTP Status Code Ranges
HTTP_STATUS_OK_MIN = 200
HTTP_STATUS_OK_MAX = 300

# Retry defaults (attempt count and fixed pause between attempts)
DEFAULT_MAX_ATTEMPTS = 12
DEFAULT_DELAY_MS = 2000

# Transport defaults
DEFAULT_TIMEOUT_SECONDS = 30.0
DEFAULT_USER_AGENT = "resilient-fetch/1.0"

# Name carried by serialized terminal errors; consumers match on it verbatim
FETCH_ERROR_NAME = "Fetcher Error"

# Granularity of cancellation checks while an async client is paused
CANCEL_POLL_INTERVAL_SECONDS = 0.05
