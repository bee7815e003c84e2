REQUEST_ID_HEADER = "X-Request-ID"

# API Key Configuration
API_KEY_PREFIX = "merse_"
API_KEY_HEADER = "X-Api-Key"

# Tiered limiter response headers
RATE_LIMIT_LIMIT_HEADER = "X-RateLimit-Limit"
RATE_LIMIT_REMAINING_HEADER = "X-RateLimit-Remaining"
RATE_LIMIT_RESET_HEADER = "X-RateLimit-Reset"

# Pagination
DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 200
