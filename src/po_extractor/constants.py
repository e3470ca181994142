"""
Project-wide constants for the purchase-order extractor
"""  # noqa: D200, D212, D415

# ==============================================================================
# Rate Budget
# ==============================================================================

REQUESTS_PER_MINUTE = 10
TOKENS_PER_MINUTE = 800_000
REQUESTS_PER_DAY = 1_400

MINUTE = 60.0  # seconds
DAY = 24 * 3600.0  # seconds

# ==============================================================================
# Throttle Retry Policy
# ==============================================================================

THROTTLE_COOLDOWN = 60.0  # seconds
THROTTLE_BACKOFF_FACTOR = 2.0
THROTTLE_MAX_COOLDOWN = 900.0  # seconds
THROTTLE_MAX_ATTEMPTS = 5  # None disables the ceiling

# ==============================================================================
# Token Estimation
# ==============================================================================

BYTES_PER_TOKEN = 4.0

# ==============================================================================
# Model Defaults
# ==============================================================================

DEFAULT_MODEL = "gemini-2.0-flash"
DEFAULT_LOCATION = "us-central1"
PDF_MIME_TYPE = "application/pdf"

MAX_OUTPUT_TOKENS = 8192
TEMPERATURE = 0.0
TOP_P = 0.0

SAFETY_CATEGORIES = (
    "HARM_CATEGORY_HATE_SPEECH",
    "HARM_CATEGORY_DANGEROUS_CONTENT",
    "HARM_CATEGORY_SEXUALLY_EXPLICIT",
    "HARM_CATEGORY_HARASSMENT",
)
SAFETY_THRESHOLD = "BLOCK_MEDIUM_AND_ABOVE"

# ==============================================================================
# Output
# ==============================================================================

OUTPUT_INDENT = 2
