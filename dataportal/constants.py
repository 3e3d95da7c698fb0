"""Constants that don't change often enough to go in Settings."""
from importlib import metadata

# Browse and export limits
DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 200
MAX_EXPORT_ROWS = 50_000

# Connection type recorded when a submission doesn't say how it was made
DEFAULT_CONNECTION_TYPE = "manual_token"

# Shown on emails when a submission doesn't say how it was made
DEFAULT_CONNECTION_METHOD = "manual"

# For the HTML email timestamp
NOTIFICATION_TIMEZONE = "Europe/London"

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "Content-Type",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
}

__version__ = metadata.version(__package__)
