"""
Constants for the postimages package.

This module provides constants used throughout the postimages package.
These constants can be easily changed in one place.
"""

# Placeholder images
PLACEHOLDER_URL = "/placeholder.svg?text=No+Valid+Image"
PLACEHOLDER_MARKER = "placeholder.svg"
SEED_PLACEHOLDER_URL = "/placeholder.svg?height=300&width=400&text=Placeholder_image"

# URL prefixes
BLOB_URL_PREFIX = "blob:"
VALID_URL_PREFIXES = ("http", "/", "data:image/")

# Image descriptor defaults
DEFAULT_IMAGE_PROMPT = "Image"
DEFAULT_IMAGE_ORDER = 0
DEFAULT_IMAGE_METADATA = {
    "style": "default",
    "width": 400,
    "height": "300",
}

# Link shorteners that get a diagnostic note outside production
DEFAULT_SHORTENER_DOMAINS = ["tinyurl.com", "bit.ly"]

# Image generation
IMAGE_STYLES = [
    "realistic",
    "cartoon",
    "illustration",
    "watercolor",
    "sketch",
    "ghibli",
    "pixel_art",
    "oil_painting",
]
IMAGE_SERVICES = ["flux", "gemini", "ideogram"]
DEFAULT_IMAGE_STYLE = "realistic"
DEFAULT_NUM_IMAGES = 1

# Image status values
IMAGE_STATUS_PENDING = "pending"
IMAGE_STATUS_GENERATING = "generating"
IMAGE_STATUS_COMPLETED = "completed"
IMAGE_STATUS_FAILED = "failed"

# Backend
BACKEND_URL_ENV_VAR = "FASTAPI_URL"
DEFAULT_BACKEND_TIMEOUT = 30
DEFAULT_BACKEND_MAX_RETRIES = 3
DEFAULT_BACKEND_RETRY_DELAY = 1

# Environment
APP_ENV_VAR = "APP_ENV"
DEFAULT_ENVIRONMENT = "development"
