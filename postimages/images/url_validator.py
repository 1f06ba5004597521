"""
Image URL validation.

Stored image URLs come from several generation services, user uploads and
older versions of the application. Only URLs that can be rendered on any later
request are accepted:
- absolute http(s) URLs
- site-relative paths ("/...")
- inline data:image/ URLs

blob: URLs are session-local object URLs created in a browser and are always
rejected, as is anything empty or not a string.
"""

from typing import Any, List

from postimages.core.config import get_config_value, is_production
from postimages.core.constants import (
    BLOB_URL_PREFIX,
    DEFAULT_SHORTENER_DOMAINS,
    PLACEHOLDER_MARKER,
    VALID_URL_PREFIXES
)
from postimages.core.logging_config import get_logger

logger = get_logger(__name__)


def get_shortener_domains() -> List[str]:
    """
    Get the link-shortener domains that trigger a diagnostic note.

    Returns:
        List[str]: Domain fragments from config, or the built-in defaults
    """
    return get_config_value("images.shortener_domains", DEFAULT_SHORTENER_DOMAINS)


def is_valid_image_url(url: Any) -> bool:
    """
    Check whether a stored image URL can be trusted for display.

    Outside production, URLs pointing at a link shortener are logged; they
    are still considered valid.

    Args:
        url: The URL to check, possibly None

    Returns:
        bool: True if the URL is usable
    """
    if not url or not isinstance(url, str):
        return False

    if url.startswith(BLOB_URL_PREFIX):
        return False

    if not is_production():
        for domain in get_shortener_domains():
            if domain in url:
                logger.info(f"Image URL uses link shortener {domain}: {url}")
                break

    return url.startswith(VALID_URL_PREFIXES)


def is_placeholder_url(url: Any) -> bool:
    """
    Check whether a URL points at a placeholder image.

    Args:
        url: The URL to check

    Returns:
        bool: True for any placeholder.svg URL, including the seeded ones
    """
    return isinstance(url, str) and PLACEHOLDER_MARKER in url


def is_real_image_url(url: Any) -> bool:
    """True if the URL is valid and not a placeholder."""
    return is_valid_image_url(url) and not is_placeholder_url(url)
