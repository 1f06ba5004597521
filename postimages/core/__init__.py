"""
Core utilities and configuration for the postimages package.
"""

from postimages.core.config import get_config, get_config_value, is_production
from postimages.core.logging_config import get_logger, configure_logging
from postimages.core.error_handler import (
    APIError,
    ValidationError,
    ConfigurationError,
    MalformedCollectionError
)
