"""
postimages - Image metadata tools for campaign content posts

A Python package for reading, validating and rewriting the image collections
stored on the content posts of a marketing-campaign application, and for
starting image generation on its generation backend.
"""

__version__ = "0.1.0"

# Import main components for easier access
from postimages.images.models import ImageDescriptor
from postimages.images.normalizer import (
    parse_collection,
    serialize_collection,
    resolve_main_image,
    has_real_images,
    count_selected
)
from postimages.images.url_validator import is_valid_image_url
from postimages.backend.client import GenerationBackendClient
