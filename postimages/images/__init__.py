"""
Image collection parsing, validation and editing.
"""

from postimages.images.models import ImageDescriptor
from postimages.images.url_validator import is_valid_image_url, is_placeholder_url
from postimages.images.normalizer import (
    parse_collection,
    serialize_collection,
    resolve_main_image,
    has_real_images,
    count_selected,
    get_post_images,
    get_main_image_url
)
from postimages.images.selection import (
    generate_placeholder_images,
    append_images,
    toggle_image_selection,
    displayable_images
)
