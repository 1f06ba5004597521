"""
Image collection normalizer.

A content post stores its candidate images as a single JSON string. That
string has been written by several generations of the application and by hand,
so it may be empty, not JSON at all, the flat envelope {"images": [...]} or the
legacy double-nested envelope {"images": {"images": [...]}}.

This module turns that string into validated ImageDescriptor lists, resolves
the post's main image, and writes collections back in the canonical flat
shape. None of the functions here raise on bad stored data: a render path must
never fail because of an old record.
"""

import json
from typing import Any, Dict, Iterable, List, Optional

import jsonschema

from postimages.core.constants import DEFAULT_IMAGE_ORDER, DEFAULT_IMAGE_PROMPT, PLACEHOLDER_URL
from postimages.core.error_handler import MalformedCollectionError
from postimages.core.logging_config import get_logger
from postimages.images.models import ImageDescriptor, default_metadata
from postimages.images.url_validator import is_real_image_url, is_valid_image_url
from postimages.schemas import load_schema

logger = get_logger(__name__)

# Envelope shapes, tried in order
ENVELOPE_SHAPES = [
    ("flat", load_schema("image_collection")),
    ("nested", load_schema("image_collection_nested")),
]


def decode_envelope(data: Any) -> List[Any]:
    """
    Extract the raw image entries from a decoded collection envelope.

    Args:
        data: The result of json.loads on the stored string

    Returns:
        List[Any]: The raw entries, not yet normalized

    Raises:
        MalformedCollectionError: If data matches neither envelope shape
    """
    for shape, schema in ENVELOPE_SHAPES:
        try:
            jsonschema.validate(instance=data, schema=schema)
        except jsonschema.exceptions.ValidationError:
            continue

        logger.debug(f"Decoded {shape} image collection")
        if shape == "flat":
            return data["images"]
        return data["images"]["images"]

    raise MalformedCollectionError("Unrecognized image collection shape", raw=json.dumps(data)[:200])


def _coerce_order(value: Any) -> int:
    if value is None or isinstance(value, bool):
        return DEFAULT_IMAGE_ORDER
    try:
        return max(int(value), 0)
    except (TypeError, ValueError, OverflowError):
        return DEFAULT_IMAGE_ORDER


def normalize_image(entry: Any) -> Optional[ImageDescriptor]:
    """
    Build a validated descriptor from one raw stored entry.

    Invalid URLs are replaced with the placeholder sentinel and missing fields
    get their defaults.

    Args:
        entry: One element of the stored images list

    Returns:
        Optional[ImageDescriptor]: The descriptor, or None if entry is not a mapping
    """
    if not isinstance(entry, dict):
        logger.warning(f"Skipping image entry that is not an object: {entry!r}")
        return None

    url = entry.get("url")
    if not is_valid_image_url(url):
        logger.debug(f"Replacing invalid image URL {url!r} with placeholder")
        url = PLACEHOLDER_URL

    prompt = entry.get("prompt")
    if not isinstance(prompt, str) or not prompt:
        prompt = DEFAULT_IMAGE_PROMPT

    metadata = entry.get("metadata")
    metadata = dict(metadata) if isinstance(metadata, dict) else default_metadata()

    return ImageDescriptor(
        url=url,
        prompt=prompt,
        order=_coerce_order(entry.get("order")),
        is_selected=bool(entry.get("isSelected")),
        metadata=metadata,
    )


def normalize_images(entries: Iterable[Any]) -> List[ImageDescriptor]:
    """Normalize raw entries, dropping the ones that are not mappings."""
    images = []
    for entry in entries:
        image = normalize_image(entry)
        if image is not None:
            images.append(image)
    return images


def parse_collection(raw: Optional[str]) -> List[ImageDescriptor]:
    """
    Parse a stored image collection string.

    Args:
        raw (str, optional): The stored images field

    Returns:
        List[ImageDescriptor]: Validated descriptors in stored order; empty if
        the field is empty or malformed
    """
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        return []

    try:
        if not isinstance(raw, str):
            raise MalformedCollectionError(f"Expected a string, got {type(raw).__name__}")
        entries = decode_envelope(json.loads(raw))
    except (ValueError, RecursionError, MalformedCollectionError) as e:
        # json.JSONDecodeError is a ValueError
        logger.error(f"Error parsing images JSON: {e}")
        return []

    return normalize_images(entries)


def serialize_collection(images: Iterable[ImageDescriptor]) -> str:
    """
    Serialize descriptors to the canonical stored string.

    The order field is rewritten to each descriptor's position in the sequence.

    Args:
        images (Iterable[ImageDescriptor]): Descriptors in display order

    Returns:
        str: JSON string of the form {"images": [...]}
    """
    return json.dumps({
        "images": [image.with_changes(order=idx).to_dict() for idx, image in enumerate(images)]
    })


def resolve_main_image(images: List[ImageDescriptor], fallback_url: Optional[str] = None) -> str:
    """
    Resolve the single image shown as a post's thumbnail.

    Priority:
    1. The first selected image with a real URL
    2. The post's standalone image URL, if real
    3. The first image with a real URL
    4. The placeholder sentinel

    Args:
        images (List[ImageDescriptor]): The post's parsed images
        fallback_url (str, optional): The post's standalone image URL

    Returns:
        str: A non-empty URL
    """
    for image in images:
        if image.is_selected and is_real_image_url(image.url):
            return image.url

    if is_real_image_url(fallback_url):
        return fallback_url

    for image in images:
        if is_real_image_url(image.url):
            return image.url

    return PLACEHOLDER_URL


def has_real_images(images: List[ImageDescriptor]) -> bool:
    """
    Check whether any image is an actual generated or uploaded image.

    Args:
        images (List[ImageDescriptor]): Parsed images

    Returns:
        bool: True if at least one URL is valid and not a placeholder
    """
    return any(is_real_image_url(image.url) for image in images)


def count_selected(images: List[ImageDescriptor]) -> int:
    """Number of selected images."""
    return sum(1 for image in images if image.is_selected)


def get_post_images(post: Dict[str, Any]) -> List[ImageDescriptor]:
    """
    Parse the images stored on a post record.

    Args:
        post (Dict[str, Any]): Post record with an optional "images" string

    Returns:
        List[ImageDescriptor]: The post's validated images
    """
    return parse_collection(post.get("images"))


def get_main_image_url(post: Dict[str, Any]) -> str:
    """
    Resolve the main image of a post record.

    Args:
        post (Dict[str, Any]): Post record with "images" and "imageUrl" fields

    Returns:
        str: A non-empty URL
    """
    return resolve_main_image(get_post_images(post), post.get("imageUrl"))
