"""
Image update payloads for content posts.

The functions here validate what a caller wants to write to a post's image
fields and return the column values to store. Persisting them is left to the
caller's database layer.
"""

import json
from typing import Any, Dict, List, Optional

from postimages.core.constants import IMAGE_STATUS_COMPLETED
from postimages.core.error_handler import MalformedCollectionError, ValidationError
from postimages.core.logging_config import get_logger
from postimages.images.models import ImageDescriptor
from postimages.images.normalizer import decode_envelope, normalize_images, serialize_collection
from postimages.images.url_validator import is_real_image_url, is_valid_image_url

logger = get_logger(__name__)


def build_image_update(
    image: Optional[str] = None,
    images_json: Optional[str] = None
) -> Dict[str, Any]:
    """
    Build the field updates for manually setting a post's images.

    Manually set images always mark generation as completed. The images
    string is re-normalized so that only canonical collections are stored.

    Args:
        image (str, optional): New standalone image URL
        images_json (str, optional): New serialized image collection

    Returns:
        Dict[str, Any]: Fields to update on the post record

    Raises:
        ValidationError: If neither argument is given, the image URL is
            invalid, or images_json is not a readable collection
    """
    if not image and not images_json:
        raise ValidationError("Either image or imagesJson must be provided")

    update = {"image_status": IMAGE_STATUS_COMPLETED}

    if image:
        if not is_valid_image_url(image):
            raise ValidationError("Invalid image URL", field="image", value=image)
        update["imageUrl"] = image

    if images_json:
        try:
            entries = decode_envelope(json.loads(images_json))
        except (ValueError, RecursionError, MalformedCollectionError) as e:
            raise ValidationError(f"Invalid images JSON: {e}", field="imagesJson")
        update["images"] = serialize_collection(normalize_images(entries))

    logger.info(f"Prepared image update for fields: {', '.join(sorted(update))}")
    return update


def build_selection_update(images: List[ImageDescriptor], main_url: Optional[str]) -> Dict[str, Any]:
    """
    Build the field updates for saving a gallery after the user edits it.

    Args:
        images (List[ImageDescriptor]): The edited gallery
        main_url (str, optional): The main image chosen alongside it

    Returns:
        Dict[str, Any]: Fields to update on the post record
    """
    update = {"images": serialize_collection(images)}
    if is_real_image_url(main_url):
        update["imageUrl"] = main_url
    return update
