"""
Image generation status of a content post.

Image generation runs in the background on the generation backend, which
writes the finished images straight into the post record. The post's
image_status field is therefore often stale: a post still marked "generating"
may already carry its images. derive_image_status reconciles the two.
"""

from typing import Any, Dict

from postimages.core.constants import (
    IMAGE_STATUS_COMPLETED,
    IMAGE_STATUS_GENERATING,
    IMAGE_STATUS_PENDING
)
from postimages.core.logging_config import get_logger
from postimages.images.normalizer import get_post_images
from postimages.images.selection import displayable_images

logger = get_logger(__name__)


def derive_image_status(post: Dict[str, Any]) -> Dict[str, Any]:
    """
    Work out where a post is in the image generation workflow.

    Args:
        post (Dict[str, Any]): Post record with "images", "imageUrl" and "image_status"

    Returns:
        Dict[str, Any]: Summary with keys:
            status: the reconciled status
            is_complete: whether generation has finished
            has_images: whether any real image is stored
            images: the real images, as stored dicts
            image_url: the post's standalone image URL
            status_changed: True if a pending or generating post was promoted
    """
    images = displayable_images(get_post_images(post))
    has_images = len(images) > 0

    stored_status = post.get("image_status") or IMAGE_STATUS_PENDING
    status = stored_status

    if status in (IMAGE_STATUS_GENERATING, IMAGE_STATUS_PENDING) and has_images:
        status = IMAGE_STATUS_COMPLETED

    summary = {
        "status": status,
        "is_complete": status == IMAGE_STATUS_COMPLETED or has_images,
        "has_images": has_images,
        "images": [image.to_dict() for image in images],
        "image_url": post.get("imageUrl"),
        "status_changed": status != stored_status,
    }

    logger.info(
        f"Post {post.get('id')} status: {status}, hasImages: {has_images}, imageCount: {len(images)}"
    )
    return summary
