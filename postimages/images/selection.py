"""
Image selection helpers.

These functions implement the edits a user makes to a post's gallery: seeding
it with a placeholder before generation, appending new candidates, and
toggling which images are selected. They never mutate their inputs; callers
persist the returned list with serialize_collection.
"""

from typing import Iterable, List, Optional, Tuple, Union

from postimages.core.constants import PLACEHOLDER_URL, SEED_PLACEHOLDER_URL
from postimages.core.logging_config import get_logger
from postimages.images.models import ImageDescriptor
from postimages.images.normalizer import normalize_image
from postimages.images.url_validator import is_real_image_url

logger = get_logger(__name__)


def generate_placeholder_images(post_id: Union[str, int]) -> List[ImageDescriptor]:
    """
    Create the single placeholder image shown before generation has run.

    Args:
        post_id: The post's identifier, used in the prompt text

    Returns:
        List[ImageDescriptor]: A one-element gallery
    """
    return [
        ImageDescriptor(
            url=SEED_PLACEHOLDER_URL,
            prompt=f"Placeholder image for post {post_id}",
            order=0,
            is_selected=False,
            metadata={
                "width": 400,
                "height": "300",
                "style": "placeholder",
            },
        )
    ]


def append_images(
    images: List[ImageDescriptor],
    new_entries: Iterable[Union[str, dict]]
) -> List[ImageDescriptor]:
    """
    Append candidate images to a gallery.

    New entries may be bare URLs (e.g. uploaded files) or raw stored mappings;
    they are normalized the same way stored entries are. Orders are
    renumbered to match positions.

    Args:
        images (List[ImageDescriptor]): The current gallery
        new_entries: URLs or raw image mappings to add

    Returns:
        List[ImageDescriptor]: The extended gallery
    """
    combined = list(images)
    for entry in new_entries:
        if isinstance(entry, str):
            entry = {"url": entry}
        image = normalize_image(entry)
        if image is not None:
            combined.append(image)

    logger.debug(f"Appended {len(combined) - len(images)} images to gallery of {len(images)}")
    return [image.with_changes(order=idx) for idx, image in enumerate(combined)]


def toggle_image_selection(
    images: List[ImageDescriptor],
    index: int,
    main_url: Optional[str] = None
) -> Tuple[List[ImageDescriptor], Optional[str]]:
    """
    Toggle the selection of one image and keep the main image URL in step.

    Selecting an image makes it the main image. Deselecting the current main
    image moves the main image to the first image still selected, or leaves
    it unchanged when none is.

    Images whose URL was rejected during parsing cannot be toggled, and an
    index outside the gallery is ignored.

    Args:
        images (List[ImageDescriptor]): The current gallery
        index (int): Position of the image to toggle
        main_url (str, optional): The post's current main image URL

    Returns:
        Tuple[List[ImageDescriptor], Optional[str]]: The updated gallery and main URL
    """
    if not 0 <= index < len(images):
        logger.warning(f"Image index {index} out of range for gallery of {len(images)}")
        return list(images), main_url

    target = images[index]
    if target.url == PLACEHOLDER_URL:
        logger.info(f"Ignoring selection of image {index} with an invalid URL")
        return list(images), main_url

    updated = list(images)
    updated[index] = target.with_changes(is_selected=not target.is_selected)

    if updated[index].is_selected:
        main_url = updated[index].url
    elif main_url == target.url:
        first_selected = next((image for image in updated if image.is_selected), None)
        if first_selected is not None:
            main_url = first_selected.url

    return updated, main_url


def displayable_images(images: List[ImageDescriptor]) -> List[ImageDescriptor]:
    """Images with a valid URL that is not a placeholder."""
    return [image for image in images if is_real_image_url(image.url)]
