"""
Image descriptor model.

An image descriptor is one candidate image of a content post: its URL, the
prompt it was generated from, its position in the post's gallery, whether the
user selected it, and free-form generation metadata.
"""

from dataclasses import dataclass, field, replace
from typing import Any, Dict, Optional

from postimages.core.constants import DEFAULT_IMAGE_METADATA, DEFAULT_IMAGE_ORDER, DEFAULT_IMAGE_PROMPT


def default_metadata() -> Dict[str, Any]:
    """Fresh copy of the metadata used when an image carries none."""
    return dict(DEFAULT_IMAGE_METADATA)


@dataclass
class ImageDescriptor:
    url: str
    prompt: str = DEFAULT_IMAGE_PROMPT
    order: int = DEFAULT_IMAGE_ORDER
    is_selected: bool = False
    # style, width, height, service; width/height may be numbers or strings
    metadata: Optional[Dict[str, Any]] = field(default_factory=default_metadata)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert the descriptor to its stored JSON shape.

        Returns:
            Dict[str, Any]: Mapping with url, prompt, order, isSelected and metadata keys
        """
        data = {
            "url": self.url,
            "prompt": self.prompt,
            "order": self.order,
            "isSelected": self.is_selected,
        }
        if self.metadata is not None:
            data["metadata"] = dict(self.metadata)
        return data

    def with_changes(self, **changes: Any) -> "ImageDescriptor":
        """Return a copy with the given fields replaced."""
        return replace(self, **changes)
