"""
Post-level image workflow: generation status and image updates.
"""

from postimages.posts.status import derive_image_status
from postimages.posts.updates import build_image_update, build_selection_update
