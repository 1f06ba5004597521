"""
Command-line interface for the postimages package.

This module provides the CLI commands for the postimages package:
- inspect: Summarize the images stored on a content post record
- normalize: Rewrite a stored images string in canonical form
- mainimage: Print the resolved main image of a post record
- generate: Start image generation for a post on the generation backend
"""

import sys
import json
from typing import Any, Dict, Optional

import click

from postimages import __version__
from postimages.core.constants import DEFAULT_IMAGE_STYLE, DEFAULT_NUM_IMAGES, IMAGE_SERVICES, IMAGE_STYLES
from postimages.core.error_handler import APIError, ConfigurationError, ValidationError
from postimages.core.logging_config import get_logger, configure_logging
from postimages.images.normalizer import (
    count_selected,
    get_post_images,
    has_real_images,
    parse_collection,
    resolve_main_image,
    serialize_collection
)
from postimages.posts.status import derive_image_status

# Initialize logging
configure_logging()
logger = get_logger(__name__)


def load_post_record(post_file) -> Dict[str, Any]:
    """
    Load a post record from an open JSON file.

    Args:
        post_file: Readable file object

    Returns:
        Dict[str, Any]: The post record

    Raises:
        click.ClickException: If the file is not a JSON object
    """
    try:
        post = json.load(post_file)
    except json.JSONDecodeError as e:
        raise click.ClickException(f"Invalid JSON in post record: {e}")

    if not isinstance(post, dict):
        raise click.ClickException("Post record must be a JSON object")

    return post


@click.group()
@click.version_option(version=__version__)
def main():
    """
    postimages - Image metadata tools for campaign content posts.

    Parses, validates and rewrites the image collections stored on content
    posts, and starts image generation on the generation backend.
    """
    pass


@main.command()
@click.argument('post_file', type=click.File('r'))
def inspect(post_file):
    """
    Summarize the images stored on a post record.

    POST_FILE: JSON file holding the post record ("-" for stdin). The record's
    "images" field is the stored collection string and "imageUrl" the
    standalone image.

    Examples:
      postimages inspect post.json
    """
    post = load_post_record(post_file)
    images = get_post_images(post)

    summary = {
        "post_id": post.get("id"),
        "images": [image.to_dict() for image in images],
        "main_image": resolve_main_image(images, post.get("imageUrl")),
        "has_real_images": has_real_images(images),
        "selected_count": count_selected(images),
        "image_status": derive_image_status(post)["status"],
    }
    click.echo(json.dumps(summary, indent=2))


@main.command()
@click.argument('images_file', type=click.File('r'), default='-')
def normalize(images_file):
    """
    Rewrite a stored images string in canonical form.

    IMAGES_FILE: File holding the raw images string (default: stdin).
    Malformed input produces an empty collection.
    """
    raw = images_file.read()
    images = parse_collection(raw)
    logger.info(f"Normalized {len(images)} images")
    click.echo(serialize_collection(images))


@main.command()
@click.argument('post_file', type=click.File('r'))
def mainimage(post_file):
    """
    Print the main image URL of a post record.

    POST_FILE: JSON file holding the post record ("-" for stdin).
    """
    post = load_post_record(post_file)
    click.echo(resolve_main_image(get_post_images(post), post.get("imageUrl")))


@main.command()
@click.argument('post_id')
@click.option('-n', '--num-images', type=int, default=DEFAULT_NUM_IMAGES, show_default=True,
              help='Number of images to generate')
@click.option('-s', '--style', type=click.Choice(IMAGE_STYLES), default=DEFAULT_IMAGE_STYLE, show_default=True,
              help='Image style')
@click.option('--service', 'image_service', type=click.Choice(IMAGE_SERVICES), default=None,
              help='Image generation service (default: backend choice)')
@click.option('--backend-url', type=str, default=None,
              help='Generation backend base URL (default: FASTAPI_URL or backend.url config)')
def generate(post_id: str, num_images: int, style: str, image_service: Optional[str],
             backend_url: Optional[str]):
    """
    Start image generation for a post.

    POST_ID: Identifier of the content post

    Examples:
      postimages generate 42
      postimages generate 42 -n 3 -s watercolor --service flux
    """
    from postimages.backend.client import GenerationBackendClient

    try:
        client = GenerationBackendClient(base_url=backend_url)
        click.echo(f"Generating {num_images} {style} image(s) for post {post_id}")
        result = client.generate_images(
            post_id,
            num_images=num_images,
            style=style,
            image_service=image_service or ""
        )
    except (APIError, ValidationError, ConfigurationError) as e:
        logger.error(f"Error generating images: {str(e)}")
        click.echo(f"Error: {str(e)}", err=True)
        sys.exit(1)

    click.echo(json.dumps(result, indent=2))


if __name__ == '__main__':
    main()
