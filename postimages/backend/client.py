"""
Client for the image generation backend.

The backend generates images for a content post and writes them into the post
record itself, usually in the background. This client only starts generation
and reports whether the backend answered with images straight away or is still
processing; callers poll the post record (see postimages.posts.status) to pick
up the results.
"""

import json
from typing import Any, Dict, Optional, Union

import requests

from postimages.core.config import get_config_value, get_env_value
from postimages.core.constants import (
    BACKEND_URL_ENV_VAR,
    DEFAULT_BACKEND_MAX_RETRIES,
    DEFAULT_BACKEND_RETRY_DELAY,
    DEFAULT_BACKEND_TIMEOUT,
    DEFAULT_IMAGE_STYLE,
    DEFAULT_NUM_IMAGES,
    IMAGE_SERVICES,
    IMAGE_STATUS_GENERATING,
    IMAGE_STYLES
)
from postimages.core.error_handler import (
    APIError,
    ValidationError,
    log_api_error,
    retry_api_request,
    validate_configuration
)
from postimages.core.logging_config import get_logger, log_api_request, log_api_response

# Initialize logger
logger = get_logger(__name__)

PROCESSING_MARKERS = ("background", "processing")


class GenerationBackendClient:
    """
    Client for the remote image generation API.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[int] = None,
        max_retries: Optional[int] = None,
        retry_delay: Optional[int] = None
    ):
        """
        Initialize the backend client.

        Args:
            base_url (str, optional): Backend base URL. If not provided, FASTAPI_URL
                or the backend.url configuration value is used.
            timeout (int, optional): Request timeout in seconds.
            max_retries (int, optional): Attempts for failing requests.
            retry_delay (int, optional): Initial delay between attempts in seconds.

        Raises:
            ConfigurationError: If no base URL is available
        """
        base_url = base_url or get_env_value(BACKEND_URL_ENV_VAR, "backend.url")
        validate_configuration({"url": base_url}, ["url"], component="GenerationBackendClient")

        self.base_url = base_url.rstrip("/")
        self.timeout = timeout or get_config_value("backend.timeout", DEFAULT_BACKEND_TIMEOUT)
        self.max_retries = max_retries or get_config_value("backend.max_retries", DEFAULT_BACKEND_MAX_RETRIES)
        self.retry_delay = retry_delay or get_config_value("backend.retry_delay", DEFAULT_BACKEND_RETRY_DELAY)

        logger.info(f"Initialized {self.__class__.__name__} for {self.base_url}")

    def generate_images(
        self,
        post_id: Union[str, int],
        num_images: int = DEFAULT_NUM_IMAGES,
        style: str = DEFAULT_IMAGE_STYLE,
        image_service: str = ""
    ) -> Dict[str, Any]:
        """
        Start image generation for a post.

        Args:
            post_id: The post to generate images for
            num_images (int): Number of images to generate
            style (str): One of IMAGE_STYLES
            image_service (str): One of IMAGE_SERVICES, or empty for the backend default

        Returns:
            Dict[str, Any]: Either the backend's result when it already contains
            images, or {"status": "processing", "message": ...}

        Raises:
            ValidationError: If an argument is invalid
            APIError: If the backend request fails
        """
        if post_id is None or str(post_id) == "":
            raise ValidationError("Post ID is required", field="post_id")
        if not isinstance(num_images, int) or num_images < 1:
            raise ValidationError("Number of images must be a positive integer", field="num_images", value=num_images)
        if style not in IMAGE_STYLES:
            raise ValidationError(f"Unknown image style: {style}", field="style", value=style)
        if image_service and image_service not in IMAGE_SERVICES:
            raise ValidationError(f"Unknown image service: {image_service}", field="image_service", value=image_service)

        endpoint = f"{self.base_url}/content/{post_id}/generate_images_real"
        params = {"num_images": num_images, "style": style}
        if image_service:
            params["image_service"] = image_service

        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json"
        }

        log_api_request(logger, "generation backend", endpoint, params)

        try:
            response = retry_api_request(
                requests.post,
                endpoint,
                headers=headers,
                error_message="Failed to generate images",
                max_retries=self.max_retries,
                retry_delay=self.retry_delay,
                params=params,
                timeout=self.timeout
            )
        except APIError as e:
            log_api_error(e)
            raise

        return self._interpret_response(response, endpoint)

    def _interpret_response(self, response: requests.Response, endpoint: str) -> Dict[str, Any]:
        """
        Turn a successful backend response into a generation result.

        Args:
            response (requests.Response): The backend response
            endpoint (str): The endpoint called, for error reporting

        Returns:
            Dict[str, Any]: The generation result

        Raises:
            APIError: If the response is neither a processing notice nor JSON
        """
        text = response.text or ""
        logger.debug(f"Response text preview: {text[:200]}")

        if any(marker in text for marker in PROCESSING_MARKERS):
            logger.info("Image generation started in background")
            return self._processing("Image generation started in background")

        try:
            data = json.loads(text)
        except ValueError as e:
            raise APIError(
                message=f"Invalid JSON response from server: {e}",
                status_code=response.status_code,
                response=text[:500],
                endpoint=endpoint
            )

        log_api_response(logger, "generation backend", response.status_code, data)

        if isinstance(data, dict) and isinstance(data.get("images"), list) and data["images"]:
            return data

        return self._processing("Image generation in progress")

    @staticmethod
    def _processing(message: str) -> Dict[str, Any]:
        return {
            "status": "processing",
            "image_status": IMAGE_STATUS_GENERATING,
            "message": message,
        }
