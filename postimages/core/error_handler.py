"""
Error handling module.

This module provides the exception types used across the postimages package
and helpers for making API requests with consistent error reporting.
"""

import json
import time
import logging
import traceback
from typing import Dict, Any, Optional, Callable, List

import requests

logger = logging.getLogger(__name__)

class APIError(Exception):
    """
    Exception raised for API errors.

    Attributes:
        message: Error message.
        status_code: HTTP status code.
        response: API response.
        endpoint: API endpoint.
        request_data: Request data.
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        response: Optional[Any] = None,
        endpoint: Optional[str] = None,
        request_data: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.status_code = status_code
        self.response = response
        self.endpoint = endpoint
        self.request_data = request_data

        detailed_message = f"API Error: {message}"
        if status_code:
            detailed_message += f" (Status Code: {status_code})"
        if endpoint:
            detailed_message += f" (Endpoint: {endpoint})"

        super().__init__(detailed_message)


class ValidationError(Exception):
    """
    Exception raised for validation errors.

    Attributes:
        message: Error message.
        field: Field that failed validation.
        value: Value that failed validation.
    """

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Optional[Any] = None
    ):
        self.message = message
        self.field = field
        self.value = value

        detailed_message = f"Validation Error: {message}"
        if field:
            detailed_message += f" (Field: {field})"

        super().__init__(detailed_message)


class ConfigurationError(Exception):
    """
    Exception raised for configuration errors.

    Attributes:
        message: Error message.
        component: Component that has a configuration error.
        missing_keys: Keys that are missing from the configuration.
    """

    def __init__(
        self,
        message: str,
        component: Optional[str] = None,
        missing_keys: Optional[list] = None
    ):
        self.message = message
        self.component = component
        self.missing_keys = missing_keys or []

        detailed_message = f"Configuration Error: {message}"
        if component:
            detailed_message += f" (Component: {component})"
        if missing_keys:
            detailed_message += f" (Missing Keys: {', '.join(missing_keys)})"

        super().__init__(detailed_message)


class MalformedCollectionError(Exception):
    """
    Exception raised when a stored image collection cannot be decoded.

    The normalizer recovers from this error itself; it never reaches callers of
    parse_collection.

    Attributes:
        message: Error message.
        raw: The raw stored value (truncated).
    """

    def __init__(self, message: str, raw: Optional[str] = None):
        self.message = message
        self.raw = raw[:200] if isinstance(raw, str) else raw

        super().__init__(f"Malformed Collection: {message}")


def extract_error_detail(response: Any, default: str) -> str:
    """
    Extract a human readable error message from an error response body.

    JSON bodies are searched for "detail", "error" and "message" keys in that
    order; other bodies are appended to the default message.

    Args:
        response: The HTTP response.
        default: Message to use when the body carries nothing useful.

    Returns:
        str: The error message.
    """
    text = getattr(response, 'text', None) or ""

    try:
        error_data = json.loads(text)
    except (TypeError, ValueError):
        error_data = None

    if isinstance(error_data, dict):
        for key in ("detail", "error", "message"):
            if error_data.get(key):
                return str(error_data[key])
        return default

    if text:
        return f"{default} - {text[:100]}"

    return default


def handle_api_request(
    request_func: Callable,
    endpoint: str,
    payload: Optional[Dict[str, Any]] = None,
    headers: Optional[Dict[str, str]] = None,
    error_message: str = "API request failed",
    **request_kwargs
) -> requests.Response:
    """
    Handle an API request with error handling.

    Args:
        request_func: Function to make the API request.
        endpoint: API endpoint.
        payload: Request payload sent as JSON.
        headers: Request headers.
        error_message: Error message to use if the request fails.
        **request_kwargs: Extra keyword arguments for request_func (params, timeout).

    Returns:
        requests.Response: The successful response.

    Raises:
        APIError: If the API request fails.
    """
    response = None
    try:
        response = request_func(
            endpoint,
            json=payload,
            headers=headers,
            **request_kwargs
        )

        response.raise_for_status()
        return response

    except requests.exceptions.HTTPError as e:
        # Mocked HTTPErrors may come without a response attached
        error_response = e.response if getattr(e, 'response', None) is not None else response
        status_code = getattr(error_response, 'status_code', None)
        response_text = getattr(error_response, 'text', str(e))

        logger.error(f"HTTP error: {e}")
        logger.error(f"Response: {str(response_text)[:500]}")

        detail = extract_error_detail(error_response, f"{error_message}: {e}")

        raise APIError(
            message=detail,
            status_code=status_code,
            response=response_text,
            endpoint=endpoint,
            request_data=payload
        )

    except requests.exceptions.ConnectionError as e:
        logger.error(f"Connection error: {e}")

        raise APIError(
            message=f"{error_message}: Connection error",
            endpoint=endpoint,
            request_data=payload
        )

    except requests.exceptions.Timeout as e:
        logger.error(f"Timeout error: {e}")

        raise APIError(
            message=f"{error_message}: Request timed out",
            endpoint=endpoint,
            request_data=payload
        )

    except requests.exceptions.RequestException as e:
        logger.error(f"Request error: {e}")

        raise APIError(
            message=f"{error_message}: {e}",
            endpoint=endpoint,
            request_data=payload
        )

    except Exception as e:
        logger.error(f"Unexpected error: {e}")
        logger.error(traceback.format_exc())

        raise APIError(
            message=f"{error_message}: {e}",
            status_code=getattr(response, 'status_code', None),
            endpoint=endpoint,
            request_data=payload
        )


def validate_configuration(
    config: Dict[str, Any],
    required_keys: List[str],
    component: str = "Unknown"
) -> None:
    """
    Validate that required keys are present and set in the configuration.

    Args:
        config: Configuration to validate.
        required_keys: List of required key names.
        component: Component name for error reporting.

    Raises:
        ConfigurationError: If a required key is missing or empty.
    """
    missing_keys = [key for key in required_keys if not config.get(key)]

    if missing_keys:
        raise ConfigurationError(
            message="Missing required configuration keys",
            component=component,
            missing_keys=missing_keys
        )


def log_api_error(error: APIError) -> None:
    """
    Log an API error with detailed information.

    Args:
        error: API error to log.
    """
    logger.error(f"API Error: {error.message}")

    if error.status_code:
        logger.error(f"Status Code: {error.status_code}")

    if error.endpoint:
        logger.error(f"Endpoint: {error.endpoint}")

    if error.response:
        logger.error(f"Response: {error.response}")

    if error.request_data:
        safe_request_data = error.request_data.copy()

        for key in safe_request_data:
            if "key" in key.lower() or "token" in key.lower() or "secret" in key.lower() or "password" in key.lower():
                safe_request_data[key] = "***REDACTED***"

        logger.error(f"Request Data: {safe_request_data}")


def retry_api_request(
    request_func: Callable,
    endpoint: str,
    payload: Optional[Dict[str, Any]] = None,
    headers: Optional[Dict[str, str]] = None,
    error_message: str = "API request failed",
    max_retries: int = 3,
    retry_delay: int = 1,
    **request_kwargs
) -> requests.Response:
    """
    Retry an API request with exponential backoff.

    Client errors (4xx) are raised immediately; everything else is retried.

    Args:
        request_func: Function to make the API request.
        endpoint: API endpoint.
        payload: Request payload.
        headers: Request headers.
        error_message: Error message to use if the request fails.
        max_retries: Maximum number of attempts.
        retry_delay: Initial delay between retries in seconds.
        **request_kwargs: Extra keyword arguments for request_func.

    Returns:
        requests.Response: The successful response.

    Raises:
        APIError: If the API request fails after all retries.
    """
    retries = 0
    last_error = None

    while retries < max_retries:
        try:
            return handle_api_request(
                request_func,
                endpoint,
                payload,
                headers,
                error_message,
                **request_kwargs
            )
        except APIError as e:
            last_error = e

            if e.status_code and 400 <= e.status_code < 500:
                logger.warning(f"Client error, not retrying: {e}")
                raise

            retries += 1

            if retries < max_retries:
                delay = retry_delay * (2 ** (retries - 1))

                logger.warning(f"API request failed, retrying in {delay} seconds (attempt {retries}/{max_retries})")
                time.sleep(delay)
            else:
                logger.error(f"API request failed after {max_retries} retries")
                raise

    if last_error:
        raise last_error

    raise APIError(
        message=f"{error_message}: Maximum retries exceeded",
        endpoint=endpoint,
        request_data=payload
    )
