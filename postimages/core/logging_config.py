"""
Logging configuration for the postimages package.

This module provides logging configuration for the postimages package:
- Configurable log levels
- File and console logging
- Log rotation
- Redaction of sensitive request data
"""

import os
import sys
import logging
import logging.handlers
from typing import Dict, Any, Optional

def configure_logging(
    level: Optional[str] = None,
    log_file: Optional[str] = None,
    log_format: Optional[str] = None,
    log_to_console: bool = True,
    log_to_file: Optional[bool] = None,
    max_bytes: int = 10485760,  # 10MB
    backup_count: int = 5
) -> None:
    """
    Configure global logging settings.

    Any argument left as None is read from the "logging" configuration section.

    Args:
        level (str, optional): Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file (str, optional): Path to log file
        log_format (str, optional): Log message format
        log_to_console (bool): Whether to log to console
        log_to_file (bool, optional): Whether to log to file
        max_bytes (int): Maximum log file size before rotation
        backup_count (int): Number of backup log files to keep
    """
    from postimages.core.config import get_config_value

    if level is None:
        level = get_config_value("logging.level", "INFO")

    if log_file is None:
        log_file = get_config_value("logging.file", "postimages.log")

    if log_format is None:
        log_format = get_config_value(
            "logging.format",
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )

    if log_to_file is None:
        log_to_file = get_config_value("logging.to_file", False)

    root_logger = logging.getLogger()

    level_map = {
        "DEBUG": logging.DEBUG,
        "INFO": logging.INFO,
        "WARNING": logging.WARNING,
        "ERROR": logging.ERROR,
        "CRITICAL": logging.CRITICAL
    }
    root_logger.setLevel(level_map.get(level.upper(), logging.INFO))

    # Remove existing handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    formatter = logging.Formatter(log_format)

    if log_to_console:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

    if log_to_file and log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir and not os.path.exists(log_dir):
            os.makedirs(log_dir, exist_ok=True)

        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=max_bytes,
            backupCount=backup_count
        )
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

def get_logger(name: str) -> logging.Logger:
    """
    Get a logger with the specified name.

    Args:
        name (str): Logger name

    Returns:
        logging.Logger: Logger instance
    """
    return logging.getLogger(name)

def log_api_request(logger: logging.Logger, api_name: str, endpoint: str, params: Dict[str, Any]) -> None:
    """
    Log API request information.

    Args:
        logger (logging.Logger): Logger instance
        api_name (str): API name
        endpoint (str): API endpoint
        params (Dict[str, Any]): Request parameters (sensitive data is redacted)
    """
    redacted_params = redact_sensitive_data(params)

    logger.info(f"API Request to {api_name} - {endpoint}:")
    for key, value in redacted_params.items():
        logger.info(f"  {key}: {value}")

def log_api_response(logger: logging.Logger, api_name: str, status_code: int, response_data: Any) -> None:
    """
    Log API response information.

    Args:
        logger (logging.Logger): Logger instance
        api_name (str): API name
        status_code (int): Response status code
        response_data (Any): Response data
    """
    logger.info(f"API Response from {api_name} - Status: {status_code}")

    # Log response data (truncate if too large)
    if isinstance(response_data, dict):
        for key, value in response_data.items():
            if isinstance(value, (dict, list)) and len(str(value)) > 1000:
                logger.info(f"  {key}: [truncated data]")
            else:
                logger.info(f"  {key}: {value}")

def redact_sensitive_data(data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Redact sensitive information from data.

    Args:
        data (Dict[str, Any]): Data to redact

    Returns:
        Dict[str, Any]: Redacted data
    """
    redacted = data.copy()

    sensitive_keys = [
        "api_key", "key", "secret", "password", "token", "auth", "credential",
        "client_id", "client_secret", "access_token", "refresh_token"
    ]

    for key, value in redacted.items():
        if any(sensitive_key in key.lower() for sensitive_key in sensitive_keys):
            redacted[key] = "********"
        elif isinstance(value, dict):
            redacted[key] = redact_sensitive_data(value)

    return redacted
