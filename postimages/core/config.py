"""
Configuration management utilities for the postimages package.

This module provides functions for loading and accessing configuration settings.
It handles default configurations, user-specific overrides, and the process
environment.

Configuration Hierarchy:
1. Default configuration (postimages/core/default_config.json) - Base settings for all installations
2. User configuration (~/.postimages/config.json) - User-specific overrides that persist across runs
3. Runtime overrides - Temporary changes made during program execution via set_config_value()

Environment variables (optionally loaded from a .env file) take precedence over
the configuration files for the few settings that are deployment specific:
- APP_ENV: the deployment environment ("production", "development", ...)
- FASTAPI_URL: base URL of the image generation backend
"""

import os
import json
from typing import Dict, Any, Optional

from dotenv import load_dotenv

from postimages.core.constants import APP_ENV_VAR, DEFAULT_ENVIRONMENT
from postimages.core.logging_config import get_logger

logger = get_logger(__name__)

# Load environment variables from .env file if it exists
load_dotenv()

# Default configuration paths
DEFAULT_CONFIG_PATH = os.path.join(os.path.dirname(__file__), "default_config.json")
USER_CONFIG_PATH = os.path.expanduser("~/.postimages/config.json")

# Configuration singleton
_config_cache = {}

def get_config(reload: bool = False) -> Dict[str, Any]:
    """
    Get the configuration dictionary, loading it if necessary.

    Args:
        reload (bool): Force reload the configuration even if cached

    Returns:
        Dict[str, Any]: The configuration dictionary
    """
    global _config_cache

    if not _config_cache or reload:
        _config_cache = load_config()

    return _config_cache

def load_config() -> Dict[str, Any]:
    """
    Load configuration from default and user-specific files.

    The configuration is loaded in a hierarchical manner:
    1. Start with an empty configuration
    2. Load and apply the default configuration from DEFAULT_CONFIG_PATH
    3. If a user configuration exists at USER_CONFIG_PATH, load and deep merge it
       with the default configuration, allowing partial overrides. A user file
       that cannot be read or is not a JSON object is logged and skipped

    Returns:
        Dict[str, Any]: The merged configuration dictionary
    """
    config = {}

    if os.path.exists(DEFAULT_CONFIG_PATH):
        with open(DEFAULT_CONFIG_PATH, 'r') as f:
            config.update(json.load(f))

    if os.path.exists(USER_CONFIG_PATH):
        try:
            with open(USER_CONFIG_PATH, 'r') as f:
                user_config = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable user configuration {USER_CONFIG_PATH}: {e}")
            return config

        if isinstance(user_config, dict):
            deep_merge(config, user_config)
        else:
            logger.warning(f"Ignoring user configuration {USER_CONFIG_PATH}: not a JSON object")

    return config

def deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> None:
    """
    Recursively merge override dictionary into base dictionary.

    - If a key exists in both dictionaries and both values are dictionaries,
      recursively merge those dictionaries
    - Otherwise, the value from the override dictionary takes precedence

    Args:
        base (Dict[str, Any]): Base dictionary to be updated
        override (Dict[str, Any]): Dictionary with values to override
    """
    for key, value in override.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            deep_merge(base[key], value)
        else:
            base[key] = value

def save_user_config(config: Dict[str, Any]) -> None:
    """
    Save user configuration to the user config file.

    The saved file is merged with the default configuration on the next load,
    so it only needs to hold the sections being overridden.

    Args:
        config (Dict[str, Any]): Configuration dictionary to save
    """
    os.makedirs(os.path.dirname(USER_CONFIG_PATH), exist_ok=True)

    with open(USER_CONFIG_PATH, 'w') as f:
        json.dump(config, f, indent=2)

    global _config_cache
    _config_cache = load_config()

def get_config_value(key: str, default: Any = None) -> Any:
    """
    Get a specific configuration value by key.

    Dot notation accesses nested values, e.g. 'backend.timeout' reads
    config['backend']['timeout']. A missing key at any level, or an explicit
    null, returns the default.

    Examples:
        >>> get_config_value('backend.timeout', 10)
        30

        >>> get_config_value('nonexistent.key', 'default-value')
        'default-value'

    Args:
        key (str): The configuration key (can use dot notation for nested keys)
        default (Any): Default value if key is not found

    Returns:
        Any: The configuration value or default
    """
    config = get_config()

    current = config
    for part in key.split('.'):
        if isinstance(current, dict) and part in current:
            current = current[part]
        else:
            return default

    return default if current is None else current

def set_config_value(key: str, value: Any, save: bool = True) -> None:
    """
    Set a specific configuration value by key.

    Intermediate dictionaries are created as needed. With save=False the change
    only lives for the current process.

    Examples:
        >>> set_config_value('backend.url', 'http://localhost:8000', save=False)

    Args:
        key (str): The configuration key (can use dot notation for nested keys)
        value (Any): The value to set
        save (bool): Whether to save the updated configuration to disk
    """
    config = get_config()

    parts = key.split('.')
    current = config

    # Navigate to the deepest dict
    for part in parts[:-1]:
        if part not in current or not isinstance(current[part], dict):
            current[part] = {}
        current = current[part]

    current[parts[-1]] = value

    global _config_cache
    _config_cache = config

    if save:
        save_user_config(config)

def get_environment() -> str:
    """
    Get the name of the deployment environment.

    Returns:
        str: APP_ENV if set, otherwise the configured environment
    """
    return os.environ.get(APP_ENV_VAR) or get_config_value("environment", DEFAULT_ENVIRONMENT)

def is_production() -> bool:
    """
    Check whether the package runs in a production environment.

    Returns:
        bool: True if the environment name is "production"
    """
    return get_environment().lower() == "production"

def get_env_value(name: str, config_key: Optional[str] = None, default: Any = None) -> Any:
    """
    Get a deployment setting from the environment, falling back to configuration.

    Args:
        name (str): Environment variable name
        config_key (str, optional): Configuration key used when the variable is unset
        default (Any): Default value if neither source provides one

    Returns:
        Any: The resolved value
    """
    value = os.environ.get(name)
    if value:
        return value

    if config_key:
        return get_config_value(config_key, default)

    return default
