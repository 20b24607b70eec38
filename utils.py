"""Utility functions for the bot."""

import copy
import logging
from typing import Dict, Any, Optional

logger = logging.getLogger(__name__)


def merge_config(defaults: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    """
    Recursively merge a loaded config over its defaults.

    Args:
        defaults: Default configuration dictionary (not modified)
        overrides: Values loaded from config.yml

    Returns:
        New dictionary with every default key present
    """
    merged = copy.deepcopy(defaults)
    for key, value in (overrides or {}).items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge_config(merged[key], value)
        else:
            merged[key] = value
    return merged


def sanitize_text(text: str, max_length: int = 2000) -> str:
    """
    Sanitize user input text.

    Args:
        text: The text to sanitize
        max_length: Maximum allowed length

    Returns:
        Sanitized text
    """
    if not text:
        return ""

    # Truncate to max length
    text = text[:max_length]

    # Remove null bytes
    text = text.replace('\x00', '')

    return text.strip()


def truncate_text(text: str, limit: int = 1024, suffix: str = '...') -> str:
    """
    Truncate text to a specified limit with a suffix.

    Args:
        text: The text to truncate
        limit: Maximum length
        suffix: Suffix to add if truncated

    Returns:
        Truncated text
    """
    if not text:
        return ""

    if len(text) <= limit:
        return text

    return text[:limit - len(suffix)] + suffix


def parse_channel_id(value: Any, name: str = "channel_id") -> Optional[int]:
    """
    Turn a configured Discord channel ID into an int, treating 0 as unset.

    Args:
        value: Raw value from config.yml
        name: Name of the setting (for log messages)

    Returns:
        The channel ID, or None if unset or invalid
    """
    if value in (None, "", 0, "0"):
        return None

    try:
        channel_id = int(value)
    except (TypeError, ValueError):
        logger.error(f"{name} must be an integer, got {value!r}")
        return None

    if channel_id < 0 or channel_id > 2**63:
        logger.error(f"{name} must be a valid Discord ID (got {channel_id})")
        return None

    return channel_id
