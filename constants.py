"""
Global constants for the Segvento suggestion bot.

Contains Discord API limits, suggestion defaults, and other constant values
used throughout the bot and branches.
"""

# ============================================================================
# Discord API Limits
# ============================================================================

# Embed Limits (from Discord API documentation)
EMBED_DESCRIPTION_MAX = 4096
EMBED_FOOTER_MAX = 2048

# Threads
THREAD_AUTO_ARCHIVE_ONE_DAY = 1440  # minutes

# ============================================================================
# Segvento Constants
# ============================================================================

# Branch Configuration
BRANCH_CONFIG_FILE = "config.yml"

# Logging
LOG_FORMAT = '%(asctime)s [%(levelname)s] %(name)s: %(message)s'
LOG_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

# Suggestions
SUGGESTION_ID_LENGTH = 8  # hex characters kept from a random UUID4

# Default embed colors
COLOR_PENDING = 0xFFFF00
COLOR_APPROVED = 0x00FF00
COLOR_DENIED = 0xFF0000
COLOR_CONFIG = 0x0000FF
COLOR_INFO = 0x7289DA

# ============================================================================
# Helper Functions
# ============================================================================

def truncate_for_embed_description(text: str, suffix: str = "...") -> str:
    """
    Truncate text to fit in an embed description.

    Args:
        text: Text to truncate
        suffix: Suffix to add if truncated (default: "...")

    Returns:
        Truncated text that fits within EMBED_DESCRIPTION_MAX
    """
    if not text:
        return ""

    if len(text) <= EMBED_DESCRIPTION_MAX:
        return text

    return text[:EMBED_DESCRIPTION_MAX - len(suffix)] + suffix
