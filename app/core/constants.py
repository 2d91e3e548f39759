"""Application-wide constants.

This module centralizes magic numbers that are shared across modules.
For environment-specific configuration, see config.py.
"""

# =============================================================================
# Pagination Defaults
# =============================================================================

# Default page size for conversation messages
CONVERSATION_MESSAGES_PAGE_SIZE: int = 50

# Default page size for the post feed
FEED_PAGE_SIZE: int = 50

# Maximum page size to prevent abuse
MAX_PAGE_SIZE: int = 200

# =============================================================================
# Accounts
# =============================================================================

NAME_MAX_LENGTH: int = 50
PASSWORD_MIN_LENGTH: int = 6

# =============================================================================
# Realtime event names (socket sink)
# =============================================================================

EVENT_NEW_MESSAGE: str = "new_message"
EVENT_MESSAGE_READ: str = "message_read"
EVENT_FOLLOW_REQUEST: str = "follow_request"
EVENT_FOLLOW_ACCEPTED: str = "follow_accepted"
