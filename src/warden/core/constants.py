"""Package-wide constants.

This module defines constants used throughout the package
to avoid magic numbers and ensure consistency.
"""

# Slugs
MAX_SLUG_LENGTH = 100

# String field lengths
MAX_ROLE_NAME_LENGTH = 100
MAX_PERMISSION_NAME_LENGTH = 150
MAX_DESCRIPTION_LENGTH = 255
MAX_USER_ID_LENGTH = 64

# Separators replaced by spaces when deriving display names from slugs
SLUG_SEPARATORS = ("-", "_")

# Gate
FORBIDDEN_MESSAGE = "Unauthorized action."
