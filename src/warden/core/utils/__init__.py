"""Small helpers shared across the package."""

from warden.core.utils.text import humanize_slug


__all__ = [
    "humanize_slug",
]
