"""Text processing utilities."""

from warden.core.constants import SLUG_SEPARATORS


def humanize_slug(slug: str) -> str:
    """Derive a display name from a slug.

    Separator characters become spaces and only the first character
    is uppercased, the rest of the string is left untouched.

    Examples:
        >>> humanize_slug("edit-posts")
        'Edit posts'
        >>> humanize_slug("manage_API_keys")
        'Manage API keys'
    """
    name = slug
    for separator in SLUG_SEPARATORS:
        name = name.replace(separator, " ")
    return name[:1].upper() + name[1:]
