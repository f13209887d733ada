"""
Input validation functions for Ghost MCP Server.

Provides validation for post identifiers, titles and slugs used as local
directory names, so bad input is rejected before any HTTP call or
filesystem write.
"""

import re

# Ghost object ids are 24-character hex ObjectIds
_POST_ID_RE = re.compile(r"^[0-9a-f]{24}$")


def format_validation_error(field_name: str, reason: str) -> str:
    """
    Generate consistent error message for validation failures.

    Args:
        field_name: Human-readable field name (e.g., "Post id")
        reason: Description of validation failure (e.g., "cannot be empty")

    Returns:
        Formatted error message string
    """
    return f"{field_name} {reason}"


def validate_post_id(post_id: str) -> tuple[bool, str]:
    """
    Validate a Ghost post id.

    Returns:
        Tuple of (is_valid, error_message).
        Returns (True, "") if valid, (False, reason) if invalid.
    """
    if not post_id or not post_id.strip():
        return (
            False,
            format_validation_error("Post id", "cannot be empty"),
        )

    if not _POST_ID_RE.match(post_id):
        return (
            False,
            format_validation_error(
                "Post id", f"'{post_id}' is not a 24-character hex id"
            ),
        )

    return (True, "")


def validate_title(title: str) -> tuple[bool, str]:
    """
    Validate a post title.

    Validation rules:
        - Cannot be empty or whitespace-only
        - Cannot exceed 255 characters (Ghost column limit)
    """
    if not title or not title.strip():
        return (
            False,
            format_validation_error("Title", "cannot be empty"),
        )

    if len(title) > 255:
        return (
            False,
            format_validation_error(
                "Title", "exceeds maximum length of 255 characters"
            ),
        )

    return (True, "")


def validate_slug_dirname(slug: str) -> tuple[bool, str]:
    """
    Validate a post slug for use as a local sync directory name.

    Validation rules:
        - Cannot be empty or whitespace-only
        - Cannot be '.' or '..'
        - Cannot contain path separators
    """
    if not slug or not slug.strip():
        return (
            False,
            format_validation_error("Slug", "cannot be empty"),
        )

    if slug in (".", ".."):
        return (
            False,
            format_validation_error("Slug", f"'{slug}' is not a directory name"),
        )

    if "/" in slug or "\\" in slug:
        return (
            False,
            format_validation_error(
                "Slug", f"'{slug}' cannot contain path separators"
            ),
        )

    return (True, "")
