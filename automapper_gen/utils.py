"""
Utility functions for the automapper generator.
"""

POINTER_SIGIL = "*"
SEQUENCE_SIGIL = "[]"


def snake_to_camel(text: str) -> str:
    """Convert a delimiter-segmented name to concatenated-capitalized form.

    Each underscore-separated segment gets its first letter upper-cased; the
    rest of the segment is left untouched.

    Examples:
        "user_name" -> "UserName"
        "created_at" -> "CreatedAt"
        "id" -> "Id"
        "http_status_code" -> "HttpStatusCode"

    Args:
        text: The name to convert

    Returns:
        The transliterated name
    """
    parts = text.split("_")
    return "".join(part[:1].upper() + part[1:] for part in parts)


def unqualified_name(type_name: str) -> str:
    """Return the trailing segment of a module-qualified name (``db.User`` -> ``User``)."""
    if "." in type_name:
        return type_name.split(".")[-1]
    return type_name


def qualifier(type_name: str) -> str:
    """Return the module qualifier of a type name, or an empty string."""
    if "." in type_name:
        return type_name.split(".")[0]
    return ""
