"""Branch name normalization into Kubernetes label values."""

import re

MAX_LABEL_LENGTH = 63

_INVALID_CHARS = re.compile(r"[^a-z0-9]")
_SLUG_PATTERN = re.compile(r"^[a-z0-9]([a-z0-9-]{0,61}[a-z0-9])?$")


def slug(name: str, max_len: int = MAX_LABEL_LENGTH) -> str:
    """Normalize a branch name into a label-safe identifier.

    The name is lowercased and every character outside ``[a-z0-9]`` becomes
    ``-``. Leading separators are dropped, a leading digit gets a ``v``
    prefix, and the transformed string is truncated to ``max_len`` before
    trailing separators are removed.

    Args:
        name: Branch name as it exists in source control
        max_len: Maximum length of the result (default: 63)

    Returns:
        Slug matching the label value grammar, or an empty string when the
        name has no alphanumeric characters

    Examples:
        >>> slug("Feature/ABC-123")
        'feature-abc-123'
        >>> slug("123-release")
        'v123-release'
        >>> slug("main--")
        'main'
    """
    value = _INVALID_CHARS.sub("-", name.lower()).lstrip("-")
    if value[:1].isdigit():
        value = f"v{value}"
    # Length is measured on the transformed value, after the "v" prefix.
    return value[:max_len].rstrip("-")


def is_valid_slug(value: str) -> bool:
    """Check whether a value satisfies the label value grammar.

    Args:
        value: Candidate label value

    Returns:
        True if value is empty or a valid label value of at most 63 characters
    """
    return value == "" or bool(_SLUG_PATTERN.match(value))
