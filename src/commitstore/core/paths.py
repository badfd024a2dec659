"""Identifier sanitizing for names that become directory components."""

import os


def sanitize(raw: str) -> str:
    """Strip path separators and parent-directory tokens from a name.

    Separators go first so that their removal cannot join dots into a new
    "..", as in "./.". This is a filter, not a validator: the result may be
    empty and callers must check for that themselves.

    Args:
        raw: User-supplied identifier

    Returns:
        The identifier with every os.sep and ".." removed
    """
    cleaned = raw.replace(os.sep, "")
    return cleaned.replace("..", "")
