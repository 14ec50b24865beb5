"""Shared validators for Pydantic config models.

This module provides common validation utilities that reduce code
duplication across configuration models:
- String list normalization (extensions, schemes)
"""


def normalize_string_list(values: list[str], prefix: str = "") -> list[str]:
    """Normalize a list of strings: lowercase, strip, dedupe, keep order.

    Args:
        values: Strings to normalize
        prefix: Prefix that every entry must carry (added if missing)

    Returns:
        Normalized list without empty entries
    """
    seen: set[str] = set()
    result: list[str] = []
    for raw in values:
        item = raw.strip().lower()
        if not item:
            continue
        if prefix and not item.startswith(prefix):
            item = f"{prefix}{item}"
        if item not in seen:
            seen.add(item)
            result.append(item)
    return result


def normalize_schemes(values: list[str]) -> list[str]:
    """Normalize URL schemes (strip trailing ':' and '//').

    Args:
        values: Schemes such as "https", "blob:", "http://"

    Returns:
        Lowercase bare scheme names
    """
    return normalize_string_list([v.split(":", 1)[0] for v in values])
