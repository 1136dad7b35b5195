"""
Module: keys
Purpose: Derive a group key (SKU or base name) from an image filename.
"""

import re

UNIDENTIFIED_GROUP = "Unidentified"

SKU_PATTERN = re.compile(r"[0-9]{6}-[0-9]{5}-[0-9]{3}")
_PAREN_SUFFIX = re.compile(r"\s*\([^)]*\)$")
_NUMERIC_SUFFIX = re.compile(r"[-_][0-9]+$|[-_]$")


def strip_extension(filename: str) -> str:
    """
    Drop the final "." and everything after it, then trim surrounding
    whitespace. A name without a "." is all extension and yields "".
    """
    stem, _, _ = filename.rpartition(".")
    return stem.strip()


def strip_numeric_suffixes(name: str) -> str:
    """
    Repeatedly remove one trailing "-<digits>", "_<digits>" or lone "-"/"_".

    Every pass either shortens the string or stops, so the loop runs at
    most len(name) times.
    """
    while name:
        stripped = _NUMERIC_SUFFIX.sub("", name, count=1)
        if stripped == name:
            break
        name = stripped
    return name


def extract_key(filename: str) -> str:
    """
    Compute the group key for a filename.

    Args:
        filename: Original filename (no directory part).

    Returns:
        The structured SKU code when present, otherwise the base name with
        copy markers and numeric suffixes removed. Returns "" when nothing
        usable remains; callers substitute UNIDENTIFIED_GROUP.

    Raises:
        None
    """
    match = SKU_PATTERN.search(filename)
    if match:
        return match.group(0)

    base = strip_extension(filename)
    name = _PAREN_SUFFIX.sub("", base, count=1)
    name = strip_numeric_suffixes(name)
    return name or base


def group_key_for(filename: str) -> str:
    return extract_key(filename) or UNIDENTIFIED_GROUP
