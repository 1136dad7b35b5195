"""
Module: utils
Purpose: Shared helper utilities for SKU Folders.
"""

import os
import urllib.parse
from typing import Tuple

from .exceptions import SkuFoldersError

COLOR_RESET = "\033[0m"
BOLD = "\033[1m"


def color_256(code: int) -> str:
    return f"\033[38;5;{code}m"


def human_readable_size(bytes: int) -> str:
    """
    Convert byte size into human-readable string.

    Args:
        bytes: Number of bytes.

    Returns:
        Human-readable string representation.

    Raises:
        None
    """
    thresholds: Tuple[Tuple[str, int], ...] = (("GB", 1024**3), ("MB", 1024**2), ("KB", 1024))
    for suffix, size in thresholds:
        if bytes >= size:
            value = bytes / size
            return f"{value:.2f} {suffix}"
    return f"{bytes} B"


def ensure_directory(path: str):
    """
    Create directory if it does not exist.

    Args:
        path: Directory path to create.

    Returns:
        None

    Raises:
        SkuFoldersError: If the directory cannot be created.
    """
    normalized = os.path.abspath(path)
    try:
        os.makedirs(normalized, exist_ok=True)
    except OSError as exc:
        log_error(f"Failed to create directory: {normalized} ({exc})")
        raise SkuFoldersError(f"Unable to create directory: {normalized}") from exc


def log_error(message: str):
    """
    Log an error message.

    Args:
        message: Error message to log.

    Returns:
        None

    Raises:
        None
    """
    from . import reporting  # Local import to avoid circular dependency rules

    reporting.write_log([f"[ERROR] {message}"])


def log_warning(message: str):
    """
    Log a warning message.

    Args:
        message: Warning message to log.

    Returns:
        None
    """
    from . import reporting  # Local import to avoid circular dependency rules

    reporting.write_log([f"[WARNING] {message}"])


def log_info(message: str):
    """
    Log an informational message.
    """
    from . import reporting  # Local import to avoid circular dependency rules

    reporting.write_log([f"[INFO] {message}"])


def osc8_link(path: str, label: str | None = None) -> str:
    """
    Build an OSC-8 hyperlink escape for supported terminals.

    Args:
        path: Target path or URL.
        label: Optional label; defaults to path.

    Returns:
        String containing OSC-8 wrapped label.

    Raises:
        None
    """

    abs_path = os.path.abspath(path)
    uri = "file://" + urllib.parse.quote(abs_path)
    display = label if label is not None else abs_path
    # OSC 8: ESC ] 8 ; ; URI BEL  label  ESC ] 8 ; ; BEL
    return f"\033]8;;{uri}\a{display}\033]8;;\a"
