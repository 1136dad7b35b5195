"""
Module: cli_formatter
Purpose: Centralized CLI formatting utilities for SKU Folders output.
"""

from __future__ import annotations

import os
import sys
import textwrap
from dataclasses import dataclass
from typing import TextIO

from .utils import BOLD, COLOR_RESET, color_256, osc8_link

DEFAULT_LINE_WIDTH = 96
DEFAULT_KV_WIDTH = 24
PRIMARY_INDENT = "  "
BULLET_INDENT = f"{PRIMARY_INDENT}- "
THEME_ENV = "SKUFOLDERS_THEME"
THEME_PALETTES: dict[str, dict[str, int]] = {
    "light": {
        "primary": 74,
        "accent": 141,
        "ok": 64,
        "warn": 221,
        "error": 160,
        "link": 33,
        "muted": 243,
    },
    "dark": {
        "primary": 75,
        "accent": 105,
        "ok": 64,
        "warn": 221,
        "error": 160,
        "link": 33,
        "muted": 245,
    },
}


@dataclass
class FormatterConfig:
    """
    Configuration options governing CLIFormatter output.
    """

    use_color: bool = True
    unicode_enabled: bool = True
    plain_mode: bool = False
    osc8_links: bool = True
    theme: str = "dark"


class CLIFormatter:
    """
    Render SKU Folders CLI output via a centralized contract.
    """

    def __init__(
        self,
        config: FormatterConfig | None = None,
        stream: TextIO | None = None,
    ) -> None:
        self.config = config or FormatterConfig()
        self.stream = stream or sys.stdout
        self.line_width = DEFAULT_LINE_WIDTH
        self.palette = _resolve_palette(self.config.theme)

    def line(self, text: str = "") -> None:
        """Print a plain line."""
        self._write(text)

    def blank(self) -> None:
        """Print an empty line."""
        self._write("")

    def section(self, title: str) -> None:
        """Print a section heading."""
        icon = ">" if self.config.plain_mode or not self.config.unicode_enabled else "◆"
        self.blank()
        self._write(self._style(f"{icon} {title}", self.palette["primary"], bold=True))

    def success(self, text: str) -> None:
        self._write(self._style(text, self.palette["ok"], bold=True))

    def warning(self, text: str) -> None:
        self._write(self._style(text, self.palette["warn"], bold=True))

    def error(self, text: str) -> None:
        self._write(self._style(text, self.palette["error"], bold=True))

    def muted(self, text: str) -> None:
        self._write(self._style(text, self.palette["muted"]))

    def kv(self, label: str, value: str, width: int = DEFAULT_KV_WIDTH) -> None:
        """Print an aligned key/value line, wrapping long values."""
        prefix = f"{PRIMARY_INDENT}{label:<{width}} : "
        available = self.line_width - len(prefix)
        wrapped = textwrap.wrap(value, width=available) if available >= 10 else [value]
        for index, chunk in enumerate(wrapped or [""]):
            self._write((prefix if index == 0 else " " * len(prefix)) + chunk)

    def bullet(self, text: str) -> None:
        self._write(f"{BULLET_INDENT}{text}")

    def link(self, path: str, label: str | None = None) -> str:
        """Return a styled hyperlink for capable terminals."""
        target = label or path
        if not self.config.osc8_links or not self.config.use_color or self.config.plain_mode:
            return target
        return self._style(osc8_link(path, target), self.palette["link"])

    def _write(self, text: str) -> None:
        self.stream.write(text + "\n")

    def _style(self, text: str, color: str | None = None, bold: bool = False) -> str:
        if not self.config.use_color or not text:
            return text
        prefix = (BOLD if bold else "") + (color or "")
        if not prefix:
            return text
        return f"{prefix}{text}{COLOR_RESET}"


def detect_terminal_capabilities(
    *,
    plain_mode: bool = False,
    no_color_flag: bool = False,
    stdout_isatty: bool | None = None,
    theme_preference: str | None = None,
) -> FormatterConfig:
    """
    Determine formatter configuration based on flags and environment cues.
    """
    if stdout_isatty is None:
        stdout_isatty = sys.stdout.isatty()
    theme = _resolve_theme(theme_preference)
    if plain_mode or not stdout_isatty:
        return FormatterConfig(
            use_color=False,
            unicode_enabled=False,
            plain_mode=True,
            osc8_links=False,
            theme=theme,
        )
    term = os.environ.get("TERM", "").lower()
    use_color = not no_color_flag and not os.environ.get("NO_COLOR") and term != "dumb"
    return FormatterConfig(
        use_color=use_color,
        unicode_enabled=term != "dumb" and _supports_unicode(),
        plain_mode=False,
        osc8_links=use_color,
        theme=theme,
    )


def _resolve_theme(theme_preference: str | None) -> str:
    theme_value = theme_preference or os.environ.get(THEME_ENV, "dark")
    theme = theme_value.strip().lower()
    if theme in THEME_PALETTES:
        return theme
    return "dark"


def _resolve_palette(theme: str) -> dict[str, str]:
    palette = THEME_PALETTES.get(theme, THEME_PALETTES["dark"])
    return {key: color_256(code) for key, code in palette.items()}


def _supports_unicode() -> bool:
    encoding = getattr(sys.stdout, "encoding", None)
    if not encoding:
        return False
    try:
        "◆".encode(encoding)
        return True
    except UnicodeEncodeError:
        return False
