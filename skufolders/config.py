"""
Module: config
Purpose: Naming and preview configuration resolved from CLI, environment and defaults.
"""

import os
from dataclasses import dataclass

from .exceptions import ConfigError
from .utils import log_warning

DEFAULT_PREFIX = "eci"
DEFAULT_THUMBNAIL_WIDTH = 280
MIN_THUMBNAIL_WIDTH = 180
MAX_THUMBNAIL_WIDTH = 500
PREFIX_ENV = "SKUFOLDERS_PREFIX"
THUMB_WIDTH_ENV = "SKUFOLDERS_THUMB_WIDTH"


@dataclass
class NamingConfig:
    """
    Global export naming settings.

    default_prefix is read when an export is planned, never copied onto
    items, so changing it affects every item without an override.
    """

    default_prefix: str = DEFAULT_PREFIX
    thumbnail_width: int = DEFAULT_THUMBNAIL_WIDTH
    prefix_source: str = "default"
    thumbnail_width_source: str = "default"


def validate_thumbnail_width(value: int) -> int:
    if value < MIN_THUMBNAIL_WIDTH or value > MAX_THUMBNAIL_WIDTH:
        raise ConfigError(
            f"Thumbnail width must be between {MIN_THUMBNAIL_WIDTH} and {MAX_THUMBNAIL_WIDTH} pixels."
        )
    return value


def _resolve_thumbnail_width(cli_override: int | None) -> tuple[int, str]:
    if cli_override is not None:
        return validate_thumbnail_width(cli_override), "cli"
    env_value = os.getenv(THUMB_WIDTH_ENV)
    if env_value:
        try:
            return validate_thumbnail_width(int(env_value)), "env"
        except (ValueError, ConfigError):
            log_warning(
                f"Ignoring invalid {THUMB_WIDTH_ENV} value '{env_value}'. "
                f"Expected integer between {MIN_THUMBNAIL_WIDTH} and {MAX_THUMBNAIL_WIDTH}."
            )
    return DEFAULT_THUMBNAIL_WIDTH, "default"


def configure_naming(
    cli_prefix: str | None = None,
    cli_thumbnail_width: int | None = None,
) -> NamingConfig:
    """
    Determine the effective naming configuration.
    Preference order: CLI override > environment variable > default.

    Args:
        cli_prefix: Prefix given on the command line (may be "").
        cli_thumbnail_width: Preview width given on the command line.

    Returns:
        NamingConfig with the source of each value recorded.

    Raises:
        ConfigError: If the CLI thumbnail width is out of range.
    """
    if cli_prefix is not None:
        prefix, prefix_source = cli_prefix, "cli"
    elif os.getenv(PREFIX_ENV) is not None:
        prefix, prefix_source = os.environ[PREFIX_ENV], "env"
    else:
        prefix, prefix_source = DEFAULT_PREFIX, "default"

    width, width_source = _resolve_thumbnail_width(cli_thumbnail_width)
    return NamingConfig(
        default_prefix=prefix,
        thumbnail_width=width,
        prefix_source=prefix_source,
        thumbnail_width_source=width_source,
    )
