"""
Module: exceptions
Purpose: Custom exception hierarchy for SKU Folders.
"""


class SkuFoldersError(Exception):
    """Base exception for SKU Folders."""

    pass


class InputError(SkuFoldersError):
    pass


class ArchiveDecodeError(SkuFoldersError):
    pass


class ExportError(SkuFoldersError):
    pass


class PreviewError(SkuFoldersError):
    pass


class PreviewReleasedError(PreviewError):
    pass


class ConfigError(SkuFoldersError):
    pass
