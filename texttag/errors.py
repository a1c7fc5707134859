"""
Error types raised across the tagging pipeline.
"""


class TextTagError(Exception):
    """Base class for all pipeline failures."""


class InputError(TextTagError):
    """Missing or unreadable source image, or an unusable crop."""


class ProcessingError(TextTagError):
    """An OpenCV call failed (e.g. malformed image data)."""


class ExportError(TextTagError):
    """Nothing to export, or image dimensions are unavailable."""
