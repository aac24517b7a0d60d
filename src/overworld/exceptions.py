"""Custom exceptions for world generation."""


class OverworldError(Exception):
    """Base exception for overworld errors."""

    pass


class MapFormatError(OverworldError, ValueError):
    """Raised when a saved world file is missing data or is malformed."""

    pass
