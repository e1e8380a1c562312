"""Exceptions raised by the editing engine."""


class EditingError(Exception):
    """Base class for editing failures."""
    pass


class DegenerateRegionError(EditingError):
    """Raised when a crop region has no area, before any extraction."""
    pass


class RasterDecodeError(EditingError):
    """Raised when encoded image bytes cannot be decoded into a raster."""
    pass
