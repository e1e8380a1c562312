"""PhotoShelf: personal photo library API with non-destructive editing."""

__version__ = "0.1.0"
