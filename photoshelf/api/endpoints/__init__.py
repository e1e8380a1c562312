"""API route modules."""

from photoshelf.api.endpoints import auth, health, images

__all__ = ["auth", "health", "images"]
