"""HTTP surface for Introspector."""

from .app import create_app

__all__ = ["create_app"]
