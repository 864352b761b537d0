"""JSON API over the local suggestion store."""

from .app import create_app

__all__ = ["create_app"]
