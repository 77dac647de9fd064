"""HTTP backend exposing the layout engine."""

from .main import app, create_app

__all__ = ["app", "create_app"]
