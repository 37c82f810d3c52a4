"""HTTP surface over the rules engine."""

from .main import create_app

__all__ = ["create_app"]
