"""HTTP surface for Mytherra."""

from .server import create_app

__all__ = ["create_app"]
