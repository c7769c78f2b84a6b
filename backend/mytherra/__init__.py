"""Mytherra: a tick-driven fantasy world with a divine betting market."""

__version__ = "0.1.0"
__author__ = "Mytherra Team"

__all__ = ["__version__", "__author__"]
