"""Command-line interface for the BIOS manager."""

from .main import app

__all__ = ["app"]
