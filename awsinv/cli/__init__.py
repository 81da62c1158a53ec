"""
awsinv/cli - Click CLI
"""

from .app import cli, main

__all__ = ["cli", "main"]
