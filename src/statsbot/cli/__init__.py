"""
Command-line interface for the statsbot package.

This module provides the main CLI entry point for the polling service.
"""

from .main import main_cli

__all__ = [
    "main_cli",
]
