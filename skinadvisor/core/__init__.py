"""
Core package for the skin advisor application.

This package contains configuration and startup helpers that are used
throughout the application.
"""

from .config import settings  # noqa: F401

__all__ = ['settings']
