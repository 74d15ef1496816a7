"""
Skin Advisor Application

This is the main application package for the Skin Advisor API.
"""

# Import the FastAPI app instance
from .main import app

__version__ = "1.0.0"
__all__ = ["app"]
