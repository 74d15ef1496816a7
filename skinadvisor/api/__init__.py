"""
API package

This package contains the HTTP routers for the application.
"""
