"""
Hackboard API package.

Provides the FastAPI application for the Hackboard account service.
"""

from .app import app, create_app

__all__ = ["app", "create_app"]
