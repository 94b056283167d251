"""
CareMatch HTTP API

Flask application exposing the carematch services under /api.
"""

from .app import create_app

__all__ = ["create_app"]
