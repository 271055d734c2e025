"""Credential lifecycle and authorization engine.

``from authcore import create_app`` builds the Flask application.
"""

from __future__ import annotations

from .factory import create_app

__all__ = ["create_app"]
