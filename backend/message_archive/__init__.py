"""Expose the application factory at package level.

``from message_archive import create_app`` is the entry point used by
``flask --app message_archive`` and by the test suite.
"""

from __future__ import annotations

from .factory import create_app

__all__ = ["create_app"]
