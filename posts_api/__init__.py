"""
Top-level package for the Posts API.

All functionality lives in submodules under ``app``; the application
itself is built by ``posts_api.app.main.create_app``.
"""

__all__ = []
