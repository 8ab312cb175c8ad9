"""
Top-level package for the User API.

All functionality lives in submodules under ``app``; import the ASGI
application as ``user_api.app.main:app``.
"""

__all__ = []
