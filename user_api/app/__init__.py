"""
Application package.

The API is split into ``core`` (configuration, database, logging),
``schemas`` (pydantic models), ``services`` (store, validation and user
operations) and ``api`` (versioned routes).
"""

from .main import app  # noqa: F401
