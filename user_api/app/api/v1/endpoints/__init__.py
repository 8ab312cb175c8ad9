"""
Endpoint functions for API v1.

Endpoints here are plain coroutines taking a ``UserHandler`` and a
``Call``; ``router.py`` decides which one serves which method and path.
"""
