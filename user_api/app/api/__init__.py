"""
API package containing versioned routes.

A version subpackage exposes ``build_router``, which creates the router
for all of its endpoints.
"""
