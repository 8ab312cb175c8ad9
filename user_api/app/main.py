"""
Main entrypoint for the User API.

This module assembles the FastAPI application: it sets up logging,
builds the store, the user handler and the request logger once, and
mounts the user routes under the configured prefix.  ``create_app``
builds and configures the app, which is then instantiated at module
import time as ``app``, e.g.::

    uvicorn user_api.app.main:app --reload

The application title and version are provided via ``Settings`` from
``core.config``.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI

from .api.v1.router import build_router
from .core.config import Settings, settings as default_settings
from .core.db import get_database_path, init_db
from .core.logging_config import REQUEST_CHANNEL, setup_logging
from .core.request_logging import RequestLogger
from .services.user_handler import UserHandler
from .services.user_store import UserStore


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Create and configure a FastAPI application.

    Parameters
    ----------
    settings : Optional[Settings]
        Configuration to use.  Defaults to the module-level settings read
        from the environment.

    Returns
    -------
    FastAPI
        A configured FastAPI application instance.  The database schema
        is migrated when the application starts.
    """
    settings = settings or default_settings
    # Initialise logging before anything else so that the components
    # built below can log.
    setup_logging(settings.log_level, settings.log_file, settings.request_log_file)

    database_path = get_database_path(settings.database_url)
    store = UserStore(database_path)
    handler = UserHandler(store, validation_message=settings.validation_message)
    request_logger = RequestLogger(logging.getLogger(REQUEST_CHANNEL))

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        # Creates the database file if it does not exist and brings the
        # schema up to date before the first request is served.
        init_db(database_path)
        logging.getLogger(__name__).info("Database ready at %s", database_path)
        yield

    app = FastAPI(
        title=settings.project_name,
        version=settings.api_version,
        debug=settings.debug,
        lifespan=lifespan,
    )

    app.include_router(
        build_router(handler, request_logger, settings.validation_message),
        prefix=settings.api_prefix,
    )

    return app


# Create the application instance at import time so that tools such as
# uvicorn can discover it without calling create_app manually.
app = create_app()
