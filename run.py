"""Entry point for the User API.

Serves the FastAPI application with uvicorn.  It is intended to be
executed from the project root, for example in Docker where you only
specify a single Python file to run.

Host, port, database location and log settings are read from environment
variables (see ``user_api/app/core/config.py``).

Usage:
    python run.py
"""
import asyncio

from uvicorn import Config, Server

from user_api.app.core.config import settings
from user_api.app.main import app


async def main() -> None:
    """Start the API server using Uvicorn."""
    config = Config(
        app=app,
        host=settings.host,
        port=settings.port,
        reload=False,
        log_level=settings.log_level.lower(),
    )
    server = Server(config)
    await server.serve()


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except (KeyboardInterrupt, SystemExit):
        pass
