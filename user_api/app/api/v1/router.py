"""
Top-level router for version 1 of the API.

Routes are declared in the static ``ROUTES`` table: method, path, the
endpoint function and an optional validation ruleset.  ``build_router``
turns every entry into a FastAPI route whose request flows through the
same steps:

1. log the request,
2. decode the JSON body,
3. validate it if the route has a ruleset (422 on failure, the endpoint
   is not called),
4. call the endpoint,
5. render the ``Outcome`` as JSON and log the response.

Anything raised along the way is logged and answered with a generic 500,
so every request ends with a JSON body.
"""

import json
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Optional

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from user_api.app.core.request_logging import RequestLogger
from user_api.app.schemas.user import SQLITE_MAX_INTEGER
from user_api.app.services.outcome import ErrorKind, Outcome
from user_api.app.services.user_handler import UserHandler
from user_api.app.services.validation import Invalid, Ruleset, validate

from .endpoints import users
from .endpoints.users import Call


logger = logging.getLogger(__name__)

# Anything above the largest SQLite integer addresses no row.
MAX_ID = SQLITE_MAX_INTEGER

Endpoint = Callable[[UserHandler, Call], Awaitable[Outcome]]


@dataclass(frozen=True)
class Route:
    method: str
    path: str
    endpoint: Endpoint
    ruleset: Optional[Ruleset] = None

    @property
    def name(self) -> str:
        return self.endpoint.__name__


ROUTES: List[Route] = [
    Route("GET", "/users", users.list_users),
    Route("GET", "/users/{user_id}", users.get_user),
    Route("POST", "/users", users.create_user, Ruleset.CREATE),
    Route("PUT", "/users/{user_id}", users.update_user, Ruleset.UPDATE),
    Route("DELETE", "/users/{user_id}", users.delete_user),
]


def parse_id(raw: Optional[str]) -> Optional[int]:
    """Convert a path id to ``int``; ``None`` if it cannot name a user."""
    if raw is None or not (raw.isascii() and raw.isdigit()):
        return None
    value = int(raw)
    return value if value <= MAX_ID else None


async def read_payload(request: Request) -> Dict[str, Any]:
    """Decode the request body as a JSON object.

    Empty bodies, malformed JSON and non-object documents all yield an
    empty payload, which the create ruleset then rejects field by field.
    """
    if request.method == "GET":
        return {}
    raw = await request.body()
    if not raw:
        return {}
    try:
        payload = json.loads(raw)
    except ValueError:
        return {}
    return payload if isinstance(payload, dict) else {}


async def run_route(
    route: Route,
    request: Request,
    payload: Dict[str, Any],
    handler: UserHandler,
    validation_message: str,
) -> Outcome:
    """Validate (if required) and call the endpoint of ``route``."""
    try:
        call = Call(user_id=parse_id(request.path_params.get("user_id")))
        if route.ruleset is not None:
            result = await validate(route.ruleset, payload, handler.store, user_id=call.user_id)
            if isinstance(result, Invalid):
                return Outcome.invalid(validation_message, result.errors)
            call.data = result.data
        return await route.endpoint(handler, call)
    except Exception:
        logger.exception("Unhandled error in %s %s", route.method, route.path)
        return Outcome.error(ErrorKind.UNHANDLED, "Internal server error")


def _make_endpoint(
    route: Route,
    handler: UserHandler,
    request_logger: RequestLogger,
    validation_message: str,
) -> Callable[[Request], Awaitable[JSONResponse]]:
    async def endpoint(request: Request) -> JSONResponse:
        payload = await read_payload(request)
        request_logger.log_request(request, payload)
        outcome = await run_route(route, request, payload, handler, validation_message)
        response = JSONResponse(outcome.body, status_code=outcome.status_code)
        request_logger.log_response(request, response.status_code, response.body.decode("utf-8"))
        return response

    endpoint.__name__ = route.name
    return endpoint


def build_router(
    handler: UserHandler,
    request_logger: RequestLogger,
    validation_message: str = "Validation failed",
    routes: Optional[List[Route]] = None,
) -> APIRouter:
    """Create an ``APIRouter`` serving ``routes`` (default: ``ROUTES``)."""
    router = APIRouter()
    for route in routes if routes is not None else ROUTES:
        router.add_api_route(
            route.path,
            _make_endpoint(route, handler, request_logger, validation_message),
            methods=[route.method],
            name=route.name,
            tags=["users"],
        )
    return router
