"""
Rule-based validation of user payloads.

``validate`` checks a request payload against one of two rulesets and
returns either ``Valid`` with the clean, allow-listed fields or
``Invalid`` with every failing field and its messages.  Field rules live
on the pydantic models in ``schemas.user``; this module maps pydantic's
error types to readable messages and adds the uniqueness check, which
needs the store.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import ValidationError

from user_api.app.schemas.user import UserCreate, UserUpdate
from user_api.app.services.user_store import UserStore


class Ruleset(str, Enum):
    CREATE = "create"
    UPDATE = "update"


_MODELS = {
    Ruleset.CREATE: UserCreate,
    Ruleset.UPDATE: UserUpdate,
}

_MESSAGES = {
    "missing": "The {field} field is required.",
    # A blank string is treated as missing.
    "string_too_short": "The {field} field is required.",
    "string_type": "The {field} field must be a string.",
    "string_too_long": "The {field} field must not be greater than {max_length} characters.",
    "int_type": "The {field} field must be an integer.",
    "int_parsing": "The {field} field must be an integer.",
    "int_from_float": "The {field} field must be an integer.",
    "greater_than_equal": "The {field} field must be at least {ge}.",
    "less_than_equal": "The {field} field must not be greater than {le}.",
    "email": "The {field} field must be a valid email address.",
    "unique": "The {field} has already been taken.",
}


@dataclass
class Valid:
    data: Dict[str, Any]


@dataclass
class Invalid:
    errors: Dict[str, List[str]] = field(default_factory=dict)


ValidationResult = Union[Valid, Invalid]


def error_message(error_type: str, field_name: str, **ctx: Any) -> str:
    """Render the message for one failed rule."""
    template = _MESSAGES.get(error_type, "The {field} field is invalid.")
    return template.format(field=field_name, **ctx)


def unique_violation(field_name: str = "email") -> Invalid:
    return Invalid({field_name: [error_message("unique", field_name)]})


def _collect(exc: ValidationError) -> Dict[str, List[str]]:
    errors: Dict[str, List[str]] = {}
    for err in exc.errors():
        field_name = str(err["loc"][0]) if err["loc"] else "payload"
        message = error_message(err["type"], field_name, **err.get("ctx", {}))
        errors.setdefault(field_name, []).append(message)
    return errors


async def validate(
    ruleset: Union[Ruleset, str],
    payload: Dict[str, Any],
    store: UserStore,
    user_id: Optional[int] = None,
) -> ValidationResult:
    """Validate ``payload`` against ``ruleset``.

    Parameters
    ----------
    ruleset : Ruleset | str
        ``"create"`` or ``"update"``.
    payload : dict
        Decoded request body.  Keys other than name, email and age are
        ignored.
    store : UserStore
        Used for the e-mail uniqueness lookup.
    user_id : Optional[int]
        ID of the user being updated; excluded from the uniqueness check.

    Returns
    -------
    Valid | Invalid
        ``Valid.data`` only contains the fields present in the payload.
    """
    model = _MODELS[Ruleset(ruleset)]
    errors: Dict[str, List[str]] = {}
    data: Dict[str, Any] = {}
    try:
        data = model.model_validate(payload).model_dump(exclude_unset=True)
    except ValidationError as exc:
        errors = _collect(exc)

    # Uniqueness is only meaningful once the address itself is well formed.
    if "email" in payload and "email" not in errors:
        email = data.get("email", str(payload["email"]).strip())
        if await store.email_taken(email, exclude_id=user_id):
            errors.setdefault("email", []).append(error_message("unique", "email"))

    if errors:
        return Invalid(errors)
    return Valid(data)
